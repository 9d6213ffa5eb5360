"""
Loading, enrichment and run logging.
"""
