"""
CLI command groups.
"""
