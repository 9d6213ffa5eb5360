"""
Ownership graph indexing, chain resolution and snapshot statistics.
"""
