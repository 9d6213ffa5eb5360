"""
Database package for snapshot bookkeeping and run logs.
"""

from .models import Base, Snapshot, EnrichmentRun
from .database import Database

__all__ = ['Base', 'Snapshot', 'EnrichmentRun', 'Database']
