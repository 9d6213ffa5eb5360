"""
SQLAlchemy models for snapshot bookkeeping and run logs.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, Index
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Snapshot(Base):
    """An enriched snapshot written to disk by one pipeline run."""
    __tablename__ = 'snapshots'

    id = Column(Integer, primary_key=True)
    version = Column(Integer, nullable=False, unique=True, index=True)
    output_dir = Column(Text, nullable=False)
    medias_count = Column(Integer, nullable=False, default=0)
    personnes_count = Column(Integer, nullable=False, default=0)
    organisations_count = Column(Integer, nullable=False, default=0)
    checksums = Column(JSON, nullable=True)  # {filename: sha256}
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<Snapshot(version={self.version}, medias={self.medias_count}, personnes={self.personnes_count}, organisations={self.organisations_count})>"


class EnrichmentRun(Base):
    """Execution log of an enrichment run (stored in the logs database)."""
    __tablename__ = 'enrichment_runs'

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Timing
    started_at = Column(DateTime, nullable=False, index=True)
    completed_at = Column(DateTime, nullable=True)
    duration_ms = Column(Integer, nullable=True)

    # Parameters
    input_dir = Column(Text, nullable=True)
    output_dir = Column(Text, nullable=True)

    # Results
    counts = Column(JSON, nullable=True)  # entities/relations per kind, paths resolved...
    snapshot_version = Column(Integer, nullable=True)

    # Status
    success = Column(Integer, nullable=False, default=1)  # 1 = success, 0 = error
    error_message = Column(Text, nullable=True)

    __table_args__ = (
        Index('idx_enrichment_runs_success_started', 'success', 'started_at'),
    )

    def __repr__(self):
        status = 'ok' if self.success else 'failed'
        return f"<EnrichmentRun(id={self.id}, status='{status}', duration_ms={self.duration_ms})>"
