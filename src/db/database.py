"""
Database connection and operations.
"""

from pathlib import Path
from typing import List, Optional
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from .models import Base, Snapshot, EnrichmentRun


class Database:
    """Database manager for snapshot bookkeeping and run logs."""

    def __init__(self, db_path: str = "data/snapshots.db"):
        """
        Initialize database connection.

        Args:
            db_path: Path to SQLite database file
        """
        # Ensure data directory exists
        db_file = Path(db_path)
        db_file.parent.mkdir(parents=True, exist_ok=True)

        self.db_path = db_path
        self.engine = create_engine(f'sqlite:///{db_path}', echo=False)
        self.SessionLocal = sessionmaker(bind=self.engine)

        # Create tables if they don't exist
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        """Get a new database session."""
        return self.SessionLocal()

    def dispose(self):
        """Release pooled connections."""
        self.engine.dispose()

    @staticmethod
    def latest_snapshot(session: Session) -> Optional[Snapshot]:
        """Most recent snapshot by version, or None."""
        return session.query(Snapshot).order_by(Snapshot.version.desc()).first()

    def list_snapshots(self, session: Session, limit: int = 20) -> List[Snapshot]:
        """Snapshots, most recent first."""
        return session.query(Snapshot).order_by(Snapshot.version.desc()).limit(limit).all()

    def list_runs(self, session: Session, limit: int = 20, failed_only: bool = False) -> List[EnrichmentRun]:
        """Enrichment runs, most recent first."""
        query = session.query(EnrichmentRun)
        if failed_only:
            query = query.filter(EnrichmentRun.success == 0)
        return query.order_by(EnrichmentRun.started_at.desc()).limit(limit).all()
