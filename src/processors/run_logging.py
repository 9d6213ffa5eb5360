"""
Enrichment run logging.

Provides a logger class and a context manager that record every enrichment
run (timing, counts, snapshot version, errors) in the logs database.
"""

import sys
import time
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, Optional

from sqlalchemy.exc import OperationalError, SQLAlchemyError


class EnrichmentRunLogger:
    """
    Logger for enrichment runs.

    Collects what happened during a run and saves it as one EnrichmentRun row.
    """

    def __init__(
        self,
        input_dir: Optional[str] = None,
        output_dir: Optional[str] = None,
        logs_db_path: Optional[str] = None
    ):
        """
        Initialize logger.

        Args:
            input_dir: Directory the raw data was read from
            output_dir: Directory the snapshot is written to
            logs_db_path: SQLite logs database. If None, uses LOGS_DB_PATH from settings.
        """
        self.input_dir = input_dir
        self.output_dir = output_dir
        self.logs_db_path = logs_db_path

        # Timing
        self.started_at = datetime.utcnow()
        self.completed_at: Optional[datetime] = None
        self.duration_ms: Optional[int] = None

        # Results
        self.counts: Dict[str, int] = {}
        self.snapshot_version: Optional[int] = None

        # Status
        self.success: bool = True
        self.error_message: Optional[str] = None
        self.log_id: Optional[int] = None

    def set_counts(self, counts: Dict[str, int]):
        """Record entity/relation/path counters of the run."""
        self.counts = dict(counts)

    def set_snapshot_version(self, version: int):
        self.snapshot_version = version

    def mark_success(self):
        """Mark run as successful and calculate duration."""
        self.completed_at = datetime.utcnow()
        self.duration_ms = int((self.completed_at - self.started_at).total_seconds() * 1000)
        self.success = True

    def mark_error(self, error_message: str):
        """Mark run as failed with error message."""
        self.completed_at = datetime.utcnow()
        self.duration_ms = int((self.completed_at - self.started_at).total_seconds() * 1000)
        self.success = False
        self.error_message = error_message

    def save(self):
        """
        Save log entry to the logs database.

        A logging failure never interrupts the pipeline: it is reported on
        stderr. Locked databases are retried with exponential backoff.
        """
        from db import Database
        from db.models import EnrichmentRun
        from settings import LOGS_DB_PATH

        try:
            db = Database(self.logs_db_path or LOGS_DB_PATH)
        except (SQLAlchemyError, OSError) as e:
            print(f"Warning: Cannot open logs database: {e}", file=sys.stderr)
            return

        session = db.get_session()

        max_retries = 3
        retry_delay = 0.1  # 100ms

        try:
            for attempt in range(max_retries):
                try:
                    log_entry = EnrichmentRun(
                        started_at=self.started_at,
                        completed_at=self.completed_at,
                        duration_ms=self.duration_ms,
                        input_dir=self.input_dir,
                        output_dir=self.output_dir,
                        counts=self.counts if self.counts else None,
                        snapshot_version=self.snapshot_version,
                        success=1 if self.success else 0,
                        error_message=self.error_message
                    )
                    session.add(log_entry)
                    session.commit()
                    self.log_id = log_entry.id
                    break

                except OperationalError:
                    session.rollback()
                    if attempt < max_retries - 1:
                        time.sleep(retry_delay)
                        retry_delay *= 2
                        continue
                    print(f"Warning: Failed to save enrichment run log after {max_retries} attempts (database locked)", file=sys.stderr)

                except SQLAlchemyError as e:
                    session.rollback()
                    print(f"Warning: Failed to save enrichment run log: {e}", file=sys.stderr)
                    break

        finally:
            session.close()
            db.dispose()


@contextmanager
def log_enrichment_run(
    input_dir: Optional[str] = None,
    output_dir: Optional[str] = None,
    logs_db_path: Optional[str] = None
):
    """
    Context manager for logging an enrichment run.

    Marks the run successful when the block completes, failed when it raises
    (the exception is re-raised), and always saves the entry.

    Yields:
        EnrichmentRunLogger instance

    Example:
        >>> with log_enrichment_run('dist', 'dist/enriched') as run_log:
        ...     result = run_enrichment(dataset)
        ...     run_log.set_counts(result.stats)
    """
    run_log = EnrichmentRunLogger(input_dir, output_dir, logs_db_path)

    try:
        yield run_log
        run_log.mark_success()
    except Exception as e:
        run_log.mark_error(str(e))
        raise
    finally:
        run_log.save()
