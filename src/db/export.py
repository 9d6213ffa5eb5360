"""
Snapshot writer.

Serializes the enriched collections to the directory the serving layer reads:

    <output_dir>/medias.json
    <output_dir>/personnes.json
    <output_dir>/organisations.json
    <output_dir>/manifest.json

Every collection is serialized in memory before any file is touched, and each
file is swapped in with os.replace so a reader never sees a half-written
file. The data files only depend on the input, so identical runs produce
byte-identical files; the version and timestamp live in the manifest.
"""

import hashlib
import json
import os
import tempfile
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.database import Database
from db.models import Snapshot
from processors.enrich import EnrichmentResult


COLLECTIONS = ('medias', 'personnes', 'organisations')
MANIFEST_FILE = 'manifest.json'


class SnapshotError(Exception):
    """Raised when a snapshot cannot be serialized, written or read back."""
    pass


@dataclass
class SnapshotManifest:
    """Description of a written snapshot."""
    version: int
    created_at: str
    output_dir: str
    counts: Dict[str, int] = field(default_factory=dict)
    checksums: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return asdict(self)


def collection_filename(name: str) -> str:
    return f"{name}.json"


def serialize_collection(records: List) -> bytes:
    """
    Serialize enriched records to UTF-8 JSON.

    Raises:
        SnapshotError: If a record cannot be represented as strict JSON
    """
    try:
        payload = json.dumps(
            [record.to_json_dict() for record in records],
            ensure_ascii=False,
            indent=2,
            allow_nan=False
        )
    except (TypeError, ValueError) as e:
        raise SnapshotError(f"Cannot serialize snapshot: {e}")
    return (payload + "\n").encode('utf-8')


def read_manifest(output_dir) -> Optional[dict]:
    """Manifest of the snapshot currently in `output_dir`, or None."""
    path = Path(output_dir) / MANIFEST_FILE
    if not path.exists():
        return None
    try:
        with open(path, encoding='utf-8') as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SnapshotError(f"Cannot read manifest {path}: {e}")


def next_version(output_dir, session: Optional[Session] = None) -> int:
    """Previous snapshot version + 1, looking at the manifest and the database."""
    version = 0

    manifest = read_manifest(output_dir)
    if manifest is not None:
        try:
            version = int(manifest.get('version', 0))
        except (AttributeError, TypeError, ValueError):
            raise SnapshotError(f"Invalid manifest in {output_dir}: no usable version")

    if session is not None:
        latest = Database.latest_snapshot(session)
        if latest and latest.version > version:
            version = latest.version

    return version + 1


def _atomic_write(path: Path, data: bytes):
    """Write `data` next to `path` and swap it in."""
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix='.tmp')
    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def write_snapshot(
    result: EnrichmentResult,
    output_dir,
    session: Optional[Session] = None
) -> SnapshotManifest:
    """
    Write a full snapshot, replacing the previous one.

    Args:
        result: Enriched collections of the run
        output_dir: Directory read by the serving layer
        session: Optional session to the snapshot database; when given the
            snapshot is also recorded there

    Returns:
        SnapshotManifest

    Raises:
        SnapshotError: On serialization, I/O or database errors
    """
    output_dir = Path(output_dir)

    # Serialize everything first: nothing is written if any collection fails
    payloads = {}
    for name, records in result.collections():
        payloads[collection_filename(name)] = serialize_collection(records)

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise SnapshotError(f"Cannot create output directory {output_dir}: {e}")

    manifest = SnapshotManifest(
        version=next_version(output_dir, session),
        created_at=datetime.utcnow().isoformat(),
        output_dir=str(output_dir),
        counts=result.counts(),
        checksums={filename: hashlib.sha256(data).hexdigest() for filename, data in payloads.items()}
    )

    try:
        for filename, data in payloads.items():
            _atomic_write(output_dir / filename, data)
        manifest_data = json.dumps(manifest.to_dict(), ensure_ascii=False, indent=2) + "\n"
        _atomic_write(output_dir / MANIFEST_FILE, manifest_data.encode('utf-8'))
    except OSError as e:
        raise SnapshotError(f"Cannot write snapshot to {output_dir}: {e}")

    if session is not None:
        try:
            session.add(Snapshot(
                version=manifest.version,
                output_dir=manifest.output_dir,
                medias_count=manifest.counts.get('medias', 0),
                personnes_count=manifest.counts.get('personnes', 0),
                organisations_count=manifest.counts.get('organisations', 0),
                checksums=manifest.checksums,
                created_at=datetime.fromisoformat(manifest.created_at)
            ))
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise SnapshotError(f"Snapshot written but not recorded in database: {e}")

    return manifest


def load_snapshot(output_dir) -> Dict[str, list]:
    """
    Read the three enriched collections back from `output_dir`.

    Raises:
        SnapshotError: If a collection file is missing or invalid
    """
    output_dir = Path(output_dir)
    collections = {}

    for name in COLLECTIONS:
        path = output_dir / collection_filename(name)
        if not path.exists():
            raise SnapshotError(f"Snapshot file not found: {path}")
        try:
            with open(path, encoding='utf-8') as f:
                collections[name] = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise SnapshotError(f"Cannot read {path}: {e}")

    return collections
