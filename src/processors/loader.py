"""
Raw data loader.

Reads the JSON arrays produced by the ingestion step:

    <input_dir>/main/personnes.json
    <input_dir>/main/medias.json
    <input_dir>/main/organisations.json
    <input_dir>/detailed/personne-media.json
    <input_dir>/detailed/personne-organisation.json
    <input_dir>/detailed/organisation-organisation.json
    <input_dir>/detailed/organisation-media.json

A missing relation file means "no relations of that kind". A missing entity
file, a file that cannot be read or parsed, or a row that does not validate
aborts the run with LoaderError.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from domain.relation_index import RelationIndex, RelationKind
from schemas.raw import RawMedia, RawOrganisation, RawPersonne, RawRelation


MAIN_DIR = 'main'
DETAILED_DIR = 'detailed'

ENTITY_FILES = {
    'personnes': 'personnes.json',
    'medias': 'medias.json',
    'organisations': 'organisations.json',
}

RELATION_FILES = {
    RelationKind.PERSONNE_MEDIA: 'personne-media.json',
    RelationKind.PERSONNE_ORGANISATION: 'personne-organisation.json',
    RelationKind.ORGANISATION_ORGANISATION: 'organisation-organisation.json',
    RelationKind.ORGANISATION_MEDIA: 'organisation-media.json',
}

T = TypeVar('T', bound=BaseModel)


class LoaderError(Exception):
    """Raised when raw input files cannot be read or validated."""
    pass


@dataclass(frozen=True)
class Dataset:
    """Immutable snapshot of the raw input of one pipeline run."""
    personnes: Tuple[RawPersonne, ...] = ()
    medias: Tuple[RawMedia, ...] = ()
    organisations: Tuple[RawOrganisation, ...] = ()
    personne_media: Tuple[RawRelation, ...] = ()
    personne_organisation: Tuple[RawRelation, ...] = ()
    organisation_organisation: Tuple[RawRelation, ...] = ()
    organisation_media: Tuple[RawRelation, ...] = ()

    def relations(self, kind: RelationKind) -> Tuple[RawRelation, ...]:
        return {
            RelationKind.PERSONNE_MEDIA: self.personne_media,
            RelationKind.PERSONNE_ORGANISATION: self.personne_organisation,
            RelationKind.ORGANISATION_ORGANISATION: self.organisation_organisation,
            RelationKind.ORGANISATION_MEDIA: self.organisation_media,
        }[kind]

    def build_index(self) -> RelationIndex:
        """Relation indices shared by all enrichment passes."""
        return RelationIndex.build(
            personne_media=self.personne_media,
            personne_organisation=self.personne_organisation,
            organisation_organisation=self.organisation_organisation,
            organisation_media=self.organisation_media
        )

    def counts(self) -> Dict[str, int]:
        counts = {
            'personnes': len(self.personnes),
            'medias': len(self.medias),
            'organisations': len(self.organisations),
        }
        for kind in RelationKind:
            counts[kind.value] = len(self.relations(kind))
        return counts


def read_json_array(path: Path) -> List[dict]:
    """
    Read a JSON file whose top-level value must be an array of objects.

    Args:
        path: File to read

    Returns:
        List of rows

    Raises:
        LoaderError: If the file is unreadable, not JSON, or not an array
    """
    try:
        with open(path, encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise LoaderError(f"Cannot read {path}: {e}")
    except json.JSONDecodeError as e:
        raise LoaderError(f"Invalid JSON in {path}: {e}")

    if not isinstance(data, list):
        raise LoaderError(f"Expected a JSON array in {path}, got {type(data).__name__}")

    return data


def parse_rows(rows: List[dict], model: Type[T], source: str) -> Tuple[T, ...]:
    """Validate raw rows against `model`."""
    parsed = []
    for position, row in enumerate(rows):
        try:
            parsed.append(model.model_validate(row))
        except ValidationError as e:
            raise LoaderError(f"Invalid row {position} in {source}: {e}")
    return tuple(parsed)


def parse_relations(rows: List[dict], source: str) -> Tuple[RawRelation, ...]:
    """
    Validate relation rows, skipping the blank lines the TSV export leaves behind.
    """
    rows = [
        row for row in rows
        if not (isinstance(row, dict) and (_is_blank(row.get('origine')) or _is_blank(row.get('cible'))))
    ]
    return parse_rows(rows, RawRelation, source)


def load_dataset(input_dir) -> Dataset:
    """
    Load the raw entity and relation lists.

    Args:
        input_dir: Directory holding the main/ and detailed/ folders

    Returns:
        Dataset

    Raises:
        LoaderError: On missing entity files or unreadable/invalid content
    """
    input_dir = Path(input_dir)
    main_dir = input_dir / MAIN_DIR
    detailed_dir = input_dir / DETAILED_DIR

    entities = {}
    models = {'personnes': RawPersonne, 'medias': RawMedia, 'organisations': RawOrganisation}
    for key, filename in ENTITY_FILES.items():
        path = main_dir / filename
        if not path.exists():
            raise LoaderError(f"Entity file not found: {path}")
        rows = [row for row in read_json_array(path) if _has_name(row)]
        entities[key] = parse_rows(rows, models[key], str(path))

    relations = {}
    for kind, filename in RELATION_FILES.items():
        path = detailed_dir / filename
        if not path.exists():
            relations[kind] = ()
            continue
        relations[kind] = parse_relations(read_json_array(path), str(path))

    return Dataset(
        personnes=entities['personnes'],
        medias=entities['medias'],
        organisations=entities['organisations'],
        personne_media=relations[RelationKind.PERSONNE_MEDIA],
        personne_organisation=relations[RelationKind.PERSONNE_ORGANISATION],
        organisation_organisation=relations[RelationKind.ORGANISATION_ORGANISATION],
        organisation_media=relations[RelationKind.ORGANISATION_MEDIA]
    )


def _has_name(row) -> bool:
    """Entity rows carry their name under `Nom` (persons, media) or `nom` (organisations)."""
    if not isinstance(row, dict):
        return True
    return not _is_blank(row.get('Nom', row.get('nom')))


def _is_blank(value) -> bool:
    """Missing or whitespace-only. Any other value is left to validation."""
    return value is None or (isinstance(value, str) and not value.strip())
