"""
Pytest configuration and fixtures for the ownership pipeline tests.

Fixtures provide:
- Raw records and relation builders
- A small French media ownership dataset
- Raw data directories written to tmp_path
- Isolated snapshot and logs databases
"""

import json
import os
import sys

import pytest

# Add src/ to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src'))

from processors.loader import Dataset
from schemas.raw import RawMedia, RawOrganisation, RawPersonne, RawRelation


def rel(origine, cible, valeur='100%', qualificatif='égal à'):
    """Build a raw relation."""
    return RawRelation(origine=origine, cible=cible, valeur=valeur, qualificatif=qualificatif)


def personne(nom, **ranks):
    return RawPersonne.model_validate({'Nom': nom, **ranks})


def media(nom, type='Quotidien', prix='Payant', disparu=''):
    return RawMedia.model_validate({
        'Nom': nom, 'Type': type, 'Periodicite': 'Quotidien',
        'Echelle': 'National', 'Prix': prix, 'Disparu': disparu
    })


def organisation(nom, commentaire=''):
    return RawOrganisation(nom=nom, commentaire=commentaire)


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@pytest.fixture
def le_monde_dataset():
    """
    Xavier Niel -> NJJ Presse -> Le Monde libre -> Le Monde, plus a direct owner
    and a second media held by the holding.
    """
    return Dataset(
        personnes=(
            personne('Xavier Niel', rangChallenges2024='11', milliardaireForbes2024='oui'),
            personne('Matthieu Pigasse', rangChallenges2024=''),
        ),
        medias=(
            media('Le Monde'),
            media('Courrier international', type='Hebdomadaire'),
            media('Télérama', type='Hebdomadaire'),
            media('Orphelin', prix='Gratuit', disparu='oui'),
        ),
        organisations=(
            organisation('NJJ Presse', 'Holding de Xavier Niel'),
            organisation('Le Monde libre'),
            organisation('Groupe Le Monde'),
        ),
        personne_media=(
            rel('Matthieu Pigasse', 'Télérama', '10%'),
        ),
        personne_organisation=(
            rel('Xavier Niel', 'NJJ Presse', '100%'),
        ),
        organisation_organisation=(
            rel('NJJ Presse', 'Le Monde libre', '28%'),
            rel('Le Monde libre', 'Groupe Le Monde', '72.5%'),
        ),
        organisation_media=(
            rel('Le Monde libre', 'Le Monde', '100%'),
            rel('Groupe Le Monde', 'Courrier international', '100%'),
            rel('Groupe Le Monde', 'Télérama', '90%'),
        )
    )


def write_json(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False), encoding='utf-8')


@pytest.fixture
def raw_data_dir(tmp_path):
    """A raw data directory in the layout written by the ingestion step."""
    root = tmp_path / 'dist'
    write_json(root / 'main' / 'personnes.json', [
        {'Nom': 'Xavier Niel', 'rangChallenges2024': '11', 'milliardaireForbes2024': 'oui',
         'rangChallenges2023': '', 'milliardaireForbes2023': '',
         'rangChallenges2022': 'n.c.', 'milliardaireForbes2022': '',
         'rangChallenges2021': '9', 'milliardaireForbes2021': 'oui'},
        {'Nom': ''},
    ])
    write_json(root / 'main' / 'medias.json', [
        {'Nom': 'Le Monde', 'Type': 'Quotidien', 'Periodicite': 'Quotidien',
         'Echelle': 'National', 'Prix': 'Payant', 'Disparu': ''},
    ])
    write_json(root / 'main' / 'organisations.json', [
        {'nom': 'NJJ Presse', 'commentaire': ''},
        {'nom': 'Le Monde libre', 'commentaire': 'Holding du Monde'},
    ])
    write_json(root / 'detailed' / 'personne-organisation.json', [
        {'id': '1', 'origine': 'Xavier Niel', 'qualificatif': 'égal à', 'valeur': '100%', 'cible': 'NJJ Presse'},
    ])
    write_json(root / 'detailed' / 'organisation-organisation.json', [
        {'id': '2', 'origine': 'NJJ Presse', 'qualificatif': 'égal à', 'valeur': '28%', 'cible': 'Le Monde libre'},
        {'id': '', 'origine': '', 'qualificatif': '', 'valeur': '', 'cible': ''},
    ])
    write_json(root / 'detailed' / 'organisation-media.json', [
        {'id': '3', 'origine': 'le monde libre', 'qualificatif': 'égal à', 'valeur': '100%', 'cible': 'le monde'},
    ])
    # personne-media.json intentionally absent
    return root


@pytest.fixture
def isolated_settings(tmp_path, monkeypatch):
    """Point every settings path at tmp_path."""
    import settings

    monkeypatch.setattr(settings, 'SNAPSHOT_DB_PATH', str(tmp_path / 'data' / 'snapshots.db'))
    monkeypatch.setattr(settings, 'LOGS_DB_PATH', str(tmp_path / 'data' / 'logs.db'))
    monkeypatch.setattr(settings, 'DATA_INPUT_DIR', str(tmp_path / 'dist'))
    monkeypatch.setattr(settings, 'SNAPSHOT_OUTPUT_DIR', str(tmp_path / 'dist' / 'enriched'))
    return settings
