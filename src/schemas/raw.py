"""
Pydantic schemas for the raw ingestion files.

The ingestion step writes one JSON array per TSV sheet. Field names are kept
exactly as they appear in the sheets (French, mixed casing), so every model
exposes a snake_case attribute and reads the original key through an alias.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


RANKING_YEARS = (2024, 2023, 2022, 2021)


class RawRecord(BaseModel):
    """Base for raw rows: tolerant of extra columns, immutable once loaded."""

    model_config = ConfigDict(extra='ignore', frozen=True, populate_by_name=True)


class RawPersonne(RawRecord):
    """A natural person, with the yearly rankings passed through as strings."""

    nom: str = Field(alias='Nom')

    rang_challenges_2024: str = Field(default='', alias='rangChallenges2024')
    milliardaire_forbes_2024: str = Field(default='', alias='milliardaireForbes2024')
    rang_challenges_2023: str = Field(default='', alias='rangChallenges2023')
    milliardaire_forbes_2023: str = Field(default='', alias='milliardaireForbes2023')
    rang_challenges_2022: str = Field(default='', alias='rangChallenges2022')
    milliardaire_forbes_2022: str = Field(default='', alias='milliardaireForbes2022')
    rang_challenges_2021: str = Field(default='', alias='rangChallenges2021')
    milliardaire_forbes_2021: str = Field(default='', alias='milliardaireForbes2021')

    def challenges_rank(self, year: int) -> str:
        return getattr(self, f'rang_challenges_{year}')

    def forbes_flag(self, year: int) -> str:
        return getattr(self, f'milliardaire_forbes_{year}')


class RawMedia(RawRecord):
    """A media outlet as listed in medias.tsv."""

    nom: str = Field(alias='Nom')
    type: str = Field(default='', alias='Type')
    periodicite: str = Field(default='', alias='Periodicite')
    echelle: str = Field(default='', alias='Echelle')
    prix: str = Field(default='', alias='Prix')
    disparu: str = Field(default='', alias='Disparu')


class RawOrganisation(RawRecord):
    """An organisation (company, fund, holding...). Keys are lowercase in the source."""

    nom: str
    commentaire: str = ''


class RawRelation(RawRecord):
    """
    A directed ownership edge.

    `origine` owns `cible`. `valeur` is an opaque display string such as
    "28.00%"; nothing in the pipeline parses it.
    """

    id: Optional[str] = None
    origine: str
    qualificatif: str = ''
    valeur: str = ''
    cible: str
    commentaire: Optional[str] = None
