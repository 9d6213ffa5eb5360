"""
Pydantic schemas for the enriched snapshot.

These are the records the serving layer reads back from disk, so the
serialized keys (aliases) follow the published JSON format.
"""

import math
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class EnrichedRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_json_dict(self) -> dict:
        """Dump with the published keys, keeping optional keys only when set."""
        return self.model_dump(mode='json', by_alias=True, exclude_none=True)


class Owner(EnrichedRecord):
    """Direct owner of a media outlet or an organisation."""

    nom: str
    kind: Literal['personne', 'organisation'] = Field(alias='type')
    qualificatif: str
    valeur: str


class UltimateOwner(EnrichedRecord):
    """
    A natural person controlling a media outlet, with the path that leads to it.

    `chemin[0]` is the person, `chemin[-1]` is the owner directly above the
    media. `valeur_finale` is the value of that last edge, never a product of
    the stakes along the chain.
    """

    nom: str
    chemin: List[str]
    valeur_finale: str = Field(alias='valeurFinale')


class HeldStake(EnrichedRecord):
    """An organisation held by a person, or a subsidiary held by an organisation."""

    nom: str
    qualificatif: str
    valeur: str


class HeldMedia(EnrichedRecord):
    nom: str
    type: str
    qualificatif: str
    valeur: str
    via: Optional[str] = None


class PersonRankings(EnrichedRecord):
    """
    Yearly rankings of a person.

    A Challenges rank is None when the sheet cell is empty and NaN when it is
    filled with something that is not a number. NaN is written as null in the
    snapshot, which is all JSON can carry.
    """

    challenges_2024: Optional[Union[int, float]] = Field(default=None, alias='challenges2024')
    forbes_2024: bool = Field(default=False, alias='forbes2024')
    challenges_2023: Optional[Union[int, float]] = Field(default=None, alias='challenges2023')
    forbes_2023: bool = Field(default=False, alias='forbes2023')
    challenges_2022: Optional[Union[int, float]] = Field(default=None, alias='challenges2022')
    forbes_2022: bool = Field(default=False, alias='forbes2022')
    challenges_2021: Optional[Union[int, float]] = Field(default=None, alias='challenges2021')
    forbes_2021: bool = Field(default=False, alias='forbes2021')

    @field_serializer('challenges_2024', 'challenges_2023', 'challenges_2022', 'challenges_2021')
    def _serialize_rank(self, value):
        if isinstance(value, float) and math.isnan(value):
            return None
        return value

    def to_json_dict(self) -> dict:
        # Empty ranks are published as explicit nulls.
        return self.model_dump(mode='json', by_alias=True)


class EnrichedMedia(EnrichedRecord):
    nom: str
    type: str
    periodicite: str
    echelle: str
    prix: str
    disparu: bool
    proprietaires: List[Owner] = Field(default_factory=list)
    chaine_proprietaires: List[UltimateOwner] = Field(default_factory=list, alias='chaineProprietaires')


class EnrichedPerson(EnrichedRecord):
    nom: str
    classements: PersonRankings
    medias_directs: List[HeldMedia] = Field(default_factory=list, alias='mediasDirects')
    medias_via_organisations: List[HeldMedia] = Field(default_factory=list, alias='mediasViaOrganisations')
    organisations: List[HeldStake] = Field(default_factory=list)

    def to_json_dict(self) -> dict:
        data = super().to_json_dict()
        data['classements'] = self.classements.to_json_dict()
        return data


class EnrichedOrganisation(EnrichedRecord):
    nom: str
    commentaire: str
    proprietaires: List[Owner] = Field(default_factory=list)
    filiales: List[HeldStake] = Field(default_factory=list)
    medias: List[HeldMedia] = Field(default_factory=list)
