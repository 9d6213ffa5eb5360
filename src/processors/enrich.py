"""
Enrichment of media outlets, persons and organisations.

All three passes read the same relation indices and never modify them:

- media: direct owners (persons then organisations) and the ultimate owner
  chains resolved down to natural persons
- persons: media held directly, organisations controlled, and media held
  through those organisations (at most two organisational hops)
- organisations: direct owners, direct subsidiaries and media held directly
"""

import math
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from domain.ownership_chain import OwnershipChainResolver
from domain.relation_index import NameDirectory, RelationIndex, RelationKind
from processors.loader import Dataset
from schemas.enriched import (
    EnrichedMedia, EnrichedOrganisation, EnrichedPerson, HeldMedia, HeldStake,
    Owner, PersonRankings, UltimateOwner
)
from schemas.raw import RANKING_YEARS, RawMedia, RawPersonne


# Separator used in `via` when a media is held through a subsidiary
VIA_SEPARATOR = ' → '

_LEADING_INTEGER = re.compile(r'\s*([+-]?[0-9]+)')


def parse_rank(value: str) -> Optional[Union[int, float]]:
    """
    Parse a Challenges ranking cell.

    Empty cells mean "not ranked" and give None. Otherwise the leading integer
    is read, ignoring anything after it ("12e" -> 12). A cell without a leading
    integer gives NaN rather than None.

    Args:
        value: Raw cell text

    Returns:
        int, None or float('nan')
    """
    if not value:
        return None
    match = _LEADING_INTEGER.match(value)
    if not match:
        return math.nan
    return int(match.group(1))


def parse_rankings(personne: RawPersonne) -> PersonRankings:
    """Rankings block of a person for every tracked year."""
    values = {}
    for year in RANKING_YEARS:
        values[f'challenges_{year}'] = parse_rank(personne.challenges_rank(year))
        values[f'forbes_{year}'] = personne.forbes_flag(year) != ''
    return PersonRankings(**values)


@dataclass
class EnrichmentContext:
    """Indices and name directories shared by the three enrichment passes."""
    index: RelationIndex
    personnes: NameDirectory
    medias: NameDirectory
    organisations: NameDirectory
    media_types: Dict[str, str]
    resolver: OwnershipChainResolver

    @classmethod
    def from_dataset(cls, dataset: Dataset, index: Optional[RelationIndex] = None) -> "EnrichmentContext":
        index = index or dataset.build_index()
        personnes = NameDirectory([p.nom for p in dataset.personnes])
        medias = NameDirectory([m.nom for m in dataset.medias])
        organisations = NameDirectory([o.nom for o in dataset.organisations])

        media_types = {}
        for media in dataset.medias:
            media_types.setdefault(medias.display(media.nom), media.type)

        return cls(
            index=index,
            personnes=personnes,
            medias=medias,
            organisations=organisations,
            media_types=media_types,
            resolver=OwnershipChainResolver(index, personnes, organisations)
        )

    def media_type(self, name: str) -> str:
        """Type of a media outlet, '' when the media is not listed."""
        return self.media_types.get(self.medias.display(name), '')

    def held_media(self, rel, via: Optional[str] = None) -> HeldMedia:
        return HeldMedia(
            nom=self.medias.display(rel.cible),
            type=self.media_type(rel.cible),
            qualificatif=rel.qualificatif,
            valeur=rel.valeur,
            via=via
        )

    def direct_owners(self, name: str, person_kind: RelationKind, org_kind: RelationKind) -> List[Owner]:
        """Person owners first, then organisation owners, each in input order."""
        owners = []
        for rel in self.index.by_target(person_kind, name):
            owners.append(Owner(
                nom=self.personnes.display(rel.origine),
                kind='personne',
                qualificatif=rel.qualificatif,
                valeur=rel.valeur
            ))
        for rel in self.index.by_target(org_kind, name):
            owners.append(Owner(
                nom=self.organisations.display(rel.origine),
                kind='organisation',
                qualificatif=rel.qualificatif,
                valeur=rel.valeur
            ))
        return owners


def enrich_media(media: RawMedia, context: EnrichmentContext) -> EnrichedMedia:
    proprietaires = context.direct_owners(
        media.nom, RelationKind.PERSONNE_MEDIA, RelationKind.ORGANISATION_MEDIA
    )

    chaine = [
        UltimateOwner(nom=path.person, chemin=list(path.path), valeur_finale=path.final_value)
        for path in context.resolver.resolve_ultimate_owners(media.nom)
    ]

    return EnrichedMedia(
        nom=media.nom,
        type=media.type,
        periodicite=media.periodicite,
        echelle=media.echelle,
        prix=media.prix,
        disparu=media.disparu == 'oui',
        proprietaires=proprietaires,
        chaine_proprietaires=chaine
    )


def enrich_personne(personne: RawPersonne, context: EnrichmentContext) -> EnrichedPerson:
    """
    Enrich one person.

    Media held through organisations are collected from the organisations the
    person controls directly and, one level further, from their direct
    subsidiaries. Deeper holdings are not followed here; the media side
    resolves chains of any depth.
    """
    index = context.index

    medias_directs = [
        context.held_media(rel)
        for rel in index.by_origin(RelationKind.PERSONNE_MEDIA, personne.nom)
    ]

    controlled = index.by_origin(RelationKind.PERSONNE_ORGANISATION, personne.nom)
    organisations = [
        HeldStake(nom=context.organisations.display(rel.cible), qualificatif=rel.qualificatif, valeur=rel.valeur)
        for rel in controlled
    ]

    medias_via = []
    for org_rel in controlled:
        organisation = context.organisations.display(org_rel.cible)

        for media_rel in index.by_origin(RelationKind.ORGANISATION_MEDIA, org_rel.cible):
            medias_via.append(context.held_media(media_rel, via=organisation))

        for sub_rel in index.by_origin(RelationKind.ORGANISATION_ORGANISATION, org_rel.cible):
            subsidiary = context.organisations.display(sub_rel.cible)
            for media_rel in index.by_origin(RelationKind.ORGANISATION_MEDIA, sub_rel.cible):
                medias_via.append(context.held_media(
                    media_rel, via=f"{organisation}{VIA_SEPARATOR}{subsidiary}"
                ))

    return EnrichedPerson(
        nom=personne.nom,
        classements=parse_rankings(personne),
        medias_directs=medias_directs,
        medias_via_organisations=medias_via,
        organisations=organisations
    )


def enrich_organisation(organisation, context: EnrichmentContext) -> EnrichedOrganisation:
    index = context.index

    proprietaires = context.direct_owners(
        organisation.nom, RelationKind.PERSONNE_ORGANISATION, RelationKind.ORGANISATION_ORGANISATION
    )

    filiales = [
        HeldStake(nom=context.organisations.display(rel.cible), qualificatif=rel.qualificatif, valeur=rel.valeur)
        for rel in index.by_origin(RelationKind.ORGANISATION_ORGANISATION, organisation.nom)
    ]

    medias = [
        context.held_media(rel)
        for rel in index.by_origin(RelationKind.ORGANISATION_MEDIA, organisation.nom)
    ]

    return EnrichedOrganisation(
        nom=organisation.nom,
        commentaire=organisation.commentaire,
        proprietaires=proprietaires,
        filiales=filiales,
        medias=medias
    )


def enrich_medias(dataset: Dataset, context: EnrichmentContext) -> List[EnrichedMedia]:
    return [enrich_media(media, context) for media in dataset.medias]


def enrich_personnes(dataset: Dataset, context: EnrichmentContext) -> List[EnrichedPerson]:
    return [enrich_personne(personne, context) for personne in dataset.personnes]


def enrich_organisations(dataset: Dataset, context: EnrichmentContext) -> List[EnrichedOrganisation]:
    return [enrich_organisation(organisation, context) for organisation in dataset.organisations]


@dataclass
class EnrichmentResult:
    """The three enriched collections of a run, plus counters for reporting."""
    medias: List[EnrichedMedia] = field(default_factory=list)
    personnes: List[EnrichedPerson] = field(default_factory=list)
    organisations: List[EnrichedOrganisation] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)

    def collections(self) -> Tuple[Tuple[str, list], ...]:
        """(name, records) pairs in snapshot order."""
        return (
            ('medias', self.medias),
            ('personnes', self.personnes),
            ('organisations', self.organisations),
        )

    def counts(self) -> Dict[str, int]:
        return {name: len(records) for name, records in self.collections()}


def run_enrichment(dataset: Dataset) -> EnrichmentResult:
    """
    Build the indices once and run the three enrichment passes.

    Args:
        dataset: Raw input loaded by processors.loader

    Returns:
        EnrichmentResult with every collection fully built in memory
    """
    context = EnrichmentContext.from_dataset(dataset)

    medias = enrich_medias(dataset, context)
    personnes = enrich_personnes(dataset, context)
    organisations = enrich_organisations(dataset, context)

    stats = dataset.counts()
    stats['ultimate_owner_paths'] = sum(len(m.chaine_proprietaires) for m in medias)
    stats['medias_without_owner'] = sum(1 for m in medias if not m.proprietaires)
    stats['personnes_with_media'] = sum(
        1 for p in personnes if p.medias_directs or p.medias_via_organisations
    )

    return EnrichmentResult(
        medias=medias,
        personnes=personnes,
        organisations=organisations,
        stats=stats
    )
