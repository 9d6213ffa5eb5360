"""
Schemas for raw ingestion rows and enriched snapshot records.
"""

from .raw import RawPersonne, RawMedia, RawOrganisation, RawRelation, RANKING_YEARS
from .enriched import Owner, UltimateOwner, HeldStake, HeldMedia, PersonRankings, EnrichedMedia, EnrichedPerson, EnrichedOrganisation

__all__ = ['RawPersonne', 'RawMedia', 'RawOrganisation', 'RawRelation', 'RANKING_YEARS', 'Owner', 'UltimateOwner', 'HeldStake', 'HeldMedia', 'PersonRankings', 'EnrichedMedia', 'EnrichedPerson', 'EnrichedOrganisation']
