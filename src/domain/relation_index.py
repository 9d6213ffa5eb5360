"""
Bidirectional lookup indices over the raw ownership edges.

Every relation list is indexed twice:

- by target ("who owns this entity?")
- by origin ("what does this entity own?")

With four relation kinds that gives eight mappings. Names are the only
identity the data has, so keys are case-folded at index time while the stored
relations keep the text they were loaded with. Lookups never fail: an unknown
name simply has no relations.
"""

import enum
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from schemas.raw import RawRelation


def name_key(name: str) -> str:
    """Join key for an entity name."""
    return name.casefold()


class RelationKind(enum.Enum):
    """The four kinds of ownership edges, named origin-target."""
    PERSONNE_MEDIA = "personne-media"
    PERSONNE_ORGANISATION = "personne-organisation"
    ORGANISATION_ORGANISATION = "organisation-organisation"
    ORGANISATION_MEDIA = "organisation-media"


class RelationIndex:
    """Read-only by-target / by-origin indices for each relation kind."""

    def __init__(
        self,
        by_target: Dict[RelationKind, Dict[str, Tuple[RawRelation, ...]]],
        by_origin: Dict[RelationKind, Dict[str, Tuple[RawRelation, ...]]],
        sizes: Dict[RelationKind, int]
    ):
        self._by_target = by_target
        self._by_origin = by_origin
        self._sizes = sizes

    @classmethod
    def build(
        cls,
        personne_media: Iterable[RawRelation] = (),
        personne_organisation: Iterable[RawRelation] = (),
        organisation_organisation: Iterable[RawRelation] = (),
        organisation_media: Iterable[RawRelation] = ()
    ) -> "RelationIndex":
        """
        Build the eight mappings from the four raw relation lists.

        Input order is preserved inside every bucket so that enrichment output
        is reproducible run after run.

        Args:
            personne_media: person -> media edges
            personne_organisation: person -> organisation edges
            organisation_organisation: organisation -> organisation edges
            organisation_media: organisation -> media edges

        Returns:
            RelationIndex
        """
        sources = {
            RelationKind.PERSONNE_MEDIA: personne_media,
            RelationKind.PERSONNE_ORGANISATION: personne_organisation,
            RelationKind.ORGANISATION_ORGANISATION: organisation_organisation,
            RelationKind.ORGANISATION_MEDIA: organisation_media,
        }

        by_target = {}
        by_origin = {}
        sizes = {}

        for kind, relations in sources.items():
            targets: Dict[str, List[RawRelation]] = defaultdict(list)
            origins: Dict[str, List[RawRelation]] = defaultdict(list)
            count = 0

            for rel in relations:
                targets[name_key(rel.cible)].append(rel)
                origins[name_key(rel.origine)].append(rel)
                count += 1

            # Freeze buckets: the index is shared by every enrichment pass
            by_target[kind] = {key: tuple(rels) for key, rels in targets.items()}
            by_origin[kind] = {key: tuple(rels) for key, rels in origins.items()}
            sizes[kind] = count

        return cls(by_target, by_origin, sizes)

    def by_target(self, kind: RelationKind, name: str) -> Tuple[RawRelation, ...]:
        """Relations of `kind` pointing at `name` (its owners)."""
        return self._by_target[kind].get(name_key(name), ())

    def by_origin(self, kind: RelationKind, name: str) -> Tuple[RawRelation, ...]:
        """Relations of `kind` starting at `name` (what it owns)."""
        return self._by_origin[kind].get(name_key(name), ())

    def size(self, kind: RelationKind) -> int:
        """Number of relations of `kind` that were indexed."""
        return self._sizes[kind]

    def __repr__(self):
        counts = ", ".join(f"{kind.value}={self._sizes[kind]}" for kind in RelationKind)
        return f"<RelationIndex({counts})>"


class NameDirectory:
    """
    Canonical display names for one entity kind.

    Relations may spell a name with different casing than the entity list;
    the entity list wins for display.
    """

    def __init__(self, names: Sequence[str]):
        self._names: Dict[str, str] = {}
        for name in names:
            # First occurrence wins on collisions
            self._names.setdefault(name_key(name), name)

    def display(self, name: str) -> str:
        """Canonical casing of `name`, or `name` itself when it is not listed."""
        return self._names.get(name_key(name), name)

    def get(self, name: str) -> Optional[str]:
        return self._names.get(name_key(name))

    def __contains__(self, name: str) -> bool:
        return name_key(name) in self._names

    def __len__(self):
        return len(self._names)
