"""
Ultimate ownership resolution.

Walks the ownership graph upwards from a media outlet until natural persons
are reached, reporting every control path rather than plain reachability:

    person -> org -> ... -> org -> media

The organisation graph may contain cycles (cross-holdings). Each branch of the
walk carries its own copy of the set of organisations already on the current
path, so a cycle is cut as soon as it closes while diamond-shaped ownership
(the same person reached through two distinct chains) is reported once per
chain. There is no depth limit other than the cycle guard.

The walk uses an explicit stack instead of recursion so deep chains cannot hit
the interpreter recursion limit. Output order is the depth-first order of the
recursive definition: persons owning an organisation first, then each owning
organisation's branch in edge order.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Iterator, List, Optional, Tuple

from domain.relation_index import NameDirectory, RelationIndex, RelationKind, name_key
from schemas.raw import RawRelation


@dataclass(frozen=True)
class ClimbResult:
    """A person reached while climbing from an organisation, and how."""
    person: str
    path: Tuple[str, ...]


@dataclass(frozen=True)
class OwnershipPath:
    """
    A natural person controlling a media outlet.

    path[0] is the person and path[-1] the owner directly above the media.
    final_value is the value of the edge into the media.
    """
    person: str
    path: Tuple[str, ...]
    final_value: str


@dataclass
class _ClimbFrame:
    """One organisation being climbed; stands in for a recursive call."""
    organisation: str
    visited: FrozenSet[str]
    parents: Iterator[RawRelation]
    # Name appended to every path this frame hands back to its caller
    via: Optional[str] = None
    results: List[ClimbResult] = field(default_factory=list)


class OwnershipChainResolver:
    """Resolve the natural persons that ultimately own a media outlet."""

    def __init__(
        self,
        index: RelationIndex,
        personnes: Optional[NameDirectory] = None,
        organisations: Optional[NameDirectory] = None
    ):
        """
        Args:
            index: Relation indices built from the raw edges
            personnes: Optional directory used to display person names
                with their canonical casing
            organisations: Same for organisation names
        """
        self.index = index
        self.personnes = personnes or NameDirectory([])
        self.organisations = organisations or NameDirectory([])

    def resolve_ultimate_owners(self, media_name: str) -> List[OwnershipPath]:
        """
        Every natural person owning `media_name`, directly or through organisations.

        Args:
            media_name: Media outlet name (case-insensitive)

        Returns:
            List of OwnershipPath. Empty for unknown media.
        """
        paths = []

        for rel in self.index.by_target(RelationKind.PERSONNE_MEDIA, media_name):
            person = self.personnes.display(rel.origine)
            paths.append(OwnershipPath(person=person, path=(person,), final_value=rel.valeur))

        for rel in self.index.by_target(RelationKind.ORGANISATION_MEDIA, media_name):
            owner = self.organisations.display(rel.origine)
            for result in self.climb(rel.origine):
                paths.append(OwnershipPath(
                    person=result.person,
                    path=result.path + (owner,),
                    final_value=rel.valeur
                ))

        return paths

    def climb(self, org_name: str, visited: Optional[FrozenSet[str]] = None) -> List[ClimbResult]:
        """
        Persons reached by climbing ownership edges above `org_name`.

        Each result's path starts with the person and ends with the organisation
        directly above `org_name`; `org_name` itself is not part of the path.

        Args:
            org_name: Organisation to start from
            visited: Case-folded names already on the current path. The caller's
                set is never modified.

        Returns:
            List of ClimbResult, empty when `org_name` is already visited.
        """
        root = self._enter(org_name, visited or frozenset())
        if root is None:
            return []

        stack = [root]
        while True:
            frame = stack[-1]
            rel = next(frame.parents, None)

            if rel is None:
                # All owners of this organisation explored: return to the caller
                stack.pop()
                if not stack:
                    return frame.results
                caller = stack[-1]
                for result in frame.results:
                    caller.results.append(ClimbResult(result.person, result.path + (frame.via,)))
                continue

            child = self._enter(rel.origine, frame.visited)
            if child is None:
                # Cycle closed on the current path
                continue
            child.via = self.organisations.display(rel.origine)
            stack.append(child)

    def _enter(self, org_name: str, visited: FrozenSet[str]) -> Optional[_ClimbFrame]:
        """Start climbing `org_name`, collecting its direct person owners."""
        key = name_key(org_name)
        if key in visited:
            return None

        frame = _ClimbFrame(
            organisation=org_name,
            visited=visited | {key},
            parents=iter(self.index.by_target(RelationKind.ORGANISATION_ORGANISATION, org_name))
        )
        for rel in self.index.by_target(RelationKind.PERSONNE_ORGANISATION, org_name):
            person = self.personnes.display(rel.origine)
            frame.results.append(ClimbResult(person, (person,)))
        return frame
