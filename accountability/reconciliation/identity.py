"""
Bidirectional bioguide <-> ICPSR identity map.

Congress.gov, ProPublica and Quiver key legislators by bioguide id; Voteview
keys them by ICPSR id. The map is built from every record that carries both
ids and is then used to move ICPSR-keyed data into bioguide space.
"""
import logging
from collections import Counter
from typing import Dict, Iterable, List, Optional, Tuple, TypeVar

from accountability.models.facts import NormalizedFact, carries_both_ids
from accountability.models.politician import IdScheme
from accountability.models.report import ReconciliationConflict, UnresolvedIdentity

logger = logging.getLogger(__name__)

V = TypeVar('V')

ICPSR_TO_BIOGUIDE = "icpsr->bioguide"
BIOGUIDE_TO_ICPSR = "bioguide->icpsr"


class IdentityMap:
    """
    One map, both directions, conflict detection built in.

    A pair is only ever registered in both directions at once, so the two
    tables cannot drift apart. When a new pair disagrees with an existing
    mapping the first-seen mapping is kept and one conflict is recorded.

    Usage:
        identities = IdentityMap.from_facts(facts)
        facts, unresolved = identities.rewrite(facts)
    """

    def __init__(self):
        self._to_canonical: Dict[str, str] = {}
        self._to_alternate: Dict[str, str] = {}
        self.conflicts: List[ReconciliationConflict] = []

    @classmethod
    def from_facts(cls, facts: Iterable[NormalizedFact]) -> "IdentityMap":
        """Register every fact that links a bioguide id to an ICPSR id, in order."""
        identities = cls()
        for fact in facts:
            if carries_both_ids(fact):
                identities.register(fact.legislator_id, fact.icpsr_id)
        logger.info(
            f"Identity map: {len(identities)} pairs, {len(identities.conflicts)} conflicts"
        )
        return identities

    def __len__(self) -> int:
        return len(self._to_canonical)

    def register(self, bioguide_id: str, icpsr_id: str) -> bool:
        """
        Register a bioguide/ICPSR pair.

        Returns:
            True if the pair is (now) in the map, False if it conflicted with
            an earlier mapping and was rejected
        """
        known_bioguide = self._to_canonical.get(icpsr_id)
        known_icpsr = self._to_alternate.get(bioguide_id)

        if known_bioguide == bioguide_id and known_icpsr == icpsr_id:
            return True

        conflict = None
        if known_bioguide is not None and known_bioguide != bioguide_id:
            conflict = ReconciliationConflict(
                direction=ICPSR_TO_BIOGUIDE,
                key=icpsr_id,
                kept_id=known_bioguide,
                rejected_id=bioguide_id,
            )
        elif known_icpsr is not None and known_icpsr != icpsr_id:
            conflict = ReconciliationConflict(
                direction=BIOGUIDE_TO_ICPSR,
                key=bioguide_id,
                kept_id=known_icpsr,
                rejected_id=icpsr_id,
            )

        if conflict:
            self.conflicts.append(conflict)
            logger.warning(
                f"Identity conflict ({conflict.direction}) for {conflict.key}: "
                f"keeping {conflict.kept_id}, rejecting {conflict.rejected_id}"
            )
            return False

        self._to_canonical[icpsr_id] = bioguide_id
        self._to_alternate[bioguide_id] = icpsr_id
        return True

    def to_canonical(self, icpsr_id: str) -> Optional[str]:
        """Bioguide id for an ICPSR id, or None."""
        return self._to_canonical.get(icpsr_id)

    def to_alternate(self, bioguide_id: str) -> Optional[str]:
        """ICPSR id for a bioguide id, or None."""
        return self._to_alternate.get(bioguide_id)

    def rewrite(
        self, facts: Iterable[NormalizedFact]
    ) -> Tuple[List[NormalizedFact], List[UnresolvedIdentity]]:
        """
        Re-key ICPSR-keyed facts by bioguide id.

        Bioguide-keyed facts pass through untouched. ICPSR-keyed facts with no
        counterpart are dropped and returned as unresolved; a legislator in
        historical Voteview data who is no longer serving is expected here.

        Returns:
            (facts in bioguide space, in input order; unresolved ids)
        """
        rewritten: List[NormalizedFact] = []
        unresolved: List[UnresolvedIdentity] = []

        for fact in facts:
            if fact.id_scheme != IdScheme.ICPSR:
                rewritten.append(fact)
                continue

            bioguide_id = self.to_canonical(fact.legislator_id)
            if bioguide_id is None:
                unresolved.append(
                    UnresolvedIdentity(
                        alternate_id=fact.legislator_id,
                        source_kind=fact.source_kind.value,
                        source=fact.source,
                    )
                )
                continue

            update = {"legislator_id": bioguide_id, "id_scheme": IdScheme.BIOGUIDE}
            if hasattr(fact, "icpsr_id"):
                update["icpsr_id"] = fact.legislator_id
            rewritten.append(fact.model_copy(update=update))

        if unresolved:
            logger.info(f"Dropped {len(unresolved)} facts with unmapped ICPSR ids")
        return rewritten, unresolved

    def rewrite_mapping(self, mapping: Dict[str, V]) -> Tuple[Dict[str, V], int]:
        """
        Re-key a mapping from ICPSR id to anything (e.g. a vote position).

        Returns:
            (mapping keyed by bioguide id, number of keys dropped)
        """
        rewritten: Dict[str, V] = {}
        dropped = 0
        for icpsr_id, value in mapping.items():
            bioguide_id = self.to_canonical(icpsr_id)
            if bioguide_id is None:
                dropped += 1
                continue
            rewritten[bioguide_id] = value
        return rewritten, dropped

    def to_tables(self) -> Tuple[Dict[str, str], Dict[str, str]]:
        """Both lookup tables with sorted keys: (icpsr->bioguide, bioguide->icpsr)."""
        return (
            dict(sorted(self._to_canonical.items())),
            dict(sorted(self._to_alternate.items())),
        )


def count_unresolved(
    unresolved: Iterable[UnresolvedIdentity], by: str = "source_kind"
) -> Dict[str, int]:
    """
    Tally unresolved ids for the run report.

    Args:
        by: "source_kind" or "source" (the invocation label); ids with no
            value for that key are left out
    """
    counts = Counter(getattr(u, by) for u in unresolved)
    counts.pop(None, None)
    return dict(sorted(counts.items()))
