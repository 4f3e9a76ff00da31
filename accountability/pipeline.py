"""
Run orchestrator: fetch, reconcile, merge, persist, report.

Adapter invocations run concurrently on one event loop, in two stages: first
every invocation that stands alone, then those that need the roster (their
``fetch`` gets ``members=``). Everything after the fan-out is sequential.
Nothing is written until every computation has succeeded.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from accountability.config.constants import CURRENT_CONGRESS
from accountability.config.settings import Settings
from accountability.exceptions import (
    MissingCredential,
    PipelineAborted,
    PipelineError,
    SourceFailure,
)
from accountability.ingestion import (
    BaseSourceAdapter,
    CongressMembersAdapter,
    FecFinanceAdapter,
    ProPublicaCommitteesAdapter,
    ProPublicaVotesAdapter,
    QuiverTradesAdapter,
    VoteviewMembersAdapter,
    VoteviewVotesAdapter,
)
from accountability.models.facts import NormalizedFact, RosterFact
from accountability.models.report import RunReport, SourceReport
from accountability.reconciliation import IdentityMap, RecordMerger, count_unresolved
from accountability.storage.files import JsonFileSink

logger = logging.getLogger(__name__)


class FailurePolicy(str, Enum):
    """What to do when a source fails."""
    CONTINUE = "continue"  # report the failure, merge what we have
    ABORT = "abort"        # fail the run, persist nothing


@dataclass
class AdapterInvocation:
    """
    One adapter plus the keyword arguments for its ``fetch``.

    ``needs_roster`` invocations run after the others and receive the roster
    facts fetched so far as ``members``.
    """

    adapter: BaseSourceAdapter
    kwargs: Dict[str, Any] = field(default_factory=dict)
    label: Optional[str] = None
    needs_roster: bool = False

    @property
    def source(self) -> str:
        return self.label or self.adapter.name


@dataclass
class InvocationOutcome:
    """Facts (or the failure) from one invocation."""

    source: str
    facts: List[NormalizedFact]
    report: SourceReport
    failure: Optional[SourceFailure] = None


def roster_members(outcomes: Iterable[Optional[InvocationOutcome]]) -> List[RosterFact]:
    """First roster fact per bioguide id, in invocation order."""
    members: Dict[str, RosterFact] = {}
    for outcome in outcomes:
        if outcome is None:
            continue
        for fact in outcome.facts:
            if isinstance(fact, RosterFact):
                members.setdefault(fact.legislator_id, fact)
    return list(members.values())


class Pipeline:
    """
    One pipeline run over a fixed set of adapter invocations.

    Usage:
        pipeline = Pipeline(build_default_invocations(settings), JsonFileSink(settings.DATA_DIR))
        report = await pipeline.run()
    """

    def __init__(
        self,
        invocations: Iterable[AdapterInvocation],
        sink: JsonFileSink,
        policy: FailurePolicy = FailurePolicy.CONTINUE,
        merger: Optional[RecordMerger] = None,
        congress: int = CURRENT_CONGRESS,
    ):
        self.invocations = list(invocations)
        self.sink = sink
        self.policy = FailurePolicy(policy)
        self.merger = merger or RecordMerger()
        self.congress = congress

    def _failed(self, source: str, adapter: BaseSourceAdapter, error: Exception) -> InvocationOutcome:
        if isinstance(error, MissingCredential):
            phase = "authenticate"
        else:
            phase = "fetch"
        failure = SourceFailure(message=str(error), source=source, phase=phase, cause=error)
        return InvocationOutcome(
            source=source,
            facts=[],
            report=SourceReport(
                source=source,
                fetched=adapter.stats["fetched"],
                malformed=adapter.stats["malformed"],
                failed=True,
                failure=str(failure),
            ),
            failure=failure,
        )

    async def _invoke(self, invocation: AdapterInvocation, **extra) -> InvocationOutcome:
        """
        Run one adapter.

        Every error an adapter raises becomes a labeled SourceFailure, so one
        upstream cannot take the other invocations down with it. Facts are
        stamped with the invocation label for per-source tallies.
        """
        adapter = invocation.adapter
        source = invocation.source
        try:
            facts = await adapter.fetch(**{**invocation.kwargs, **extra})
        except PipelineError as e:
            outcome = self._failed(source, adapter, e)
            logger.error(f"Source failed: {outcome.failure}")
            return outcome
        except Exception as e:
            outcome = self._failed(source, adapter, e)
            logger.exception(f"Source failed unexpectedly: {outcome.failure}")
            return outcome

        return InvocationOutcome(
            source=source,
            facts=[fact.model_copy(update={"source": source}) for fact in facts],
            report=SourceReport(
                source=source,
                fetched=adapter.stats["fetched"],
                malformed=adapter.stats["malformed"],
            ),
        )

    async def fetch_all(self) -> List[InvocationOutcome]:
        """Fan out every invocation; outcomes come back in invocation order."""
        outcomes: List[Optional[InvocationOutcome]] = [None] * len(self.invocations)

        for needs_roster in (False, True):
            indexes = [
                i for i, inv in enumerate(self.invocations) if inv.needs_roster == needs_roster
            ]
            if not indexes:
                continue
            extra = {"members": roster_members(outcomes)} if needs_roster else {}
            results = await asyncio.gather(
                *(self._invoke(self.invocations[i], **extra) for i in indexes)
            )
            for i, outcome in zip(indexes, results):
                outcomes[i] = outcome

        return outcomes

    async def run(self) -> RunReport:
        """
        Execute the full run.

        Returns:
            The RunReport that was also persisted

        Raises:
            PipelineAborted: If a source failed under the abort policy
            PersistenceError: If an output file could not be written
        """
        started_at = datetime.now(timezone.utc)
        logger.info(
            f"Pipeline starting: {len(self.invocations)} sources, policy={self.policy.value}"
        )

        outcomes = await self.fetch_all()

        failures = [o.failure for o in outcomes if o.failure]
        if failures and self.policy == FailurePolicy.ABORT:
            raise PipelineAborted(
                message=f"{len(failures)} source(s) failed, aborting run",
                failures=failures,
            )

        # Invocation order, not completion order
        facts: List[NormalizedFact] = [fact for o in outcomes for fact in o.facts]

        identities = IdentityMap.from_facts(facts)
        rewritten, unresolved = identities.rewrite(facts)
        result = self.merger.merge(rewritten, identities)

        unmapped_by_source = count_unresolved(unresolved, by="source")
        for outcome in outcomes:
            outcome.report.merged = result.merged_by_source.get(outcome.source, 0)
            outcome.report.orphaned = result.orphaned_by_source.get(outcome.source, 0)
            outcome.report.unmapped = unmapped_by_source.get(outcome.source, 0)

        icpsr_to_bioguide, bioguide_to_icpsr = identities.to_tables()
        report = RunReport(
            started_at=started_at,
            policy=self.policy.value,
            sources=[o.report for o in outcomes],
            merged=result.merged,
            orphaned=result.orphaned,
            unmapped=count_unresolved(unresolved),
            duplicate_rosters=result.duplicate_rosters,
            conflicts=len(identities.conflicts),
            legislators=len(result.records),
            completed_at=datetime.now(timezone.utc),
        )

        self.sink.write_run(
            tables={
                "icpsr_to_bioguide": icpsr_to_bioguide,
                "bioguide_to_icpsr": bioguide_to_icpsr,
            },
            records={record.bioguide_id: record for record in result.records},
            report=report,
            congress=self.congress,
        )

        logger.info(
            f"Pipeline complete: {report.legislators} legislators, "
            f"failed sources: {report.failed_sources or 'none'}"
        )
        return report


DEFAULT_SOURCES = (
    "congress_members",
    "propublica_votes",
    "quiver_trades",
    "voteview_members",
    "voteview_votes",
    "propublica_committees",
    "fec_finance",
)


def build_default_invocations(
    settings: Settings,
    only: Optional[Iterable[str]] = None,
    since: Optional[date] = None,
) -> List[AdapterInvocation]:
    """
    Wire every adapter from settings.

    Args:
        settings: Application settings; each adapter gets its own SourceConfig
        only: Restrict to these source names (see DEFAULT_SOURCES)
        since: Lower bound for bulk trades (defaults to settings.TRADES_SINCE)

    Returns:
        Invocations in a fixed order, roster first; FEC lookups run after
        the roster because the FEC is searched member by member
    """
    selected = set(only) if only else set(DEFAULT_SOURCES)
    unknown = selected - set(DEFAULT_SOURCES)
    if unknown:
        raise ValueError(f"Unknown sources: {', '.join(sorted(unknown))}")

    invocations: List[AdapterInvocation] = []

    if "congress_members" in selected:
        invocations.append(AdapterInvocation(
            CongressMembersAdapter(settings.source_config("congress_gov")),
        ))

    if "propublica_votes" in selected:
        for chamber in ("house", "senate"):
            invocations.append(AdapterInvocation(
                ProPublicaVotesAdapter(settings.source_config("propublica")),
                kwargs={"chamber": chamber},
                label=f"propublica_votes:{chamber}",
            ))

    if "quiver_trades" in selected:
        invocations.append(AdapterInvocation(
            QuiverTradesAdapter(settings.source_config("quiver")),
            kwargs={"since": since or settings.TRADES_SINCE},
        ))

    if "voteview_members" in selected:
        invocations.append(AdapterInvocation(
            VoteviewMembersAdapter(settings.source_config("voteview")),
        ))

    if "voteview_votes" in selected:
        invocations.append(AdapterInvocation(
            VoteviewVotesAdapter(settings.source_config("voteview")),
            kwargs={"key_votes_only": True},
        ))

    if "propublica_committees" in selected:
        for chamber in ("house", "senate", "joint"):
            invocations.append(AdapterInvocation(
                ProPublicaCommitteesAdapter(settings.source_config("propublica")),
                kwargs={"chamber": chamber},
                label=f"propublica_committees:{chamber}",
            ))

    if "fec_finance" in selected:
        invocations.append(AdapterInvocation(
            FecFinanceAdapter(settings.source_config("fec")),
            kwargs={"cycle": settings.FEC_CYCLE},
            needs_roster=True,
        ))

    return invocations
