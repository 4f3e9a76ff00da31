"""
Run the full accountability pipeline.

Fetches every source, reconciles ids, merges records and writes the JSON
artifacts to the data directory.

Usage:
    python scripts/run_pipeline.py                                  # Everything
    python scripts/run_pipeline.py --only congress_members,voteview_members
    python scripts/run_pipeline.py --policy abort                   # Fail on any source error
    python scripts/run_pipeline.py --since 2024-01-01               # Trades since a date
"""
import asyncio
import logging
import sys
from datetime import date
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from accountability.config.settings import settings
from accountability.exceptions import PipelineAborted, PipelineError
from accountability.pipeline import (
    DEFAULT_SOURCES,
    FailurePolicy,
    Pipeline,
    build_default_invocations,
)
from accountability.storage.files import JsonFileSink


async def run(
    policy: FailurePolicy,
    data_dir: Path,
    congress: int,
    since: date = None,
    only: list = None,
):
    """
    Run the pipeline and print a summary.

    Returns:
        The RunReport
    """
    print("=" * 60)
    print(f"ACCOUNTABILITY PIPELINE - {congress}th Congress")
    print("=" * 60)
    print(f"   Output:  {data_dir}")
    print(f"   Policy:  {policy.value}")
    if only:
        print(f"   Sources: {', '.join(only)}")
    print()

    pipeline = Pipeline(
        build_default_invocations(settings, only=only, since=since),
        JsonFileSink(data_dir),
        policy=policy,
        congress=congress,
    )
    report = await pipeline.run()

    print("\n" + "=" * 60)
    print("Run complete")
    print("=" * 60)
    for source in report.sources:
        status = f"FAILED - {source.failure}" if source.failed else "ok"
        print(
            f"   {source.source}: {source.fetched} fetched, {source.malformed} malformed, "
            f"{source.merged} merged, {source.orphaned} orphaned, {source.unmapped} unmapped ({status})"
        )
    print(f"\n   Legislators: {report.legislators}")
    print(f"   Merged:      {report.merged}")
    print(f"   Orphaned:    {report.orphaned}")
    print(f"   Unmapped:    {report.unmapped}")
    print(f"   Conflicts:   {report.conflicts}")
    print(f"   Duration:    {report.completed_at - report.started_at}")

    return report


def main():
    """CLI entry point"""
    import argparse

    parser = argparse.ArgumentParser(
        description="Fetch, reconcile and merge congressional data into JSON records",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Sources:
  {', '.join(DEFAULT_SOURCES)}

Credentials are read from the environment or .env:
  CONGRESS_GOV_API_KEY, PROPUBLICA_API_KEY, QUIVER_API_KEY, FEC_API_KEY
        """
    )
    parser.add_argument(
        "--policy",
        choices=[p.value for p in FailurePolicy],
        default=settings.FAILURE_POLICY,
        help=f"What to do when a source fails (default: {settings.FAILURE_POLICY})"
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=settings.DATA_DIR,
        help=f"Output directory (default: {settings.DATA_DIR})"
    )
    parser.add_argument(
        "--congress",
        type=int,
        default=settings.CURRENT_CONGRESS,
        help=f"Congress number recorded in the output (default: {settings.CURRENT_CONGRESS})"
    )
    parser.add_argument(
        "--since",
        type=date.fromisoformat,
        help="Only trades on or after this date (YYYY-MM-DD)"
    )
    parser.add_argument(
        "--only",
        type=str,
        help="Comma-separated list of sources to run"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args()

    # Configure logging
    log_level = logging.DEBUG if args.verbose else settings.LOG_LEVEL
    logging.basicConfig(level=log_level, format=settings.LOG_FORMAT)

    # httpx logs full URLs, and Congress.gov takes its key as a query parameter
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    only = args.only.split(",") if args.only else None
    if only:
        invalid = set(only) - set(DEFAULT_SOURCES)
        if invalid:
            print(f"Unknown sources: {', '.join(sorted(invalid))}")
            print(f"   Available: {', '.join(DEFAULT_SOURCES)}")
            sys.exit(1)

    try:
        report = asyncio.run(run(
            policy=FailurePolicy(args.policy),
            data_dir=args.data_dir,
            congress=args.congress,
            since=args.since,
            only=only,
        ))
        sys.exit(1 if report.failed_sources else 0)

    except KeyboardInterrupt:
        print("\n\nRun interrupted by user")
        sys.exit(1)
    except PipelineAborted as e:
        print(f"\n\nRun aborted: {e}")
        sys.exit(2)
    except PipelineError as e:
        print(f"\n\nFatal error: {e}")
        logging.exception("Fatal error during run")
        sys.exit(1)


if __name__ == "__main__":
    main()
