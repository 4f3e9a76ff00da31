"""Tests for JSON file persistence."""

import json
import os
from datetime import datetime, timezone
from pathlib import Path

import pytest

from accountability.config.constants import (
    BIOGUIDE_TO_ICPSR_FILE,
    ICPSR_TO_BIOGUIDE_FILE,
    LEGISLATORS_FILE,
    RUN_REPORT_FILE,
)
from accountability.exceptions import PersistenceError
from accountability.models.facts import CommitteeFact, VoteFact, fact_adapter
from accountability.models.report import RunReport
from accountability.reconciliation import RecordMerger
from accountability.storage import JsonFileSink, dump_json, write_text_atomic


@pytest.fixture
def run_inputs(roster_fact):
    """Tables, records and report for one small run."""
    records = RecordMerger().merge([roster_fact("S000033", icpsr_id="29147")]).records
    report = RunReport(
        started_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
        completed_at=datetime(2025, 1, 1, 0, 5, tzinfo=timezone.utc),
        policy="continue",
        legislators=1,
    )
    tables = {
        "icpsr_to_bioguide": {"29147": "S000033"},
        "bioguide_to_icpsr": {"S000033": "29147"},
    }
    return tables, {r.bioguide_id: r for r in records}, report


class TestDumpJson:
    """Tests for dump_json function."""

    def test_sorted_keys_and_trailing_newline(self):
        assert dump_json({"b": 1, "a": "é"}) == '{\n  "a": "é",\n  "b": 1\n}\n'


class TestWriteTextAtomic:
    """Tests for write_text_atomic function."""

    def test_creates_parent_directories(self, tmp_path: Path):
        path = tmp_path / "nested" / "out.json"

        write_text_atomic(path, "{}\n")

        assert path.read_text(encoding="utf-8") == "{}\n"

    def test_failed_rename_keeps_previous_file(self, tmp_path: Path, monkeypatch):
        """If the final rename fails the old file is untouched and no temp file is left."""
        path = tmp_path / "out.json"
        path.write_text("previous\n", encoding="utf-8")

        def broken_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", broken_replace)

        with pytest.raises(PersistenceError) as exc_info:
            write_text_atomic(path, "new\n")

        assert "disk full" in str(exc_info.value)
        assert path.read_text(encoding="utf-8") == "previous\n"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["out.json"]


class TestJsonFileSink:
    """Tests for JsonFileSink."""

    def test_writes_all_artifacts(self, tmp_path: Path, run_inputs):
        sink = JsonFileSink(tmp_path)
        written = sink.write_run(*run_inputs, congress=119)

        assert sorted(written) == sorted([
            ICPSR_TO_BIOGUIDE_FILE, BIOGUIDE_TO_ICPSR_FILE, LEGISLATORS_FILE, RUN_REPORT_FILE,
        ])
        assert sink.read_json(ICPSR_TO_BIOGUIDE_FILE) == {"29147": "S000033"}
        assert sink.read_json(BIOGUIDE_TO_ICPSR_FILE) == {"S000033": "29147"}

        legislators = sink.read_json(LEGISLATORS_FILE)
        assert legislators["congress"] == 119
        assert legislators["generated_at"] == "2025-01-01T00:00:00+00:00"
        record = legislators["legislators"]["S000033"]
        assert record["icpsr_id"] == "29147"
        assert record["chamber"] == "senate"
        assert record["vote_stats"]["missed_vote_pct"] is None

        assert sink.read_json(RUN_REPORT_FILE)["legislators"] == 1

    def test_rewrite_is_byte_identical(self, tmp_path: Path, run_inputs):
        sink = JsonFileSink(tmp_path)

        sink.write_run(*run_inputs, congress=119)
        first = {p.name: p.read_bytes() for p in tmp_path.iterdir()}
        sink.write_run(*run_inputs, congress=119)
        second = {p.name: p.read_bytes() for p in tmp_path.iterdir()}

        assert first == second

    def test_output_is_valid_utf8_json(self, tmp_path: Path, run_inputs):
        JsonFileSink(tmp_path).write_run(*run_inputs, congress=119)

        for path in tmp_path.iterdir():
            json.loads(path.read_text(encoding="utf-8"))

    def test_persisted_facts_parse_back(self, tmp_path: Path, run_inputs, roster_fact, vote_fact, committee_fact):
        """Facts read back from legislators.json validate against the tagged union."""
        records = RecordMerger().merge([
            roster_fact("S000033"),
            vote_fact("S000033", source="propublica_votes:senate"),
            committee_fact("S000033", title="Chairman", is_chair=True),
        ]).records
        sink = JsonFileSink(tmp_path)
        tables, _, report = run_inputs
        sink.write_run(tables, {r.bioguide_id: r for r in records}, report, congress=119)

        record = sink.read_json(LEGISLATORS_FILE)["legislators"]["S000033"]
        vote = fact_adapter.validate_python(record["votes"][0])
        committee = fact_adapter.validate_python(record["committees"][0])

        assert isinstance(vote, VoteFact)
        assert vote.source == "propublica_votes:senate"
        assert isinstance(committee, CommitteeFact)
        assert committee.is_chair is True
