"""
JSON file persistence.

Every artifact is replaced whole: the payload is written to a temporary file
in the target directory, flushed to disk, then renamed over the old file.
Readers see either the previous run's file or the new one, never a mix.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Mapping

from accountability.config.constants import (
    BIOGUIDE_TO_ICPSR_FILE,
    ICPSR_TO_BIOGUIDE_FILE,
    LEGISLATORS_FILE,
    RUN_REPORT_FILE,
)
from accountability.exceptions import PersistenceError
from accountability.models.record import UnifiedLegislatorRecord
from accountability.models.report import RunReport

logger = logging.getLogger(__name__)


def dump_json(payload: Any) -> str:
    """Serialize deterministically: sorted keys, 2-space indent, trailing newline."""
    return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def write_text_atomic(path: Path, text: str) -> None:
    """
    Replace ``path`` with ``text`` in one rename.

    Raises:
        PersistenceError: If the temp file cannot be written or moved
    """
    path = Path(path)
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(text)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise PersistenceError(message=str(e), output_path=path) from e


class JsonFileSink:
    """
    Writes the lookup tables, unified records and run report to a directory.

    Usage:
        sink = JsonFileSink(Path("data"))
        sink.write_run(tables, records, report, congress=119)
    """

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.logger = logging.getLogger(self.__class__.__name__)

    def path_for(self, name: str) -> Path:
        return self.data_dir / name

    def write_run(
        self,
        tables: Mapping[str, Mapping[str, str]],
        records: Mapping[str, UnifiedLegislatorRecord],
        report: RunReport,
        congress: int,
    ) -> Dict[str, Path]:
        """
        Persist one completed run.

        All payloads are serialized before the first file is touched, so a
        serialization error leaves every previous file in place.

        Args:
            tables: {"icpsr_to_bioguide": {...}, "bioguide_to_icpsr": {...}}
            records: Unified records keyed by bioguide id
            report: Run report; its timestamps are the only run-dependent values
            congress: Congress number the run targeted

        Returns:
            Mapping of file name to written path
        """
        legislators = {
            "generated_at": report.started_at.isoformat(),
            "congress": congress,
            "legislators": {
                bioguide_id: record.model_dump(mode="json")
                for bioguide_id, record in records.items()
            },
        }

        payloads = {
            ICPSR_TO_BIOGUIDE_FILE: dump_json(dict(tables["icpsr_to_bioguide"])),
            BIOGUIDE_TO_ICPSR_FILE: dump_json(dict(tables["bioguide_to_icpsr"])),
            LEGISLATORS_FILE: dump_json(legislators),
            RUN_REPORT_FILE: dump_json(report.model_dump(mode="json")),
        }

        written = {}
        for name, text in payloads.items():
            path = self.path_for(name)
            write_text_atomic(path, text)
            written[name] = path
            self.logger.info(f"Wrote {path}")
        return written

    def read_json(self, name: str) -> Any:
        """Read back one persisted artifact."""
        with open(self.path_for(name), "r", encoding="utf-8") as f:
            return json.load(f)
