"""Run report generation service."""

import json
import os
import tempfile
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class ReportService:
    """Collects bootstrap steps and events and writes them as JSON.

    Without a ``report_file`` everything is kept in memory only.
    """

    def __init__(self, report_file: Optional[str], logger):
        self.report_file = report_file
        self.logger = logger
        self.report: Dict[str, Any] = {
            "status": "running",
            "started_at": None,
            "finished_at": None,
            "duration_seconds": None,
            "target": {},
            "steps": [],
            "events": [],
            "error": None,
        }

    def start_run(self, target: Dict[str, Any]):
        self.report["status"] = "running"
        self.report["started_at"] = self._now()
        self.report["target"] = target
        self.write()

    def step_started(self, step_name: str):
        self.report["steps"].append(
            {
                "name": step_name,
                "status": "running",
                "started_at": self._now(),
                "finished_at": None,
                "duration_seconds": None,
                "error": None,
            }
        )
        self.write()

    def step_finished(self, step_name: str, status: str, error: Optional[str] = None):
        for step in reversed(self.report["steps"]):
            if step["name"] == step_name and step["status"] == "running":
                step["status"] = status
                step["finished_at"] = self._now()
                step["error"] = error
                started_at = datetime.fromisoformat(step["started_at"])
                finished_at = datetime.fromisoformat(step["finished_at"])
                step["duration_seconds"] = (finished_at - started_at).total_seconds()
                break
        self.write()

    def add_event(self, event):
        self.report["events"].append(
            {"kind": event.kind, "subject": event.subject, "detail": event.detail, "at": self._now()}
        )
        self.write()

    def finalize(self, status: str, error: Optional[str] = None):
        self.report["status"] = status
        self.report["finished_at"] = self._now()
        if self.report.get("started_at"):
            started_at = datetime.fromisoformat(self.report["started_at"])
            finished_at = datetime.fromisoformat(self.report["finished_at"])
            self.report["duration_seconds"] = (finished_at - started_at).total_seconds()
        self.report["error"] = error
        self.write()

    def write(self):
        if not self.report_file:
            return

        directory = os.path.dirname(self.report_file) or "."
        os.makedirs(directory, exist_ok=True)

        fd, temp_path = tempfile.mkstemp(prefix="bootstrap-report-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as file_obj:
                json.dump(self.report, file_obj, indent=2, sort_keys=True)
                file_obj.write("\n")
            os.replace(temp_path, self.report_file)
        except OSError as exc:
            self.logger.warning("Could not write report file '%s': %s", self.report_file, exc)
            try:
                os.remove(temp_path)
            except OSError:
                pass

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()
