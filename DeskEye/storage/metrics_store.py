"""
Local metric storage.

Aggregated records only (no frames, no landmarks) kept as two JSON files in
the data directory:

    metrics.json   one entry per MetricRecord, plus "id" and "createdAt"
    sessions.json  one entry per monitoring session

Writes go through a temp file and os.replace so a crash never leaves a
half-written file behind.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from typing import Any, Dict, List, Optional, Union

from DeskEye.core.errors import StorageError
from DeskEye.core.recorder import MetricRecord

logger = logging.getLogger(__name__)

DAY_MS = 24 * 60 * 60 * 1000


def _now_ms() -> int:
    return int(time.time() * 1000)


class MetricsStore:
    def __init__(self, data_dir: str) -> None:
        self.data_dir = data_dir
        self.metrics_file = os.path.join(data_dir, "metrics.json")
        self.sessions_file = os.path.join(data_dir, "sessions.json")
        try:
            os.makedirs(data_dir, exist_ok=True)
        except OSError as e:
            raise StorageError(f"cannot create data directory {data_dir}: {e}") from e
        for path in (self.metrics_file, self.sessions_file):
            if not os.path.exists(path):
                self._write(path, [])
        logger.info("Metric store at %s", data_dir)

    # File helpers ------------------------------------------------------
    def _read(self, path: str) -> List[Dict[str, Any]]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            logger.error("Could not read %s, treating as empty: %s", path, e)
            return []
        if not isinstance(data, list):
            logger.error("%s does not hold a list, treating as empty", path)
            return []
        return data

    def _write(self, path: str, rows: List[Dict[str, Any]], indent: Optional[int] = 2) -> None:
        tmp: Optional[str] = None
        try:
            fd, tmp = tempfile.mkstemp(prefix=".tmp-", suffix=".json", dir=self.data_dir)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(rows, f, indent=indent)
            os.replace(tmp, path)
        except OSError as e:
            if tmp is not None and os.path.exists(tmp):
                os.remove(tmp)
            raise StorageError(f"cannot write {path}: {e}") from e

    @staticmethod
    def _next_id(rows: List[Dict[str, Any]]) -> int:
        return max((int(r.get("id") or 0) for r in rows), default=0) + 1

    # Metrics -----------------------------------------------------------
    def save_metric(self, metric: Union[MetricRecord, Dict[str, Any]]) -> int:
        data = metric.to_dict() if isinstance(metric, MetricRecord) else dict(metric)
        rows = self._read(self.metrics_file)
        row = {
            "id": self._next_id(rows),
            "timestamp": int(data.get("timestamp") or _now_ms()),
            "blinkRate": float(data.get("blinkRate") or 0.0),
            "avgEAR": float(data.get("avgEAR") or 0.0),
            "strainScore": float(data.get("strainScore") or 0.0),
            "breakTaken": bool(data.get("breakTaken") or False),
            "createdAt": _now_ms(),
        }
        rows.append(row)
        self._write(self.metrics_file, rows)
        return row["id"]

    def _in_range(self, start: int, end: int) -> List[Dict[str, Any]]:
        return [m for m in self._read(self.metrics_file) if start <= m.get("timestamp", 0) <= end]

    def get_metrics(self, start: int, end: int, limit: int = 1000) -> List[Dict[str, Any]]:
        """Records with start <= timestamp <= end, newest first."""
        rows = sorted(self._in_range(start, end), key=lambda m: m["timestamp"], reverse=True)
        return rows[: max(0, int(limit))]

    def get_statistics(self, start: int, end: int) -> Dict[str, Any]:
        rows = self._in_range(start, end)
        if not rows:
            return {
                "totalRecords": 0,
                "avgBlinkRate": 0.0,
                "avgEAR": 0.0,
                "avgStrainScore": 0.0,
                "totalBreaks": 0,
                "firstRecord": None,
                "lastRecord": None,
            }
        n = float(len(rows))
        return {
            "totalRecords": len(rows),
            "avgBlinkRate": sum(m["blinkRate"] for m in rows) / n,
            "avgEAR": sum(m["avgEAR"] for m in rows) / n,
            "avgStrainScore": sum(m["strainScore"] for m in rows) / n,
            "totalBreaks": sum(1 for m in rows if m.get("breakTaken")),
            "firstRecord": min(m["timestamp"] for m in rows),
            "lastRecord": max(m["timestamp"] for m in rows),
        }

    def delete_old_metrics(self, days_to_keep: int = 90, now_ms: Optional[int] = None) -> int:
        cutoff = (now_ms if now_ms is not None else _now_ms()) - int(days_to_keep) * DAY_MS
        rows = self._read(self.metrics_file)
        kept = [m for m in rows if m.get("timestamp", 0) >= cutoff]
        deleted = len(rows) - len(kept)
        self._write(self.metrics_file, kept)
        logger.info("Deleted %d old metric records", deleted)
        return deleted

    # Sessions ----------------------------------------------------------
    def start_session(self) -> int:
        sessions = self._read(self.sessions_file)
        now = _now_ms()
        session = {
            "id": self._next_id(sessions),
            "startTime": now,
            "endTime": None,
            "duration": None,
            "totalBlinks": 0,
            "breaksTaken": 0,
            "avgStrainScore": 0.0,
            "createdAt": now,
        }
        sessions.append(session)
        self._write(self.sessions_file, sessions)
        return session["id"]

    def end_session(self, session_id: int, total_blinks: Optional[int] = None) -> int:
        """Close a session and summarise the records written during it.

        total_blinks is the detector's lifetime counter; without it the number
        of records in the session is stored instead.
        """
        sessions = self._read(self.sessions_file)
        session = next((s for s in sessions if s.get("id") == session_id), None)
        if session is None:
            raise StorageError(f"session {session_id} not found")
        end = _now_ms()
        rows = self._in_range(int(session["startTime"]), end)
        session["endTime"] = end
        session["duration"] = end - int(session["startTime"])
        session["totalBlinks"] = int(total_blinks) if total_blinks is not None else len(rows)
        session["breaksTaken"] = sum(1 for m in rows if m.get("breakTaken"))
        session["avgStrainScore"] = (
            sum(m["strainScore"] for m in rows) / float(len(rows)) if rows else 0.0
        )
        self._write(self.sessions_file, sessions)
        return session_id

    def get_sessions(self, limit: int = 10) -> List[Dict[str, Any]]:
        done = [s for s in self._read(self.sessions_file) if s.get("endTime") is not None]
        done.sort(key=lambda s: s["startTime"], reverse=True)
        return done[: max(0, int(limit))]

    def vacuum(self) -> None:
        for path in (self.metrics_file, self.sessions_file):
            self._write(path, self._read(path), indent=None)
        logger.info("Metric store compacted")
