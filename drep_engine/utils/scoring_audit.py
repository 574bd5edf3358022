"""
Scoring Audit Trail - Captures which data path produced each category score.

Category scorers never raise on thin data; they fall back to neutral or
derived values instead. This module records when that happens so a
surprising scorecard can be traced back to "no relevant votes" or
"unknown size tier" rather than re-derived by hand.
"""

import json
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class ScoreSource(Enum):
    """Which path produced a score."""

    VOTES = "votes"  # Computed from relevant votes
    PROFILE = "profile"  # Computed from DRep aggregate stats only
    FALLBACK = "fallback"  # No relevant data; derived fallback formula
    NEUTRAL = "neutral"  # No relevant data; neutral 50


@dataclass
class ScoringAuditEntry:
    """A single audit entry for one category score of one DRep."""

    drep_id: str
    category: str
    score: int
    source: ScoreSource
    votes_considered: int = 0
    reason: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "drep_id": self.drep_id,
            "category": self.category,
            "score": self.score,
            "source": self.source.value,
            "votes_considered": self.votes_considered,
            "reason": self.reason,
            "timestamp": self.timestamp.isoformat(),
        }


class ScoringAuditLog:
    """Collects audit entries during a scoring pass.

    Safe to share across worker threads.

    Usage:
        audit_log = ScoringAuditLog()
        calculate_scorecard(drep, votes, proposals, prefs, audit_log=audit_log)
        audit_log.get_fallbacks()
        audit_log.export_to_json("/tmp/scoring_audit.json")
    """

    def __init__(self):
        self._entries: list[ScoringAuditEntry] = []
        self._lock = threading.Lock()

    def record(
        self,
        drep_id: str,
        category: str,
        score: int,
        source: ScoreSource,
        votes_considered: int = 0,
        reason: str = "",
    ) -> ScoringAuditEntry:
        entry = ScoringAuditEntry(
            drep_id=drep_id,
            category=category,
            score=score,
            source=source,
            votes_considered=votes_considered,
            reason=reason,
        )
        with self._lock:
            self._entries.append(entry)

        if source in (ScoreSource.FALLBACK, ScoreSource.NEUTRAL):
            logger.debug(f"{category} score for {drep_id} used {source.value}: {reason}")
        return entry

    def get_all_entries(self) -> list[ScoringAuditEntry]:
        with self._lock:
            return list(self._entries)

    def get_fallbacks(self) -> list[ScoringAuditEntry]:
        """Entries whose score did not come from votes or profile data."""
        return [e for e in self.get_all_entries() if e.source in (ScoreSource.FALLBACK, ScoreSource.NEUTRAL)]

    def get_summary_for_drep(self, drep_id: str) -> dict:
        entries = [e for e in self.get_all_entries() if e.drep_id == drep_id]
        by_source: dict[str, list[dict]] = {}
        for entry in entries:
            by_source.setdefault(entry.source.value, []).append(entry.to_dict())
        return {
            "drep_id": drep_id,
            "total_entries": len(entries),
            "entries_by_source": by_source,
        }

    def export_to_json(self, filepath: str | Path) -> None:
        """Export audit log to JSON file."""
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        entries = self.get_all_entries()
        data = {
            "generated_at": datetime.now().isoformat(),
            "total_entries": len(entries),
            "total_fallbacks": len(self.get_fallbacks()),
            "entries": [e.to_dict() for e in entries],
        }

        with open(filepath, "w") as f:
            json.dump(data, f, indent=2)

        logger.info(f"Exported {len(entries)} audit entries to {filepath}")

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def record_if(
    audit_log: Optional[ScoringAuditLog],
    drep_id: Optional[str],
    category: str,
    score: int,
    source: ScoreSource,
    votes_considered: int = 0,
    reason: str = "",
) -> Any:
    """Record only when an audit log is attached (scorers run without one by default)."""
    if audit_log is None:
        return None
    return audit_log.record(drep_id or "unknown", category, score, source, votes_considered, reason)
