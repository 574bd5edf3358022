"""
Alignment-Shift Detector - flags material drops between two scorecards.

This is a degradation detector, not a general change detector: only a fall
in overall match of at least the configured threshold (default 8 points) is
reported. When triggered, every in-scope category that fell by more than the
category threshold (default 5 points) is listed.

``ScoreHistory`` is the append-only log of scorecards for one DRep; shift
detection on it is "compare the last snapshot to the one before".
"""

import logging
from typing import Iterable, Optional

from drep_engine.config import get_scoring_config
from drep_engine.schemas.common import PreferenceKey
from drep_engine.schemas.results import AlignmentShift, CategoryShift, Scorecard
from drep_engine.scorers.category_scorers import CATEGORY_SCORERS
from drep_engine.scorers.scorecard import normalize_prefs

logger = logging.getLogger(__name__)


def detect_alignment_shift(
    previous: Optional[Scorecard],
    current: Scorecard,
    drep_name: str,
    prefs: Iterable,
) -> Optional[AlignmentShift]:
    """
    Compare two scorecards of the same DRep.

    Returns:
        AlignmentShift when overall dropped by the threshold or more, else None
    """
    if previous is None:
        return None

    config = get_scoring_config()
    delta = current.scores.overall - previous.scores.overall
    if delta > -config.shift_threshold:
        return None

    selected = normalize_prefs(prefs)
    category_shifts = []
    # Treasury is checked once per selected treasury key
    for pref, scorer in CATEGORY_SCORERS.items():
        if pref not in selected:
            continue
        prev_score = getattr(previous.scores, scorer.category)
        curr_score = getattr(current.scores, scorer.category)
        if curr_score < prev_score - config.category_shift_threshold:
            category_shifts.append(CategoryShift(pref=pref, previous=prev_score, current=curr_score))

    logger.info(f"Alignment shift for {current.drep_id}: {previous.scores.overall} -> {current.scores.overall}")

    return AlignmentShift(
        drep_id=current.drep_id,
        drep_name=drep_name,
        previous_match=previous.scores.overall,
        current_match=current.scores.overall,
        delta=delta,
        category_shifts=category_shifts,
    )


class ScoreHistory:
    """Append-only, immutable log of one DRep's scorecards.

    At most one snapshot is kept per epoch; a later snapshot for the same
    epoch supersedes the earlier one. Snapshots are ordered by
    ``calculated_at``. ``append`` returns a new history and leaves this one
    untouched.
    """

    def __init__(self, drep_id: str, snapshots: Iterable[Scorecard] = ()):
        self.drep_id = drep_id
        ordered = sorted(snapshots, key=lambda s: s.calculated_at)
        for snapshot in ordered:
            if snapshot.drep_id != drep_id:
                raise ValueError(f"Scorecard for {snapshot.drep_id} cannot join history of {drep_id}")

        by_epoch: dict = {}
        unkeyed = []
        for snapshot in ordered:
            if snapshot.epoch is None:
                unkeyed.append(snapshot)
            else:
                by_epoch[snapshot.epoch] = snapshot
        self._snapshots: tuple[Scorecard, ...] = tuple(
            sorted([*unkeyed, *by_epoch.values()], key=lambda s: s.calculated_at)
        )

    def append(self, scorecard: Scorecard) -> "ScoreHistory":
        return ScoreHistory(self.drep_id, [*self._snapshots, scorecard])

    @property
    def snapshots(self) -> tuple[Scorecard, ...]:
        return self._snapshots

    @property
    def latest(self) -> Optional[Scorecard]:
        return self._snapshots[-1] if self._snapshots else None

    @property
    def previous(self) -> Optional[Scorecard]:
        return self._snapshots[-2] if len(self._snapshots) >= 2 else None

    def latest_shift(self, drep_name: str, prefs: Iterable[PreferenceKey]) -> Optional[AlignmentShift]:
        """Shift between the last two snapshots, if any."""
        if self.latest is None:
            return None
        return detect_alignment_shift(self.previous, self.latest, drep_name, prefs)

    def __len__(self) -> int:
        return len(self._snapshots)

    def __iter__(self):
        return iter(self._snapshots)
