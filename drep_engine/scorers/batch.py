"""
Batch Runner - score many DReps in one pass.

Scoring one DRep never touches another's data, so the pass is a parallel map
over independent jobs. A failing DRep is logged and reported in
``BatchResult.failures``; it never aborts the rest of the pass. Results are
keyed by DRep id and identical to scoring each DRep sequentially.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Iterable, Optional

from drep_engine.schemas.governance import ClassifiedProposal, DRepVote, EnrichedDRep
from drep_engine.schemas.results import Scorecard
from drep_engine.scorers.drep_score import calculate_drep_score
from drep_engine.scorers.scorecard import calculate_scorecard
from drep_engine.utils.logger import BatchRunContext, EngineLogger, get_logger
from drep_engine.utils.scoring_audit import ScoringAuditLog


@dataclass(frozen=True)
class DRepJob:
    """Inputs for scoring one DRep."""

    drep: EnrichedDRep
    votes: list[DRepVote] = field(default_factory=list)
    proposals: list[ClassifiedProposal] = field(default_factory=list)


@dataclass
class BatchResult:
    scorecards: dict[str, Scorecard] = field(default_factory=dict)
    drep_scores: dict[str, int] = field(default_factory=dict)
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> int:
        return len(self.scorecards)


def score_dreps(
    jobs: Iterable[DRepJob],
    prefs: Iterable,
    max_workers: int = 8,
    calculated_at: Optional[int] = None,
    epoch: Optional[int] = None,
    audit_log: Optional[ScoringAuditLog] = None,
    logger: Optional[EngineLogger] = None,
) -> BatchResult:
    """
    Compute a scorecard and composite score for every job.

    Args:
        jobs: One DRepJob per DRep
        prefs: Delegator preference keys applied to every scorecard
        max_workers: Worker threads
        calculated_at: Shared snapshot timestamp (epoch ms); defaults to now per DRep
        epoch: Chain epoch recorded on every scorecard
        audit_log: Optional shared audit trail (thread-safe)
        logger: EngineLogger for pass start/finish output

    Returns:
        BatchResult keyed by DRep id
    """
    jobs = list(jobs)
    prefs = list(prefs)
    logger = logger or get_logger()

    def _score(job: DRepJob) -> tuple[Scorecard, int]:
        with logger.time_drep(job.drep.drep_id, "scoring"):
            scorecard = calculate_scorecard(
                job.drep,
                job.votes,
                job.proposals,
                prefs,
                calculated_at=calculated_at,
                epoch=epoch,
                audit_log=audit_log,
            )
            return scorecard, calculate_drep_score(job.drep)

    result = BatchResult()
    with BatchRunContext(logger, num_dreps=len(jobs)) as ctx:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_to_drep = {executor.submit(_score, job): job.drep.drep_id for job in jobs}

            for future in as_completed(future_to_drep):
                drep_id = future_to_drep[future]
                try:
                    scorecard, drep_score = future.result()
                except Exception as e:
                    # time_drep has already logged the traceback
                    result.failures[drep_id] = f"{type(e).__name__}: {e}"
                    ctx.increment_failure()
                    continue
                result.scorecards[drep_id] = scorecard
                result.drep_scores[drep_id] = drep_score
                ctx.increment_success()

    return result

