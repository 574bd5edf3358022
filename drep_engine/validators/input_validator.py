"""
Structural validation for records entering the engine.

The ingestion collaborator validates rows before handing them over, so a
failure here is a programmer error (wrong shape entirely), not a data gap.
Missing optional fields never fail; they degrade to the defaults on the
models.

Usage:
    from drep_engine.validators import parse_proposals, parse_votes

    proposals = parse_proposals(rows)  # list[RawProposal]
"""

import logging
from typing import Any, Iterable, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from drep_engine.schemas.governance import DRepVote, EnrichedDRep, RawProposal
from drep_engine.schemas.results import PollVote

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Pillars are percentages; scorers clamp, but values outside are worth a warning
PILLAR_BOUNDS: dict[str, tuple[float, float]] = {
    "participation_rate": (0, 100),
    "effective_participation": (0, 100),
    "rationale_rate": (0, 100),
    "reliability_score": (0, 100),
    "profile_completeness": (0, 100),
}


class ValidationError(ValueError):
    """Input record has the wrong structure.

    Attributes:
        record_type: Model the record was parsed as
        index: Position in the input sequence (None for single records)
        errors: Pydantic error details
    """

    def __init__(self, record_type: str, errors: list[dict], index: int | None = None):
        self.record_type = record_type
        self.index = index
        self.errors = errors
        where = f" at index {index}" if index is not None else ""
        summary = "; ".join(f"{'.'.join(str(p) for p in e.get('loc', ()))}: {e.get('msg')}" for e in errors)
        super().__init__(f"Invalid {record_type}{where}: {summary}")


def _parse(model: type[ModelT], record: Any, index: int | None = None) -> ModelT:
    if isinstance(record, model):
        return record
    if not isinstance(record, dict):
        raise ValidationError(
            model.__name__,
            [{"loc": (), "msg": f"expected a mapping, got {type(record).__name__}"}],
            index,
        )
    try:
        return model.model_validate(record)
    except PydanticValidationError as e:
        raise ValidationError(model.__name__, e.errors(include_url=False), index) from e


def _parse_many(model: type[ModelT], records: Iterable[Any]) -> list[ModelT]:
    return [_parse(model, record, i) for i, record in enumerate(records)]


def parse_proposals(records: Iterable[Any]) -> list[RawProposal]:
    return _parse_many(RawProposal, records)


def parse_votes(records: Iterable[Any]) -> list[DRepVote]:
    return _parse_many(DRepVote, records)


def parse_poll_votes(records: Iterable[Any]) -> list[PollVote]:
    return _parse_many(PollVote, records)


def parse_drep(record: Any) -> EnrichedDRep:
    drep = _parse(EnrichedDRep, record)
    check_pillar_bounds(drep)
    return drep


def check_pillar_bounds(drep: EnrichedDRep) -> list[str]:
    """Names of pillar fields outside 0-100. Logged, never raised."""
    out_of_bounds = []
    for field_name, (lo, hi) in PILLAR_BOUNDS.items():
        value = getattr(drep, field_name)
        if value is not None and not lo <= value <= hi:
            out_of_bounds.append(field_name)
            logger.warning(f"{drep.drep_id}: {field_name}={value} outside [{lo}, {hi}], will be clamped")
    return out_of_bounds
