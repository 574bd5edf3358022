"""
Validators for engine inputs.

This module provides:
- Structural parsing of raw proposal, vote, poll and DRep records
- Pillar range warnings for DRep snapshots
"""

from .input_validator import (
    PILLAR_BOUNDS,
    ValidationError,
    check_pillar_bounds,
    parse_drep,
    parse_poll_votes,
    parse_proposals,
    parse_votes,
)

__all__ = [
    "PILLAR_BOUNDS",
    "ValidationError",
    "check_pillar_bounds",
    "parse_drep",
    "parse_poll_votes",
    "parse_proposals",
    "parse_votes",
]
