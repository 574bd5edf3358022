"""Shared fixtures for engine tests."""

import sys
from pathlib import Path

import pytest

# Make the package importable without installing
sys.path.insert(0, str(Path(__file__).parent.parent))

from drep_engine.config import clear_cache  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_config():
    """Each test reads config/scoring.yaml afresh."""
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def treasury_proposal_raw():
    """25M ADA treasury withdrawal (major tier)."""
    return {
        "proposal_tx_hash": "aaaa1111bbbb2222",
        "proposal_index": 0,
        "proposal_type": "TreasuryWithdrawals",
        "withdrawal": [{"stake_address": "stake1xyz", "amount": str(25_000_000 * 1_000_000)}],
        "meta_json": {"body": {"title": "Fund the developer ecosystem", "abstract": "Grants for tooling"}},
        "proposed_epoch": 520,
    }


@pytest.fixture
def sample_drep():
    from drep_engine.schemas import EnrichedDRep

    return EnrichedDRep(
        drep_id="drep1sample",
        name="Sample DRep",
        participation_rate=80,
        rationale_rate=75,
        reliability_score=70,
        profile_completeness=60,
        size_tier="Whale",
    )
