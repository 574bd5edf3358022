"""
DRep governance alignment and scoring engine.

Pure, deterministic computation over immutable governance snapshots:
proposal classification, per-category alignment scorecards, composite DRep
scores, alignment-shift detection, and delegator representation matching.
"""

__version__ = "2.1.0"
