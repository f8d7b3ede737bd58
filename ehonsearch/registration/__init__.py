"""
Registration Module

Interactive search-and-register sessions and batch matching.
"""

from ehonsearch.registration.orchestrator import (
    SearchOrchestrator,
    SessionPhase,
    SessionState,
)
from ehonsearch.registration.batch import (
    BatchMatchingPipeline,
    BatchReport,
    RemediationQueue,
    parse_batch_input,
)

__all__ = [
    "SearchOrchestrator",
    "SessionPhase",
    "SessionState",
    "BatchMatchingPipeline",
    "BatchReport",
    "RemediationQueue",
    "parse_batch_input",
]
