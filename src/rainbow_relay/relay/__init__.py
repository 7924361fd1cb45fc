"""
Relay engine for advancing the verifier contract's head.

The engine bootstraps the contract with a first light-client block when it
has none, then loops: wait for the head's validity window, make sure stake
is locked, fetch the next light-client block, submit it.
"""

from __future__ import annotations

__all__ = [
    # Engine
    "RelayEngine",
    "PROOF_POLL_INTERVAL",
    # Phases
    "RelayPhase",
    "InitOutcome",
    # Retry
    "RetryPolicy",
]

from .engine import PROOF_POLL_INTERVAL, RelayEngine
from .phases import InitOutcome, RelayPhase
from .retry import RetryPolicy
