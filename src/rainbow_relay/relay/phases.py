"""Relay engine phases."""

from __future__ import annotations

from enum import Enum, auto


class RelayPhase(Enum):
    """
    What the relay engine is doing right now.

    Phases are reported for logging and inspection only. The engine does not
    persist them: a restarted relay always starts from INITIALIZING and then
    re-reads the head from the contract.

    ::

        IDLE -> INITIALIZING -> READING_HEAD -> AWAITING_VALIDITY
                                     ^                 |
                                     |           ENSURING_STAKE
                                     |                 |
                                 SUBMITTING <- FETCHING_PROOF

    Any phase may move to BACKING_OFF after a failed step (then READING_HEAD)
    or to STOPPED on shutdown.
    """

    IDLE = auto()
    """Constructed, not started."""

    INITIALIZING = auto()
    """Checking or performing the contract bootstrap."""

    READING_HEAD = auto()
    """Reading the verified head and its hash."""

    AWAITING_VALIDITY = auto()
    """Waiting for target-chain time to pass the head's validity window."""

    ENSURING_STAKE = auto()
    """Checking the relay's stake and depositing if there is none."""

    FETCHING_PROOF = auto()
    """Polling the source chain for the next light-client block."""

    SUBMITTING = auto()
    """Sending the encoded block to the contract."""

    BACKING_OFF = auto()
    """Sleeping after a failed step before retrying."""

    STOPPED = auto()
    """Shutdown completed."""


class InitOutcome(Enum):
    """Result of the initialization protocol."""

    ALREADY_INITIALIZED = auto()
    """The contract already had a head; nothing was written."""

    INITIALIZED = auto()
    """The relay bootstrapped the contract with a fresh block."""

    STOPPED = auto()
    """Shutdown was requested before a bootstrap block became available."""
