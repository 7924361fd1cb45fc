"""
Relay error taxonomy.

The relay distinguishes failures by what the caller should do about them:

- Transport failures are transient and retried with backoff.
- Rejected transactions mean the contract refused the submission.
- Malformed blocks cannot be encoded and abort the current attempt.
- Unrecognized target node failures stop the relay.
- Configuration errors are fatal before any chain interaction.
"""

from __future__ import annotations


class RelayError(Exception):
    """Base class for every error raised by the relay."""


class ConfigurationError(RelayError):
    """Missing or invalid endpoint, credential, or contract descriptor."""


class TransportError(RelayError):
    """
    Network or RPC failure talking to either chain.

    Transient by classification: callers retry with backoff.
    """


class SourceRpcError(TransportError):
    """
    The source chain's JSON-RPC server answered with an error object.

    Attributes:
        code: JSON-RPC error code, if the server sent one.
    """

    def __init__(self, message: str, *, code: int | None = None) -> None:
        self.code = code
        super().__init__(message)


class ProofUnavailable(RelayError):
    """The source chain has not yet exposed the requested light-client proof."""


class TransactionRejected(RelayError):
    """
    The target contract reverted, or the transaction could not be submitted.

    Attributes:
        reason: The revert reason or submission error, as reported by the node.
        tx_hash: Hash of the mined transaction, when one exists.
    """

    def __init__(self, reason: str, *, tx_hash: str | None = None) -> None:
        self.reason = reason
        self.tx_hash = tx_hash
        message = f"Transaction rejected: {reason}"
        if tx_hash is not None:
            message = f"{message} (tx {tx_hash})"
        super().__init__(message)


class MalformedBlockError(RelayError):
    """A light-client block record from the source chain cannot be encoded."""


class TargetChainError(RelayError):
    """The target chain node failed in a way the relay does not recognize."""


class InitializationError(RelayError):
    """
    Submitting the bootstrap block failed.

    Initialization is never retried automatically; the process boundary
    decides how to exit.
    """
