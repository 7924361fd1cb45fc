"""
Relay engine: moves the verifier contract's head forward.

The Relay Problem
-----------------
The verifier contract on the target chain accepts one light-client block at
a time, each building on the head it already holds. After accepting a block
the contract holds it for a validity window, during which the block can be
challenged; only then is a new block accepted.

The relay's job is therefore a loop:

1. Read the head and its hash from the contract
2. Wait until target-chain time passes the head's validity window
3. Make sure the relay account has stake locked in the contract
4. Fetch the next light-client block after the head from the source chain
5. Encode it and submit it

Before the loop, the contract may need bootstrapping with a first block:
the one following the source chain's latest final block.

Timing
------
Two waits exist:

- Proof polling uses a short fixed interval. The source chain exposes the
  proof for a final block a short, unbounded time after finality.
- Validity waiting sleeps for the computed gap between target-chain time
  and the head's `valid_after`, then re-reads the time.

Failures
--------
Reads during initialization back off on transport failures. The bootstrap
transaction itself is not retried: a failure raises `InitializationError`
and the caller decides how to exit. Inside the loop,
transport failures, rejected transactions, malformed blocks and proof
timeouts back off per the `RetryPolicy` and restart from step 1.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from rainbow_relay import metrics
from rainbow_relay.errors import (
    InitializationError,
    MalformedBlockError,
    ProofUnavailable,
    TransactionRejected,
    TransportError,
)
from rainbow_relay.lightclient import LightClientBlock, encode_light_client_block
from rainbow_relay.source import NodeStatus, SourceChainReader
from rainbow_relay.target import ClientHeadState, TargetChainClient, TxReceipt
from rainbow_relay.types import Bytes32

from .phases import InitOutcome, RelayPhase
from .retry import RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")

PROOF_POLL_INTERVAL = 0.3
"""Seconds between polls for a light-client block that is not available yet."""

RETRYABLE_ERRORS = (TransportError, TransactionRejected, MalformedBlockError, ProofUnavailable)
"""Failures inside the advancement loop that back off and retry."""


@dataclass(slots=True)
class RelayEngine:
    """
    Drives the initialization protocol and the advancement loop.

    - Reads: source chain status, blocks, proofs; contract head and stake
    - Writes: bootstrap block, stake deposit, new light-client blocks
    """

    source: SourceChainReader
    """Read-only source chain access."""

    target: TargetChainClient
    """Verifier contract access, signing as the relay account."""

    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    """Backoff applied to failed steps."""

    proof_poll_interval: float = PROOF_POLL_INTERVAL
    """Seconds between proof polls."""

    max_proof_wait: float | None = None
    """
    Give up on a proof after this many seconds in the advancement loop.

    `None` waits indefinitely. Initialization always waits indefinitely.
    """

    phase: RelayPhase = field(default=RelayPhase.IDLE)
    """Current phase, for logging and inspection."""

    _shutdown: asyncio.Event = field(default_factory=asyncio.Event, repr=False)
    """Set when shutdown is requested."""

    _blocks_submitted: int = field(default=0, repr=False)
    """Counter for blocks accepted by the contract."""

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def run(self, *, install_signal_handlers: bool = False) -> None:
        """
        Initialize the contract if needed, then advance until stopped.

        Args:
            install_signal_handlers: Whether to handle SIGINT/SIGTERM by
                stopping between steps. Disable for tests or non-main threads.

        Raises:
            InitializationError: The bootstrap block was rejected.
            RelayError: A step failed more often than the retry policy allows.
        """
        if install_signal_handlers:
            self._install_signal_handlers()

        try:
            if await self.initialize() is InitOutcome.STOPPED:
                return

            failures = 0
            while not self._shutdown.is_set():
                try:
                    await self.advance_once()
                    failures = 0
                except RETRYABLE_ERRORS as exc:
                    failures += 1
                    metrics.submission_failures.labels(kind=type(exc).__name__).inc()
                    if self.retry_policy.exhausted(failures):
                        logger.error("Relay step failed %d times, giving up: %s", failures, exc)
                        raise
                    delay = self.retry_policy.delay(failures)
                    logger.warning(
                        "Relay step failed (attempt %d): %s. Retrying in %.1f seconds.",
                        failures,
                        exc,
                        delay,
                    )
                    self._set_phase(RelayPhase.BACKING_OFF)
                    await self._sleep(delay)
        finally:
            self._set_phase(RelayPhase.STOPPED)

    def stop(self) -> None:
        """
        Request graceful shutdown.

        The engine finishes the network call in flight, then returns from `run`.
        Waits and backoffs are cut short.
        """
        self._shutdown.set()

    @property
    def is_running(self) -> bool:
        """Whether shutdown has not been requested."""
        return not self._shutdown.is_set()

    @property
    def blocks_submitted(self) -> int:
        """Number of blocks accepted by the contract since start."""
        return self._blocks_submitted

    # -------------------------------------------------------------------------
    # Initialization
    # -------------------------------------------------------------------------

    async def check_source(self) -> NodeStatus | None:
        """
        Confirm the source node answers, on the expected network if one is configured.

        Returns:
            The node status, or None if shutdown was requested first.

        Raises:
            ConfigurationError: The node serves a different network.
        """
        status = await self._read_with_retry("source chain", self.source.status)
        if status is not None:
            logger.info(
                "Source node on network %s at height %d",
                status.chain_id or "<unknown>",
                status.latest_height,
            )
        return status

    async def initialize(self) -> InitOutcome:
        """
        Bootstrap the contract with a first block if it has none.

        When the contract is already initialized this performs exactly one
        read and nothing else. Transport failures before the bootstrap
        transaction back off and retry: nothing has been written yet.

        Raises:
            InitializationError: The bootstrap transaction failed.
        """
        self._set_phase(RelayPhase.INITIALIZING)
        logger.info("Checking whether client is initialized.")
        initialized = await self._read_with_retry("target chain", self.target.is_initialized)
        if initialized is None:
            return InitOutcome.STOPPED
        if initialized:
            logger.info("Client is initialized.")
            return InitOutcome.ALREADY_INITIALIZED

        logger.info("Client is not initialized. Initializing.")
        block = await self._read_with_retry("source chain", self._bootstrap_block)
        if block is None:
            return InitOutcome.STOPPED

        logger.info("Initializing with block at height %d", block.height)
        logger.debug("Bootstrap block: %s", block.model_dump_json())
        try:
            await self.target.init_with_block(encode_light_client_block(block))
        except (TransactionRejected, TransportError) as exc:
            raise InitializationError(f"Failed to initialize client: {exc}") from exc

        logger.info("Client is initialized.")
        return InitOutcome.INITIALIZED

    async def _bootstrap_block(self) -> LightClientBlock | None:
        """Find the light-client block following the source chain's latest final block."""
        status = await self.source.status()
        head_block = await self.source.block(status.latest_height)
        last_final = head_block.header.last_final_block
        logger.info(
            "Source head at height %d, last final block %s",
            status.latest_height,
            last_final.to_base58(),
        )
        return await self._await_proof(last_final, deadline=None)

    async def _read_with_retry(self, chain: str, read: Callable[[], Awaitable[T]]) -> T | None:
        """
        Await `read`, backing off on transport failures.

        Returns:
            The result, or None if shutdown was requested first.
        """
        failures = 0
        while not self._shutdown.is_set():
            try:
                return await read()
            except TransportError as exc:
                failures += 1
                if self.retry_policy.exhausted(failures):
                    raise
                delay = self.retry_policy.delay(failures)
                logger.warning(
                    "Cannot read %s: %s. Retrying in %.1f seconds.", chain, exc, delay
                )
                await self._sleep(delay)
        return None

    # -------------------------------------------------------------------------
    # Advancement
    # -------------------------------------------------------------------------

    async def advance_once(self) -> TxReceipt | None:
        """
        Run one advancement step: wait, stake, fetch, submit.

        Returns:
            The receipt of the submitted block, or None if shutdown was
            requested before submission.
        """
        head, head_hash = await self._read_head()

        if not await self._await_validity(head):
            return None

        await self._ensure_stake()

        deadline = None
        if self.max_proof_wait is not None:
            deadline = time.monotonic() + self.max_proof_wait
        block = await self._await_proof(head_hash, deadline=deadline)
        if block is None:
            return None

        self._set_phase(RelayPhase.SUBMITTING)
        logger.info("Adding block at height %d", block.height)
        logger.debug("Block: %s", block.model_dump_json())
        receipt = await self.target.add_light_client_block(encode_light_client_block(block))

        self._blocks_submitted += 1
        metrics.blocks_submitted.inc()
        return receipt

    async def _read_head(self) -> tuple[ClientHeadState, Bytes32]:
        """Read the contract's head and the hash it stores for it."""
        self._set_phase(RelayPhase.READING_HEAD)
        head = await self.target.head()
        head_hash = await self.target.block_hash(head.height)
        metrics.head_height.set(int(head.height))
        logger.info(
            "Current light client head is: hash=%s, height=%d",
            head_hash.to_base58(),
            head.height,
        )
        return head, head_hash

    async def _await_validity(self, head: ClientHeadState) -> bool:
        """
        Sleep until target-chain time reaches the head's `valid_after`.

        Returns:
            False if shutdown was requested while waiting.
        """
        self._set_phase(RelayPhase.AWAITING_VALIDITY)
        started = time.monotonic()
        while not self._shutdown.is_set():
            now = await self.target.current_chain_time()
            if now >= head.valid_after:
                logger.info("Block is valid.")
                metrics.validity_wait_time.observe(time.monotonic() - started)
                return True
            remaining = int(head.valid_after) - now
            logger.info("Block is not valid yet. Sleeping %d seconds.", remaining)
            await self._sleep(remaining)
        return False

    async def _ensure_stake(self) -> None:
        """Deposit the required stake if the relay account has none."""
        self._set_phase(RelayPhase.ENSURING_STAKE)
        balance = await self.target.stake_balance_of(self.target.address)
        if balance != 0:
            logger.debug("Stake balance of %s is %d wei", self.target.address, balance)
            return

        amount = await self.target.required_stake_amount()
        logger.info(
            "The sender account does not have enough stake. Transferring %d wei.", amount
        )
        await self.target.deposit(amount)
        metrics.deposits.inc()
        logger.info("Transferred.")

    async def _await_proof(
        self, after_hash: Bytes32, *, deadline: float | None
    ) -> LightClientBlock | None:
        """
        Poll the source chain until the block after `after_hash` is available.

        Returns:
            The block, or None if shutdown was requested while polling.

        Raises:
            ProofUnavailable: `deadline` (a `time.monotonic()` value) passed.
        """
        self._set_phase(RelayPhase.FETCHING_PROOF)
        while not self._shutdown.is_set():
            block = await self.source.next_light_client_block(after_hash)
            if block is not None:
                return block
            if deadline is not None and time.monotonic() >= deadline:
                raise ProofUnavailable(
                    f"No light client block after {after_hash.to_base58()} "
                    f"within {self.max_proof_wait} seconds"
                )
            logger.debug("Light client block after %s not available yet", after_hash.to_base58())
            await self._sleep(self.proof_poll_interval)
        return None

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _sleep(self, seconds: float) -> None:
        """Sleep for `seconds`, waking early on shutdown."""
        if seconds <= 0:
            return
        try:
            await asyncio.wait_for(self._shutdown.wait(), timeout=seconds)
        except TimeoutError:
            pass

    def _set_phase(self, phase: RelayPhase) -> None:
        if phase is not self.phase:
            logger.debug("Relay phase %s -> %s", self.phase.name, phase.name)
            self.phase = phase

    def _install_signal_handlers(self) -> None:
        """
        Stop between steps on SIGINT (Ctrl+C) or SIGTERM.

        Silently ignores errors if handlers cannot be installed.
        This happens in non-main threads or embedded contexts.
        """
        try:
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(sig, self.stop)
        except (ValueError, RuntimeError, NotImplementedError):
            pass
