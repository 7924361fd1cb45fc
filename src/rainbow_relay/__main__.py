"""
NEAR to Ethereum light-client relay CLI entry point.

Keeps the verifier contract on the target chain in step with the source
chain by submitting each new light-client block once the previous one has
passed its validity window.

Usage::

    python -m rainbow_relay --config relay.yaml
    python -m rainbow_relay --config relay.yaml --metrics-port 9100 -v
    NEAR_NODE_URL=https://rpc.testnet.near.org python -m rainbow_relay --config relay.yaml

Options:
    --config               YAML file with relay settings (kebab-case keys)
    --near-node-url        Source chain JSON-RPC endpoint
    --near-network-id      Source chain network id (e.g. testnet)
    --eth-node-url         Target chain JSON-RPC endpoint
    --eth-master-sk        Hex private key of the relay account
    --client-abi-path      Path to the verifier contract ABI (JSON)
    --client-address       Address of the verifier contract
    --metrics-port         Serve Prometheus metrics on this port

Exit status:
    0  clean shutdown
    1  initialization failed or the relay gave up
    2  invalid configuration
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rainbow_relay.config import RelayConfig, load_config
from rainbow_relay.errors import ConfigurationError, InitializationError, RelayError
from rainbow_relay.metrics import serve_metrics
from rainbow_relay.relay import RelayEngine
from rainbow_relay.source import NearRpcClient
from rainbow_relay.target import VerifierContractClient

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2


class ColoredFormatter(logging.Formatter):
    """Logging formatter with ANSI colors for better readability."""

    # ANSI color codes
    GREY = "\x1b[38;5;244m"
    BLUE = "\x1b[38;5;39m"
    GREEN = "\x1b[38;5;40m"
    YELLOW = "\x1b[38;5;220m"
    RED = "\x1b[38;5;196m"
    BOLD_RED = "\x1b[38;5;196;1m"
    CYAN = "\x1b[38;5;51m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)

        timestamp = self.formatTime(record, self.datefmt)
        colored_time = f"{self.CYAN}{timestamp}{self.RESET}"
        levelname = f"{color}{record.levelname:8}{self.RESET}"
        name = f"{self.BLUE}{record.name}{self.RESET}"

        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        return f"{colored_time} {levelname} {name}: {message}"


def setup_logging(verbose: bool = False, no_color: bool = False) -> None:
    """Configure logging for the relay with optional colors."""
    level = logging.DEBUG if verbose else logging.INFO

    handler = logging.StreamHandler()
    handler.setLevel(level)

    if no_color:
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = ColoredFormatter(datefmt="%Y-%m-%d %H:%M:%S")

    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)

    # web3 and httpx log every request at DEBUG/INFO.
    if not verbose:
        for noisy in ("httpx", "web3", "urllib3"):
            logging.getLogger(noisy).setLevel(logging.WARNING)


async def run_relay(config: RelayConfig) -> None:
    """
    Run the relay until interrupted.

    Args:
        config: Validated relay settings.

    Raises:
        ConfigurationError: The contract ABI cannot be loaded, or the source
            node serves a different network.
        InitializationError: The bootstrap block was rejected.
        RelayError: The advancement loop gave up.
    """
    abi = config.load_abi()

    target = VerifierContractClient.connect(
        config.eth_node_url,
        contract_address=config.client_address,
        abi=abi,
        private_key=config.eth_master_sk.get_secret_value(),
    )
    logger.info("Relay account is %s", target.address)

    async with NearRpcClient(config.near_node_url, network_id=config.near_network_id) as source:
        engine = RelayEngine(source=source, target=target)
        await engine.check_source()
        await engine.run(install_signal_handlers=True)

    logger.info("Relay stopped after submitting %d blocks", engine.blocks_submitted)


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="rainbow-relay",
        description="NEAR to Ethereum light-client relay",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a YAML file with relay settings",
    )
    parser.add_argument("--near-node-url", help="Source chain JSON-RPC endpoint")
    parser.add_argument("--near-network-id", help="Source chain network id")
    parser.add_argument("--eth-node-url", help="Target chain JSON-RPC endpoint")
    parser.add_argument("--eth-master-sk", help="Hex private key of the relay account")
    parser.add_argument(
        "--client-abi-path",
        type=Path,
        help="Path to the verifier contract ABI (JSON)",
    )
    parser.add_argument("--client-address", help="Address of the verifier contract")
    parser.add_argument(
        "--metrics-port",
        type=int,
        default=None,
        help="Serve Prometheus metrics on this port (default: disabled)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored logging output",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(args.verbose, args.no_color)

    overrides = {
        "near_node_url": args.near_node_url,
        "near_network_id": args.near_network_id,
        "eth_node_url": args.eth_node_url,
        "eth_master_sk": args.eth_master_sk,
        "client_abi_path": args.client_abi_path,
        "client_address": args.client_address,
        "metrics_port": args.metrics_port,
    }

    try:
        config = load_config(config_path=args.config, overrides=overrides)
    except ConfigurationError as e:
        logger.error("%s", e)
        sys.exit(EXIT_CONFIG)

    if config.metrics_port is not None:
        serve_metrics(config.metrics_port)
        logger.info("Serving metrics on port %d", config.metrics_port)

    try:
        asyncio.run(run_relay(config))
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    except ConfigurationError as e:
        logger.error("%s", e)
        sys.exit(EXIT_CONFIG)
    except InitializationError as e:
        logger.error("Failure. %s", e)
        sys.exit(EXIT_FAILURE)
    except RelayError as e:
        logger.error("Failure. %s", e)
        sys.exit(EXIT_FAILURE)

    sys.exit(EXIT_OK)


if __name__ == "__main__":
    main()
