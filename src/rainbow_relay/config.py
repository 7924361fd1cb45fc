"""
Relay configuration.

Settings come from three layers, later layers overriding earlier ones:

1. A YAML file (`--config`), with kebab-case keys:

       near-node-url: https://rpc.testnet.near.org
       near-network-id: testnet
       eth-node-url: http://localhost:8545
       eth-master-sk: 0x2bdd21761a483f71054e14f5b827213567971c676928d9a1808cbfa4b7501200
       near2eth-client-abi-path: ./NearBridge.abi
       near2eth-client-address: 0x5FbDB2315678afecb367f032d93F642f64180aa3

2. Environment variables (`NEAR_NODE_URL`, ...; see `ENV_VARS`).
3. Command-line flags.

Any missing or invalid setting is a `ConfigurationError`, raised before the
relay touches either chain.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import SecretStr, ValidationError, field_validator
from web3 import Web3

from rainbow_relay.errors import ConfigurationError
from rainbow_relay.types import RelayModel

ENV_VARS: dict[str, str] = {
    "near_node_url": "NEAR_NODE_URL",
    "near_network_id": "NEAR_NETWORK_ID",
    "eth_node_url": "ETH_NODE_URL",
    "eth_master_sk": "ETH_MASTER_SK",
    "client_abi_path": "NEAR2ETH_CLIENT_ABI_PATH",
    "client_address": "NEAR2ETH_CLIENT_ADDRESS",
    "metrics_port": "RELAY_METRICS_PORT",
}
"""Environment variable consulted for each setting."""

_FILE_KEY_ALIASES: dict[str, str] = {
    "near2eth_client_abi_path": "client_abi_path",
    "near2eth_client_address": "client_address",
}
"""Config file keys that differ from the setting name once kebab-case is undone."""


class RelayConfig(RelayModel):
    """Validated relay settings."""

    model_config = RelayModel.model_config | {"extra": "forbid"}

    near_node_url: str
    """JSON-RPC endpoint of the source chain node."""

    near_network_id: str
    """Source chain network identifier, checked against the node's status."""

    eth_node_url: str
    """JSON-RPC endpoint of the target chain node."""

    eth_master_sk: SecretStr
    """Hex private key of the relay account on the target chain."""

    client_abi_path: Path
    """Path to the verifier contract's JSON ABI."""

    client_address: str
    """Address of the verifier contract."""

    metrics_port: int | None = None
    """Port for the Prometheus exporter. Disabled when unset."""

    @field_validator("near_node_url", "eth_node_url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"expected an http(s) URL, got {value!r}")
        return value

    @field_validator("near_network_id")
    @classmethod
    def _check_network_id(cls, value: str) -> str:
        if not value:
            raise ValueError("network id must not be empty")
        return value

    @field_validator("eth_master_sk")
    @classmethod
    def _check_secret_key(cls, value: SecretStr) -> SecretStr:
        raw = value.get_secret_value().removeprefix("0x")
        try:
            key = bytes.fromhex(raw)
        except ValueError as e:
            raise ValueError("secret key is not hex") from e
        if len(key) != 32:
            raise ValueError(f"secret key must be 32 bytes, got {len(key)}")
        return value

    @field_validator("client_abi_path")
    @classmethod
    def _check_abi_path(cls, value: Path) -> Path:
        if not value.is_file():
            raise ValueError(f"ABI file {value} does not exist")
        return value

    @field_validator("client_address")
    @classmethod
    def _check_address(cls, value: str) -> str:
        if not Web3.is_address(value):
            raise ValueError(f"{value!r} is not a valid address")
        return Web3.to_checksum_address(value)

    @field_validator("metrics_port")
    @classmethod
    def _check_port(cls, value: int | None) -> int | None:
        if value is not None and not (0 < value < 65536):
            raise ValueError(f"port {value} out of range")
        return value

    def load_abi(self) -> list[dict[str, Any]]:
        """
        Read the verifier contract ABI.

        Accepts either a bare ABI list or a compiler artifact with an `abi` key.

        Raises:
            ConfigurationError: The file is not JSON or holds no ABI list.
        """
        try:
            document = json.loads(self.client_abi_path.read_text())
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Cannot read ABI from {self.client_abi_path}: {e}") from e

        abi = document.get("abi") if isinstance(document, dict) else document
        if not isinstance(abi, list):
            raise ConfigurationError(f"{self.client_abi_path} does not contain an ABI list")
        return abi


def read_config_file(path: Path) -> dict[str, Any]:
    """
    Read a YAML config file into setting names.

    Raises:
        ConfigurationError: The file is missing or is not a YAML mapping.
    """
    try:
        with path.open() as f:
            document = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")

    settings = {}
    for key, value in document.items():
        name = str(key).replace("-", "_")
        settings[_FILE_KEY_ALIASES.get(name, name)] = value
    return settings


def load_config(
    *,
    config_path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> RelayConfig:
    """
    Merge the config file, environment and explicit overrides, then validate.

    Args:
        config_path: Optional YAML file.
        overrides: Values from the command line; `None` entries are ignored.
        environ: Environment to read; defaults to `os.environ`.

    Raises:
        ConfigurationError: A setting is missing or invalid.
    """
    environ = os.environ if environ is None else environ

    values: dict[str, Any] = {}
    if config_path is not None:
        values |= read_config_file(config_path)
    values |= {name: environ[var] for name, var in ENV_VARS.items() if var in environ}
    values |= {name: value for name, value in (overrides or {}).items() if value is not None}

    try:
        return RelayConfig.model_validate(values)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'config'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {problems}") from e
