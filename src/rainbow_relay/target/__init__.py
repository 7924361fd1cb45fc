"""Target chain access: the verifier contract protocol and its web3 implementation."""

from .contract import TX_GAS_LIMIT, VerifierContractClient
from .interface import ClientHeadState, TargetChainClient, TxReceipt

__all__ = [
    "TargetChainClient",
    "VerifierContractClient",
    "ClientHeadState",
    "TxReceipt",
    "TX_GAS_LIMIT",
]
