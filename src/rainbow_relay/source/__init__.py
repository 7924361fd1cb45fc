"""Source chain access: the reader protocol and its JSON-RPC implementation."""

from .client import NearRpcClient
from .interface import BlockHeaderView, BlockView, NodeStatus, SourceChainReader, SyncInfo

__all__ = [
    "SourceChainReader",
    "NearRpcClient",
    "NodeStatus",
    "SyncInfo",
    "BlockView",
    "BlockHeaderView",
]
