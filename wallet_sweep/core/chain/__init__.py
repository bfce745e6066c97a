"""
Chain access for the sweep engine.

- ChainClient: capability interface the settlement executor depends on
- JsonRpcChainClient: JSON-RPC implementation with local signing
- InMemoryChainClient: in-process implementation for tests and dry runs
- NetworkSpec / sweep_networks: the networks a wallet is swept on
"""

from .client import (
    ChainClient,
    ChainClientError,
    RpcError,
    TransactionSigningError,
    ReceiptStatus,
    FeeEstimate,
    TransactionReceipt,
)

from .networks import (
    NetworkSpec,
    NETWORK_METADATA,
    get_network,
    sweep_networks,
)

from .rpc_client import JsonRpcChainClient

from .memory import InMemoryChainClient, RecordedCall

__all__ = [
    # Interface
    "ChainClient",
    "ChainClientError",
    "RpcError",
    "TransactionSigningError",
    "ReceiptStatus",
    "FeeEstimate",
    "TransactionReceipt",
    # Networks
    "NetworkSpec",
    "NETWORK_METADATA",
    "get_network",
    "sweep_networks",
    # Implementations
    "JsonRpcChainClient",
    "InMemoryChainClient",
    "RecordedCall",
]
