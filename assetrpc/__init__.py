"""DAS-style JSON-RPC endpoints, dispatch and data model for serving L2 NFT assets."""

__version__ = "0.1.0"

__all__ = ["api_key", "dto", "endpoints", "errors", "interfaces", "l2", "registrar", "rpc_types"]