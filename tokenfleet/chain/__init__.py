"""
Chain access module.

Compiles the token contract and talks to the node on behalf of the wallets.
"""
from .client import ChainClient, connect, load_identities
from .compiler import ContractCompiler, load_contract_source

__all__ = [
    "ChainClient",
    "ContractCompiler",
    "connect",
    "load_contract_source",
    "load_identities",
]
