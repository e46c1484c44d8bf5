# seismic_shield/block/chains.py
"""
Seismic Shield Chain Definitions

Chain parameters passed explicitly to the builder and client. There is no
module-level mutable registry; look chains up with :func:`get_chain`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


# =============================================================================
# Constants
# =============================================================================

SEISMIC_TX_TYPE: int = 0x4A

DEFAULT_BLOCKS_WINDOW: int = 100
DEFAULT_GAS: int = 30_000_000


# =============================================================================
# Chain
# =============================================================================

@dataclass(frozen=True)
class Chain:
    """
    A network that accepts seismic transactions.

    Attributes:
        chain_id: EIP-155 chain id
        name: Human-readable name
        rpc_url: Default JSON-RPC endpoint
        block_explorer: Optional explorer base URL
    """
    chain_id: int
    name: str
    rpc_url: str
    block_explorer: str = ""

    def __str__(self) -> str:
        return f"{self.name} ({self.chain_id})"


SANVIL = Chain(
    chain_id=31337,
    name="Sanvil",
    rpc_url="http://127.0.0.1:8545",
)

SEISMIC_DEVNET = Chain(
    chain_id=5124,
    name="Seismic Devnet",
    rpc_url="https://node-2.seismicdev.net/rpc",
    block_explorer="https://explorer-2.seismicdev.net",
)

LOCAL_SEISMIC_RETH = Chain(
    chain_id=5124,
    name="Seismic Reth (local)",
    rpc_url="http://127.0.0.1:8545",
)

CHAINS: Dict[str, Chain] = {
    "sanvil": SANVIL,
    "devnet": SEISMIC_DEVNET,
    "local": LOCAL_SEISMIC_RETH,
}


def get_chain(name: str) -> Chain:
    """Look up a known chain by short name."""
    try:
        return CHAINS[name.lower()]
    except KeyError:
        raise KeyError(
            f"Unknown chain {name!r}. Known: {', '.join(sorted(CHAINS))}"
        ) from None


__all__ = [
    "SEISMIC_TX_TYPE",
    "DEFAULT_BLOCKS_WINDOW",
    "DEFAULT_GAS",
    "Chain",
    "SANVIL",
    "SEISMIC_DEVNET",
    "LOCAL_SEISMIC_RETH",
    "CHAINS",
    "get_chain",
]
