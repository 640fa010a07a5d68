"""Chain-related data transfer objects."""

from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class DeploymentAddresses:
    registry: str
    token: str


@dataclass(frozen=True)
class SigningSession:
    """Signing identity for one actor on one chain.

    ``signer`` is the adapter-specific handle used to sign (for the web3
    adapter, an ``eth_account`` LocalAccount). ``authorize`` is asked before
    every signature with a description of the call; returning False declines.
    An empty session (no address) is valid and only permits reads.
    """

    address: str | None = None
    chain_id: int | None = None
    signer: object | None = None
    authorize: Callable[[str], bool] | None = None

    @property
    def connected(self) -> bool:
        return self.address is not None


@dataclass(frozen=True)
class TransactionReceipt:
    tx_hash: str
    block_number: int | None
    succeeded: bool
