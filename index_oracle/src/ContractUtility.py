"""ContractUtility: Web3 connection and keeper account setup."""

import os

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3

# Well-known first development account of local EVM nodes (anvil, hardhat).
LOCALNET_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"


class ContractUtility:
    """Utility for connecting to the chain that hosts the rate sources.

    :ivar network: Network RPC URL.
    :ivar w3: Configured Web3 instance.
    """

    NETWORKS = {
        "localnet": "http://localhost:8545",
    }

    def __init__(self, network_name: str) -> None:
        """Initialize the contract utility.

        :param network_name: Known network name, or an RPC URL.
        """
        # RPC_URL env var overrides the default for the network
        self.network = os.environ.get("RPC_URL") or self.NETWORKS.get(
            network_name, network_name
        )
        self.w3 = Web3(Web3.HTTPProvider(self.network))

    @staticmethod
    def keeper_account(network_name: str, key: str | None = None) -> LocalAccount:
        """Load the account whose address identifies the keeper.

        :param network_name: Network name; localnet falls back to the
            well-known development key.
        :param key: Hex private key.
        :returns: Local account.
        :raises ValueError: If no key is given outside localnet.
        """
        if not key:
            if network_name != "localnet":
                raise ValueError(f"A keeper key is required on network {network_name}")
            key = LOCALNET_KEY
        return Account.from_key(key)
