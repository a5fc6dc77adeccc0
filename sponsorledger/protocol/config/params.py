# MIT License
# Copyright (c) 2025 Hashborn

import os
from typing import Dict

# Global Constants
NATIVE_ASSET_CODE = "XLM"
INT64_MAX = 2**63 - 1

# Reserve weight of an account entry, in base reserves
ACCOUNT_BASE_RESERVES = 2

class LedgerConfig:
    def __init__(self,
                 network_id: str,
                 network_passphrase: str,
                 base_reserve: int = 5_000_000,  # 0.5 units
                 # Claimable balances
                 max_predicate_depth: int = 4,
                 max_claimants: int = 10,
                 # Data entries
                 max_data_name_length: int = 64,
                 max_data_value_length: int = 64,
                 # Signers
                 max_signer_weight: int = 255):
        self.network_id = network_id
        self.network_passphrase = network_passphrase
        self.base_reserve = base_reserve
        self.max_predicate_depth = max_predicate_depth
        self.max_claimants = max_claimants
        self.max_data_name_length = max_data_name_length
        self.max_data_value_length = max_data_value_length
        self.max_signer_weight = max_signer_weight

NETWORKS: Dict[str, LedgerConfig] = {
    "devnet": LedgerConfig(
        network_id="devnet",
        network_passphrase="Sponsorledger Devnet ; 2025",
        base_reserve=5_000_000,
    ),
    "testnet": LedgerConfig(
        network_id="testnet",
        network_passphrase="Sponsorledger Testnet ; 2025",
        base_reserve=5_000_000,
    ),
    "mainnet": LedgerConfig(
        network_id="mainnet",
        network_passphrase="Sponsorledger Mainnet ; 2025",
        base_reserve=5_000_000,
        max_claimants=10,
    ),
}

# Default to devnet for now
CURRENT_NETWORK = NETWORKS[os.environ.get("SPONSORLEDGER_NETWORK", "devnet")]
