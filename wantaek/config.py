#!/usr/bin/env python3
"""
Configuration module for the WantaekToken deployment toolkit.
Stores network endpoints, explorer endpoints and the secrets read from the environment.
Supports a .env file through python-dotenv.
"""

import os
from typing import Dict, List, Mapping, Optional, Tuple
from dotenv import load_dotenv

from wantaek.models import CustomChain, SecretBundle

# Load environment variables from .env file if it exists
load_dotenv()

SOLIDITY_VERSION = "0.8.19"

# Full compiler build string expected by Etherscan-compatible explorers
COMPILER_VERSION = "v0.8.19+commit.7dd6d404"

# Environment variable names for each secret
PRIVATE_KEY_ENV = "PRIVATE_KEY"
ALCHEMY_API_KEY_ENV = "ALCHEMY_API_KEY"
ETHERSCAN_API_KEY_ENV = "ETHERSCAN_API_KEY"
POLYGONSCAN_API_KEY_ENV = "POLYSCAN_API_KEY"

# Networks reachable through the Alchemy RPC provider
PROVIDER_NETWORKS: Tuple[str, ...] = ("goerli", "sepolia")
PROVIDER_URL_TEMPLATE = "https://eth-{network}.g.alchemy.com/v2/{api_key}"

# Alternate network with a public RPC endpoint
ALT_NETWORK = "zkEVMTestnet"
ALT_NETWORK_URL = "https://rpc.public.zkevm-test.net"
ALT_NETWORK_CHAIN_ID = 1442

# Explorer endpoints known to the verification tooling
# Structure: EXPLORERS[network] = (api_url, browser_url)
EXPLORERS: Dict[str, Tuple[str, str]] = {
    "goerli": ("https://api-goerli.etherscan.io/api", "https://goerli.etherscan.io"),
    "sepolia": ("https://api-sepolia.etherscan.io/api", "https://sepolia.etherscan.io"),
}

CUSTOM_CHAINS: Tuple[CustomChain, ...] = (
    CustomChain(
        network=ALT_NETWORK,
        chain_id=ALT_NETWORK_CHAIN_ID,
        api_url="https://api-testnet-zkevm.polygonscan.com/api",
        browser_url="https://testnet-zkevm.polygonscan.com",
    ),
)


def _optional(environ: Mapping[str, str], key: str) -> Optional[str]:
    # Empty values count as unset
    value = environ.get(key)
    return value if value else None


def load_secret_bundle(environ: Optional[Mapping[str, str]] = None) -> SecretBundle:
    """
    Read the deployment secrets once from the environment.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        SecretBundle with None for every secret that is unset or empty
    """
    if environ is None:
        environ = os.environ

    return SecretBundle(
        private_key=_optional(environ, PRIVATE_KEY_ENV),
        alchemy_api_key=_optional(environ, ALCHEMY_API_KEY_ENV),
        etherscan_api_key=_optional(environ, ETHERSCAN_API_KEY_ENV),
        polygonscan_api_key=_optional(environ, POLYGONSCAN_API_KEY_ENV),
    )


def get_explorer(network: str) -> Optional[Tuple[str, str]]:
    """
    Get explorer endpoints for a given network.

    Args:
        network: Network name (e.g., "goerli", "sepolia", "zkEVMTestnet")

    Returns:
        Tuple of (api_url, browser_url), or None if not found
    """
    if network in EXPLORERS:
        return EXPLORERS[network]
    for chain in CUSTOM_CHAINS:
        if chain.network == network:
            return chain.api_url, chain.browser_url
    return None


def list_provider_networks() -> List[str]:
    """List the networks served by the RPC provider."""
    return list(PROVIDER_NETWORKS)


def list_networks() -> List[str]:
    """List every network the toolkit can configure."""
    return list(PROVIDER_NETWORKS) + [ALT_NETWORK]
