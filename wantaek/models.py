"""Data models for the WantaekToken deployment toolkit."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class SecretBundle:
    """Secrets read once from the environment. ``None`` means absent."""
    private_key: Optional[str] = None
    alchemy_api_key: Optional[str] = None
    etherscan_api_key: Optional[str] = None
    polygonscan_api_key: Optional[str] = None


@dataclass(frozen=True)
class NetworkDescriptor:
    """Connection parameters for one target network."""
    name: str
    url: str
    accounts: Tuple[str, ...] = ()
    chain_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return the shape deployment tooling expects for a network entry."""
        data: Dict[str, Any] = {"url": self.url, "accounts": list(self.accounts)}
        if self.chain_id is not None:
            data["chainId"] = self.chain_id
        return data


@dataclass(frozen=True)
class CustomChain:
    """Explorer endpoints for a chain the verification tooling does not know."""
    network: str
    chain_id: int
    api_url: str
    browser_url: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "network": self.network,
            "chainId": self.chain_id,
            "urls": {
                "apiURL": self.api_url,
                "browserURL": self.browser_url,
            },
        }


@dataclass(frozen=True)
class DeploymentConfig:
    """Networks and verification keys assembled for one deployment run."""
    solidity: str
    networks: Dict[str, NetworkDescriptor] = field(default_factory=dict)
    verification_keys: Dict[str, str] = field(default_factory=dict)
    custom_chains: Tuple[CustomChain, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "solidity": self.solidity,
            "networks": {name: network.to_dict() for name, network in self.networks.items()},
            "etherscan": {
                "apiKey": dict(self.verification_keys),
                "customChains": [chain.to_dict() for chain in self.custom_chains],
            },
        }
