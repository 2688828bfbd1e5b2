"""Network and verification key assembly from the deployment secrets."""

from typing import Dict

from wantaek import config
from wantaek.models import DeploymentConfig, NetworkDescriptor, SecretBundle


def _provider_networks(private_key: str, api_key: str) -> Dict[str, NetworkDescriptor]:
    return {
        name: NetworkDescriptor(
            name=name,
            url=config.PROVIDER_URL_TEMPLATE.format(network=name, api_key=api_key),
            accounts=(private_key,),
        )
        for name in config.PROVIDER_NETWORKS
    }


def _alt_network(private_key: str) -> Dict[str, NetworkDescriptor]:
    return {
        config.ALT_NETWORK: NetworkDescriptor(
            name=config.ALT_NETWORK,
            url=config.ALT_NETWORK_URL,
            accounts=(private_key,),
            chain_id=config.ALT_NETWORK_CHAIN_ID,
        ),
    }


def assemble_networks(secrets: SecretBundle) -> Dict[str, NetworkDescriptor]:
    """
    Build the network map for a deployment run.

    Without a private key nothing is configured. With one, the alternate
    network is always present and the provider networks are added when an
    Alchemy key is also available.

    Args:
        secrets: Secrets read from the environment

    Returns:
        Mapping of network name to NetworkDescriptor (possibly empty)
    """
    networks: Dict[str, NetworkDescriptor] = {}
    if not secrets.private_key:
        return networks

    if secrets.alchemy_api_key:
        networks.update(_provider_networks(secrets.private_key, secrets.alchemy_api_key))
    networks.update(_alt_network(secrets.private_key))
    return networks


def assemble_verification_keys(secrets: SecretBundle) -> Dict[str, str]:
    """
    Build the explorer API key map for contract verification.

    Entries do not depend on which networks were activated; tooling that
    consumes the map ignores keys for networks it cannot reach.
    """
    api_keys: Dict[str, str] = {}
    if secrets.etherscan_api_key:
        for name in config.PROVIDER_NETWORKS:
            api_keys[name] = secrets.etherscan_api_key
    if secrets.polygonscan_api_key:
        api_keys[config.ALT_NETWORK] = secrets.polygonscan_api_key
    return api_keys


def assemble(secrets: SecretBundle) -> DeploymentConfig:
    """Assemble the full deployment configuration."""
    return DeploymentConfig(
        solidity=config.SOLIDITY_VERSION,
        networks=assemble_networks(secrets),
        verification_keys=assemble_verification_keys(secrets),
        custom_chains=config.CUSTOM_CHAINS,
    )
