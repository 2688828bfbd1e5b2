"""Tests for environment loading and explorer lookups."""

from wantaek import config
from wantaek.models import SecretBundle


def test_load_secret_bundle_reads_all_keys():
    environ = {
        "PRIVATE_KEY": "0xabc",
        "ALCHEMY_API_KEY": "p1",
        "ETHERSCAN_API_KEY": "e1",
        "POLYSCAN_API_KEY": "z1",
    }

    assert config.load_secret_bundle(environ) == SecretBundle(
        private_key="0xabc",
        alchemy_api_key="p1",
        etherscan_api_key="e1",
        polygonscan_api_key="z1",
    )


def test_load_secret_bundle_missing_and_empty_are_none():
    secrets = config.load_secret_bundle({"PRIVATE_KEY": "", "ALCHEMY_API_KEY": "p1"})

    assert secrets.private_key is None
    assert secrets.alchemy_api_key == "p1"
    assert secrets.etherscan_api_key is None
    assert secrets.polygonscan_api_key is None


def test_load_secret_bundle_defaults_to_process_environment(monkeypatch):
    for key in ("PRIVATE_KEY", "ALCHEMY_API_KEY", "ETHERSCAN_API_KEY", "POLYSCAN_API_KEY"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("PRIVATE_KEY", "0xdef")

    assert config.load_secret_bundle() == SecretBundle(private_key="0xdef")


def test_get_explorer():
    assert config.get_explorer("sepolia") == (
        "https://api-sepolia.etherscan.io/api",
        "https://sepolia.etherscan.io",
    )
    assert config.get_explorer("zkEVMTestnet") == (
        "https://api-testnet-zkevm.polygonscan.com/api",
        "https://testnet-zkevm.polygonscan.com",
    )
    assert config.get_explorer("mainnet") is None


def test_list_networks():
    assert config.list_provider_networks() == ["goerli", "sepolia"]
    assert config.list_networks() == ["goerli", "sepolia", "zkEVMTestnet"]
