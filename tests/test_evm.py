"""Tests for the deployment client."""

import json
from unittest.mock import MagicMock, patch

import pytest
from web3.exceptions import TimeExhausted

from wantaek import evm
from wantaek.models import NetworkDescriptor

# Well-known development key (first account of the default test mnemonic)
PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

NETWORK = NetworkDescriptor(
    name="zkEVMTestnet",
    url="https://rpc.public.zkevm-test.net",
    accounts=(PRIVATE_KEY,),
    chain_id=1442,
)


def test_role_identifiers():
    assert evm.DEFAULT_ADMIN_ROLE == "0x" + "0" * 64
    assert evm.MINTER_ROLE == "0x9f2df0fed2c77648de5860a4cc508cd0818c85b8b8a1ab4ceeef8d981c8956a6"
    assert evm.PAUSER_ROLE == "0x65d7a28e3265b37a6474929f336521b332c1681b933f6cb9f3376673440d862a"


def test_derive_address_from_private_key():
    info = evm.derive_address_from_private_key(PRIVATE_KEY)
    assert info["address"] == ADDRESS
    assert info["public_key"].startswith("0x")

    assert evm.derive_address_from_private_key(PRIVATE_KEY[2:])["address"] == ADDRESS


@pytest.mark.parametrize("bad_key", ["0x1234", "not-hex"])
def test_derive_address_rejects_bad_keys(bad_key):
    with pytest.raises(ValueError):
        evm.derive_address_from_private_key(bad_key)


def test_load_artifact(tmp_path):
    path = tmp_path / "WantaekToken.json"
    path.write_text(json.dumps({"contractName": "WantaekToken", "abi": [], "bytecode": "0x6080"}))

    assert evm.load_artifact(path) == {"contract_name": "WantaekToken", "abi": [], "bytecode": "0x6080"}


@pytest.mark.parametrize("data", [{"bytecode": "0x6080"}, {"abi": [], "bytecode": "0x"}, {"abi": []}])
def test_load_artifact_rejects_incomplete(tmp_path, data):
    path = tmp_path / "Broken.json"
    path.write_text(json.dumps(data))

    with pytest.raises(ValueError):
        evm.load_artifact(path)


def test_check_deployer_roles():
    info = {
        "roles": {name: [ADDRESS] for name in evm.ROLES},
        "role_admins": {name: evm.DEFAULT_ADMIN_ROLE for name in evm.ADMINISTERED_ROLES},
    }
    assert evm.check_deployer_roles(info, ADDRESS) == []

    info["roles"]["MINTER_ROLE"] = [ADDRESS, "0x0000000000000000000000000000000000000001"]
    failures = evm.check_deployer_roles(info, ADDRESS)
    assert len(failures) == 1
    assert failures[0].startswith("MINTER_ROLE")


def test_client_requires_account():
    with pytest.raises(ValueError):
        evm.DeployClient(NetworkDescriptor(name="empty", url="http://localhost:8545"))


def test_client_raises_when_unreachable():
    with patch("wantaek.evm.Web3") as web3_cls:
        web3_cls.return_value.is_connected.return_value = False
        with pytest.raises(ConnectionError):
            evm.DeployClient(NETWORK)


@pytest.fixture
def client():
    w3 = MagicMock()
    w3.eth.chain_id = 1442
    w3.eth.gas_price = 1000
    w3.eth.get_transaction_count.return_value = 7
    constructor = w3.eth.contract.return_value.constructor.return_value
    constructor.estimate_gas.return_value = 100000
    constructor.build_transaction.side_effect = lambda params: dict(params, data="0x6080")
    with patch.object(evm.DeployClient, "_connect_web3", return_value=w3):
        yield evm.DeployClient(NETWORK)


def test_client_uses_first_account(client):
    assert client.deployer == ADDRESS


def test_build_deploy_transaction(client):
    tx = client.build_deploy_transaction([], "0x6080")

    assert tx == {
        "from": ADDRESS,
        "nonce": 7,
        "gas": 120000,
        "gasPrice": 1000,
        "chainId": 1442,
        "data": "0x6080",
    }
    client.w3.eth.contract.assert_called_with(abi=[], bytecode="0x6080")


def test_build_deploy_transaction_rejects_wrong_chain(client):
    client.w3.eth.chain_id = 1
    with pytest.raises(ValueError):
        client.build_deploy_transaction([], "0x6080")


def test_deploy(client):
    tx_hash = b"\x12" * 32
    client.w3.eth.send_raw_transaction.return_value = tx_hash
    client.w3.eth.wait_for_transaction_receipt.return_value = MagicMock(
        status=1,
        contractAddress="0x5FbDB2315678afecb367f032d93F642f64180aa3",
        blockNumber=5,
        gasUsed=90000,
    )

    result = client.deploy({"contract_name": "WantaekToken", "abi": [], "bytecode": "0x6080"})

    assert result["contract_address"] == "0x5FbDB2315678afecb367f032d93F642f64180aa3"
    assert result["transaction_hash"] == "0x" + "12" * 32
    assert result["deployer"] == ADDRESS
    assert result["network"] == "zkEVMTestnet"
    assert result["block_number"] == 5


def test_deploy_reverted(client):
    client.w3.eth.send_raw_transaction.return_value = b"\x12" * 32
    client.w3.eth.wait_for_transaction_receipt.return_value = MagicMock(status=0)

    with pytest.raises(ValueError):
        client.deploy({"contract_name": "WantaekToken", "abi": [], "bytecode": "0x6080"})


def test_get_role_members(client):
    functions = client.w3.eth.contract.return_value.functions
    functions.getRoleMemberCount.return_value.call.return_value = 1
    functions.getRoleMember.return_value.call.return_value = ADDRESS

    assert client.get_role_members(ADDRESS, evm.MINTER_ROLE) == [ADDRESS]
    functions.getRoleMember.assert_called_with(bytes.fromhex(evm.MINTER_ROLE[2:]), 0)


def test_get_balance(client):
    functions = client.w3.eth.contract.return_value.functions
    functions.balanceOf.return_value.call.return_value = 4999

    assert client.get_balance(ADDRESS, ADDRESS.lower()) == 4999
    functions.balanceOf.assert_called_with(ADDRESS)


def test_check_deployer_roles_flags_role_admin():
    info = {
        "roles": {name: [ADDRESS] for name in evm.ROLES},
        "role_admins": {"MINTER_ROLE": evm.DEFAULT_ADMIN_ROLE, "PAUSER_ROLE": evm.MINTER_ROLE},
    }

    failures = evm.check_deployer_roles(info, ADDRESS)
    assert len(failures) == 1
    assert failures[0].startswith("PAUSER_ROLE admin")


def test_get_token_info_reads_role_admins(client):
    functions = client.w3.eth.contract.return_value.functions
    functions.getRoleMemberCount.return_value.call.return_value = 1
    functions.getRoleMember.return_value.call.return_value = ADDRESS
    functions.getRoleAdmin.return_value.call.return_value = b"\x00" * 32

    info = client.get_token_info(ADDRESS)

    assert info["role_admins"] == {
        "MINTER_ROLE": evm.DEFAULT_ADMIN_ROLE,
        "PAUSER_ROLE": evm.DEFAULT_ADMIN_ROLE,
    }
    functions.getRoleAdmin.assert_any_call(bytes.fromhex(evm.MINTER_ROLE[2:]))
    functions.getRoleAdmin.assert_any_call(bytes.fromhex(evm.PAUSER_ROLE[2:]))


def test_deploy_receipt_timeout_returns_pending(client):
    client.w3.eth.send_raw_transaction.return_value = b"\x12" * 32
    client.w3.eth.wait_for_transaction_receipt.side_effect = TimeExhausted("timed out")

    result = client.deploy({"contract_name": "WantaekToken", "abi": [], "bytecode": "0x6080"})

    assert result["status"] == "pending"
    assert result["contract_address"] is None
    assert result["transaction_hash"] == "0x" + "12" * 32
