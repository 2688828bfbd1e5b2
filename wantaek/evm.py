"""EVM deployment and token queries for WantaekToken."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from eth_account import Account
from eth_keys import keys
from web3 import Web3
from web3.exceptions import TimeExhausted

from wantaek import utils
from wantaek.models import NetworkDescriptor

DEFAULT_ADMIN_ROLE = "0x" + "00" * 32


def role_id(name: str) -> str:
    """Return the AccessControl role identifier (keccak256 of the role name)."""
    return Web3.to_hex(Web3.keccak(text=name))


MINTER_ROLE = role_id("MINTER_ROLE")
PAUSER_ROLE = role_id("PAUSER_ROLE")

ROLES: Dict[str, str] = {
    "DEFAULT_ADMIN_ROLE": DEFAULT_ADMIN_ROLE,
    "MINTER_ROLE": MINTER_ROLE,
    "PAUSER_ROLE": PAUSER_ROLE,
}

# Roles whose admin role is expected to be DEFAULT_ADMIN_ROLE
ADMINISTERED_ROLES = ("MINTER_ROLE", "PAUSER_ROLE")

# Minimal ABI for the ERC20PresetMinterPauser read surface
TOKEN_ABI: List[Dict[str, Any]] = [
    {"inputs": [], "name": "name", "outputs": [{"name": "", "type": "string"}],
     "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "symbol", "outputs": [{"name": "", "type": "string"}],
     "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "decimals", "outputs": [{"name": "", "type": "uint8"}],
     "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "totalSupply", "outputs": [{"name": "", "type": "uint256"}],
     "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "paused", "outputs": [{"name": "", "type": "bool"}],
     "stateMutability": "view", "type": "function"},
    {"inputs": [{"name": "account", "type": "address"}], "name": "balanceOf",
     "outputs": [{"name": "", "type": "uint256"}], "stateMutability": "view", "type": "function"},
    {"inputs": [{"name": "role", "type": "bytes32"}], "name": "getRoleMemberCount",
     "outputs": [{"name": "", "type": "uint256"}], "stateMutability": "view", "type": "function"},
    {"inputs": [{"name": "role", "type": "bytes32"}, {"name": "index", "type": "uint256"}],
     "name": "getRoleMember", "outputs": [{"name": "", "type": "address"}],
     "stateMutability": "view", "type": "function"},
    {"inputs": [{"name": "role", "type": "bytes32"}], "name": "getRoleAdmin",
     "outputs": [{"name": "", "type": "bytes32"}], "stateMutability": "view", "type": "function"},
]


def load_artifact(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a compiled contract artifact.

    Args:
        path: Path to a JSON artifact with "abi" and "bytecode" fields

    Returns:
        Dictionary with contract_name, abi and bytecode

    Raises:
        ValueError: If the artifact lacks an ABI or deployable bytecode
    """
    artifact_path = Path(path)
    with artifact_path.open() as f:
        data = json.load(f)

    abi = data.get("abi")
    bytecode = data.get("bytecode")
    if abi is None:
        raise ValueError(f"Artifact {artifact_path} has no ABI")
    if not bytecode or bytecode in ("0x", "0x0"):
        raise ValueError(f"Artifact {artifact_path} has no deployable bytecode")

    return {
        "contract_name": data.get("contractName", artifact_path.stem),
        "abi": abi,
        "bytecode": bytecode,
    }


def _private_key_bytes(privkey_str: str) -> bytes:
    clean_privkey = privkey_str[2:] if privkey_str.startswith("0x") else privkey_str
    try:
        private_key_bytes = bytes.fromhex(clean_privkey)
    except ValueError as e:
        raise ValueError(f"Private key is not valid hex: {e}")

    if len(private_key_bytes) != 32:
        raise ValueError("Private key must be 32 bytes (64 hex characters).")
    return private_key_bytes


def derive_address_from_private_key(privkey_str: str) -> Dict[str, str]:
    """Derive address and public key from an EVM private key."""
    private_key_bytes = _private_key_bytes(privkey_str)
    public_key_obj = keys.PrivateKey(private_key_bytes).public_key
    account = Account.from_key(private_key_bytes)
    return {
        "address": account.address,
        "public_key": public_key_obj.to_hex(),
    }


def check_deployer_roles(info: Dict[str, Any], deployer: str) -> List[str]:
    """
    Check the preset's role setup against the deploying account.

    The preset grants the deployer the admin, minter and pauser roles and
    nobody else, and the default admin role administers the minter and
    pauser roles.

    Returns:
        List of failed checks (empty when the roles match)
    """
    failures = []
    for role_name in ROLES:
        members = info.get("roles", {}).get(role_name, [])
        if members != [deployer]:
            failures.append(f"{role_name} members are {members}, expected [{deployer}]")
    for role_name in ADMINISTERED_ROLES:
        admin = info.get("role_admins", {}).get(role_name)
        if admin != DEFAULT_ADMIN_ROLE:
            failures.append(f"{role_name} admin is {admin}, expected DEFAULT_ADMIN_ROLE")
    return failures


class DeployClient:
    """Deploys and inspects WantaekToken on one configured network."""

    def __init__(self, network: NetworkDescriptor):
        """
        Initialize the client with a network descriptor.

        Args:
            network: Assembled network entry holding the RPC URL and signing key
        """
        if not network.accounts:
            raise ValueError(f"No signing account configured for {network.name}")

        self.network = network
        self.private_key_bytes = _private_key_bytes(network.accounts[0])
        self.deployer = Account.from_key(self.private_key_bytes).address
        self.w3 = self._connect_web3()

    def _connect_web3(self) -> Web3:
        """Return a connected Web3 instance or raise if unreachable."""
        w3 = Web3(Web3.HTTPProvider(self.network.url))

        if not w3.is_connected():
            raise ConnectionError(f"Failed to connect to RPC endpoint for {self.network.name}")

        return w3

    def _chain_id(self) -> int:
        chain_id = self.w3.eth.chain_id
        expected = self.network.chain_id
        if expected is not None and chain_id != expected:
            raise ValueError(
                f"RPC endpoint for {self.network.name} reports chain ID {chain_id}, expected {expected}"
            )
        return chain_id

    def build_deploy_transaction(
        self,
        abi: List[Dict[str, Any]],
        bytecode: str,
        *constructor_args: Any,
    ) -> Dict[str, Any]:
        """Build the contract creation transaction after estimating gas."""
        contract = self.w3.eth.contract(abi=abi, bytecode=bytecode)
        constructor = contract.constructor(*constructor_args)

        try:
            gas_estimate = constructor.estimate_gas({"from": self.deployer})
        except Exception as e:
            raise ValueError(f"Failed to estimate deployment gas: {e}")

        chain_id = self._chain_id()
        utils.info(f"Chain ID: {chain_id}")

        gas_price = self.w3.eth.gas_price
        utils.info(f"Gas Price: {gas_price}")

        tx_params = {
            "from": self.deployer,
            "nonce": self.w3.eth.get_transaction_count(self.deployer),
            "gas": int(gas_estimate * 1.2),
            "gasPrice": gas_price,
            "chainId": chain_id,
        }
        return constructor.build_transaction(tx_params)

    def deploy(self, artifact: Dict[str, Any], *constructor_args: Any, timeout: int = 120) -> Dict[str, Any]:
        """
        Sign and broadcast the contract creation transaction.

        Args:
            artifact: Result of load_artifact
            constructor_args: Arguments passed to the contract constructor
            timeout: Seconds to wait for the receipt

        Returns:
            Dictionary describing the deployment; status is "pending" with no
            contract address when the receipt does not arrive within the timeout

        Raises:
            ValueError: If the transaction cannot be built or the deployment reverts
        """
        transaction = self.build_deploy_transaction(artifact["abi"], artifact["bytecode"], *constructor_args)
        signed_txn = self.w3.eth.account.sign_transaction(transaction, self.private_key_bytes)

        tx_hash = self.w3.eth.send_raw_transaction(signed_txn.raw_transaction)
        utils.info(f"Transaction sent: {Web3.to_hex(tx_hash)}")

        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
        except TimeExhausted:
            # Already broadcast; the caller still needs the hash to follow it up
            return {
                "contract_name": artifact.get("contract_name"),
                "contract_address": None,
                "transaction_hash": Web3.to_hex(tx_hash),
                "status": "pending",
                "deployer": self.deployer,
                "network": self.network.name,
            }

        if receipt.status != 1:
            raise ValueError(f"Deployment transaction {Web3.to_hex(tx_hash)} reverted")

        return {
            "contract_name": artifact.get("contract_name"),
            "contract_address": receipt.contractAddress,
            "transaction_hash": Web3.to_hex(tx_hash),
            "block_number": receipt.blockNumber,
            "gas_used": receipt.gasUsed,
            "status": receipt.status,
            "deployer": self.deployer,
            "network": self.network.name,
        }

    def _token(self, contract_address: str, abi: Optional[List[Dict[str, Any]]] = None):
        return self.w3.eth.contract(
            address=Web3.to_checksum_address(contract_address),
            abi=abi or TOKEN_ABI,
        )

    def get_role_members(self, contract_address: str, role: str,
                         abi: Optional[List[Dict[str, Any]]] = None) -> List[str]:
        """List every account holding a role."""
        token = self._token(contract_address, abi)
        role_bytes = Web3.to_bytes(hexstr=role)
        count = token.functions.getRoleMemberCount(role_bytes).call()
        return [token.functions.getRoleMember(role_bytes, index).call() for index in range(count)]

    def get_token_info(self, contract_address: str,
                       abi: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
        """Get token metadata, pause state, role membership and role admins."""
        token = self._token(contract_address, abi)
        return {
            "address": Web3.to_checksum_address(contract_address),
            "name": token.functions.name().call(),
            "symbol": token.functions.symbol().call(),
            "decimals": token.functions.decimals().call(),
            "total_supply": token.functions.totalSupply().call(),
            "paused": token.functions.paused().call(),
            "roles": {
                role_name: self.get_role_members(contract_address, role, abi)
                for role_name, role in ROLES.items()
            },
            "role_admins": {
                role_name: self.get_role_admin(contract_address, ROLES[role_name], abi)
                for role_name in ADMINISTERED_ROLES
            },
        }

    def get_role_admin(self, contract_address: str, role: str,
                       abi: Optional[List[Dict[str, Any]]] = None) -> str:
        """Get the role that administers a role, as a 0x-prefixed hex string."""
        token = self._token(contract_address, abi)
        admin = token.functions.getRoleAdmin(Web3.to_bytes(hexstr=role)).call()
        return Web3.to_hex(admin)

    def get_balance(self, contract_address: str, holder: str,
                    abi: Optional[List[Dict[str, Any]]] = None) -> int:
        """Get the token balance of an account in base units."""
        token = self._token(contract_address, abi)
        return token.functions.balanceOf(Web3.to_checksum_address(holder)).call()
