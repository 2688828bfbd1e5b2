"""Contract source verification against Etherscan-compatible explorers."""

import json
from typing import Any, Dict, Mapping, Union

import requests

from wantaek import config

CODE_FORMAT = "solidity-standard-json-input"


class ExplorerClient:
    """Client for one explorer API using the key assembled for its network."""

    def __init__(self, network: str, api_key: str, api_url: str, browser_url: str = "", timeout: int = 30):
        self.network = network
        self.api_key = api_key
        self.api_url = api_url
        self.browser_url = browser_url
        self.timeout = timeout

    @classmethod
    def for_network(cls, network: str, verification_keys: Mapping[str, str]) -> "ExplorerClient":
        """
        Build a client from the assembled verification key map.

        Raises:
            ValueError: If no key was supplied for the network or its explorer is unknown
        """
        api_key = verification_keys.get(network)
        if not api_key:
            raise ValueError(f"No explorer API key configured for {network}")

        explorer = config.get_explorer(network)
        if explorer is None:
            raise ValueError(f"No explorer known for {network}")

        api_url, browser_url = explorer
        return cls(network, api_key, api_url, browser_url)

    def _handle(self, response: requests.Response) -> str:
        response.raise_for_status()
        payload: Dict[str, Any] = response.json()
        if str(payload.get("status")) != "1":
            raise ValueError(f"Explorer rejected request: {payload.get('result') or payload.get('message')}")
        return payload["result"]

    def submit_verification(
        self,
        contract_address: str,
        contract_name: str,
        source: Union[str, Dict[str, Any]],
        compiler_version: str = config.COMPILER_VERSION,
        constructor_args: str = "",
    ) -> str:
        """
        Submit contract source for verification.

        Args:
            contract_address: Deployed contract address
            contract_name: Fully qualified name, e.g. "contracts/WantaekToken.sol:WantaekToken"
            source: Solidity standard JSON input (dict or serialized string)
            compiler_version: Full compiler build string
            constructor_args: ABI-encoded constructor arguments without 0x prefix

        Returns:
            GUID used to poll the verification status
        """
        if not isinstance(source, str):
            source = json.dumps(source)

        data = {
            "apikey": self.api_key,
            "module": "contract",
            "action": "verifysourcecode",
            "contractaddress": contract_address,
            "sourceCode": source,
            "codeformat": CODE_FORMAT,
            "contractname": contract_name,
            "compilerversion": compiler_version,
            "constructorArguements": constructor_args.removeprefix("0x"),
        }
        response = requests.post(self.api_url, data=data, timeout=self.timeout)
        return self._handle(response)

    def check_verification(self, guid: str) -> str:
        """Return the explorer's status message for a verification request."""
        params = {
            "apikey": self.api_key,
            "module": "contract",
            "action": "checkverifystatus",
            "guid": guid,
        }
        response = requests.get(self.api_url, params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json().get("result", "")

    def contract_url(self, contract_address: str) -> str:
        """Get the explorer page for a contract."""
        return f"{self.browser_url.rstrip('/')}/address/{contract_address}#code"
