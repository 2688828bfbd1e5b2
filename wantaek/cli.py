"""Main CLI interface for the WantaekToken deployer."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple
from dotenv import load_dotenv

from wantaek import config, evm, networks, utils
from wantaek.explorer import ExplorerClient
from wantaek.models import DeploymentConfig

DEFAULT_ARTIFACT = "artifacts/contracts/WantaekToken.sol/WantaekToken.json"
DEFAULT_CONTRACT_NAME = "contracts/WantaekToken.sol:WantaekToken"


def masked_config(deployment: DeploymentConfig) -> Dict[str, Any]:
    """Return the consumer config shape with every secret masked."""
    data = deployment.to_dict()
    for name, network in data["networks"].items():
        network["accounts"] = [utils.mask_secret(key) for key in network["accounts"]]
        if name in config.list_provider_networks():
            # Provider URLs end with the API key
            base, _, api_key = network["url"].rpartition("/")
            network["url"] = f"{base}/{utils.mask_secret(api_key)}"
    data["etherscan"]["apiKey"] = {
        name: utils.mask_secret(key) for name, key in data["etherscan"]["apiKey"].items()
    }
    return data


class DeployCLI:
    """Main CLI class for the deployer."""

    def __init__(self, deployment: DeploymentConfig) -> None:
        self.deployment = deployment
        self.last_deployment: Optional[Dict[str, Any]] = None
        self.actions: Dict[str, Tuple[str, Callable[[], None]]] = {
            "1": ("Show configured networks", self.show_networks),
            "2": ("Show verification keys", self.show_verification_keys),
            "3": ("Show deployer address", self.show_deployer_address),
            "4": ("Deploy WantaekToken", self.deploy_token),
            "5": ("Show token info", self.show_token_info),
            "6": ("Show token balance", self.show_token_balance),
            "7": ("Verify contract source", self.verify_contract),
            "0": ("Exit", self.exit_program),
        }
        self.should_exit = False

    def run(self) -> None:
        """Run the CLI main loop."""
        utils.print_banner()

        if not self.deployment.networks:
            print()
            utils.warn(f"{config.PRIVATE_KEY_ENV} is not set; no networks are configured.")

        while not self.should_exit:
            try:
                choice = self.prompt_main_menu()
                action = self.actions.get(choice)
                if action:
                    label, callback = action
                    utils.section_header(label)
                    try:
                        callback()
                    except KeyboardInterrupt:
                        utils.section_footer("Cancelled. Returning to main menu.")
                    except EOFError:
                        utils.section_footer("Received EOF. Exiting.")
                        self.should_exit = True
                else:
                    utils.warn(f"Unknown choice: {choice!r}")
            except KeyboardInterrupt:
                utils.section_footer("Interrupted. Returning to main menu.")
            except EOFError:
                print("\nGoodbye!")
                break

    def prompt_main_menu(self) -> str:
        """Prompt for main menu choice."""
        menu_items = {key: label for key, (label, _) in self.actions.items()}
        utils.print_menu("WantaekToken Deployer", menu_items)
        return input("Choose an option: ").strip()

    def prompt_choice(self, title: str, options: List[str]) -> str:
        """Prompt user to choose from a list of options."""
        options_map = {str(index): option for index, option in enumerate(options, start=1)}
        reverse_map = {option.lower(): option for option in options}

        while True:
            utils.print_menu(title, list(options_map.items()))
            choice = input("Choose an option: ").strip()
            if not choice:
                continue
            if choice in options_map:
                return options_map[choice]
            normalized = choice.lower()
            if normalized in reverse_map:
                return reverse_map[normalized]
            utils.warn(f"Invalid choice: {choice!r}. Please try again.")

    def prompt_input(self, prompt: str, default: str) -> str:
        """Prompt user for input, returning the default when empty."""
        user_input = input(f"{prompt}[{default}] ").strip()
        return user_input if user_input else default

    def prompt_confirm(self, prompt: str, default: bool = False) -> bool:
        """Prompt user for yes/no confirmation."""
        user_input = input(prompt).strip().lower()
        if not user_input:
            return default
        return user_input in ["y", "yes"]

    def select_network(self) -> Optional[str]:
        """Choose one of the assembled networks."""
        names = list(self.deployment.networks)
        if not names:
            utils.warn(f"No networks configured. Set {config.PRIVATE_KEY_ENV} in the environment or .env file.")
            return None
        if len(names) == 1:
            return names[0]
        return self.prompt_choice("Select network", names)

    def prompt_contract_address(self) -> str:
        default = self.last_deployment["contract_address"] if self.last_deployment else ""
        if default:
            return self.prompt_input("Enter contract address: ", default)
        return input("Enter contract address: ").strip()

    def show_networks(self) -> None:
        """Print every assembled network with its secrets masked."""
        if not self.deployment.networks:
            utils.warn("No networks configured.")
            return

        data = masked_config(self.deployment)["networks"]
        for name in config.list_networks():
            network = data.get(name)
            print()
            print(utils.bold(name))
            if network is None:
                print(f"  {utils.bold_yellow('not configured')}")
                continue
            print(f"  URL: {network['url']}")
            if "chainId" in network:
                print(f"  Chain ID: {network['chainId']}")
            print(f"  Accounts: {', '.join(network['accounts'])}")

    def show_verification_keys(self) -> None:
        """Print the explorer key map, flagging keys for inactive networks."""
        if not self.deployment.verification_keys:
            utils.warn("No explorer API keys configured.")
            return

        for name, api_key in self.deployment.verification_keys.items():
            line = f"{utils.bold(name)}: {utils.mask_secret(api_key)}"
            if name not in self.deployment.networks:
                line += f" {utils.bold_yellow('(network not configured)')}"
            print(line)

    def show_deployer_address(self) -> None:
        """Show the address that signs deployments."""
        name = self.select_network()
        if name is None:
            return

        try:
            address_info = evm.derive_address_from_private_key(self.deployment.networks[name].accounts[0])
        except ValueError as e:
            utils.error(f"Invalid {config.PRIVATE_KEY_ENV}: {e}")
            return

        print(f"{utils.bold('Address:')} {utils.bold_cyan(address_info['address'])}")
        print(f"{utils.bold('Public Key:')} {address_info['public_key']}")

    def deploy_token(self) -> None:
        """Deploy the token from its compiled artifact."""
        name = self.select_network()
        if name is None:
            return

        artifact_path = self.prompt_input("Artifact path: ", DEFAULT_ARTIFACT)
        try:
            artifact = evm.load_artifact(artifact_path)
        except (OSError, ValueError) as e:
            utils.error(f"Failed to load artifact: {e}")
            return

        if not self.prompt_confirm(f"Deploy {artifact['contract_name']} to {name}? (y/N): "):
            utils.info("Deployment cancelled.")
            return

        try:
            client = evm.DeployClient(self.deployment.networks[name])
            deployment = client.deploy(artifact)
        except Exception as e:
            utils.error(f"Deployment failed: {e}")
            return

        if deployment["status"] == "pending":
            print()
            utils.warn("Timed out waiting for the deployment receipt.")
            print(f"{utils.bold('Transaction Hash:')} {utils.bold_cyan(deployment['transaction_hash'])}")
            return

        self.last_deployment = deployment
        print()
        print(json.dumps(deployment, indent=2))
        utils.success(f"{deployment['contract_name']} deployed to {deployment['contract_address']}")

        try:
            info = client.get_token_info(deployment["contract_address"], artifact["abi"])
        except Exception as e:
            utils.warn(f"Could not read token state after deployment: {e}")
            return
        for failure in evm.check_deployer_roles(info, deployment["deployer"]):
            utils.warn(failure)

    def show_token_info(self) -> None:
        """Show name, supply, pause state and role members of a deployed token."""
        name = self.select_network()
        if name is None:
            return

        contract_address = self.prompt_contract_address()
        if not contract_address:
            utils.warn("Contract address is required.")
            return

        try:
            client = evm.DeployClient(self.deployment.networks[name])
            info = client.get_token_info(contract_address)
        except Exception as e:
            utils.error(f"Failed to read token: {e}")
            return

        print(f"{utils.bold('Token:')} {info['name']} ({info['symbol']})")
        print(f"{utils.bold('Decimals:')} {info['decimals']}")
        print(f"{utils.bold('Total Supply:')} {info['total_supply']}")
        paused = utils.bold_red("yes") if info["paused"] else "no"
        print(f"{utils.bold('Paused:')} {paused}")
        for role_name, members in info["roles"].items():
            print(f"{utils.bold(role_name + ':')} {', '.join(members) or '-'}")
        for role_name, admin in info["role_admins"].items():
            print(f"{utils.bold(role_name + ' admin:')} {admin}")

    def show_token_balance(self) -> None:
        """Show the token balance of an account."""
        name = self.select_network()
        if name is None:
            return

        contract_address = self.prompt_contract_address()
        if not contract_address:
            utils.warn("Contract address is required.")
            return

        holder = input("Enter holder address: ").strip()
        if not holder:
            utils.warn("Holder address is required.")
            return

        try:
            client = evm.DeployClient(self.deployment.networks[name])
            balance = client.get_balance(contract_address, holder)
        except Exception as e:
            utils.error(f"Failed to read balance: {e}")
            return

        utils.result(f"Balance: {balance}")

    def verify_contract(self) -> None:
        """Submit the contract source to the network's explorer."""
        names = list(self.deployment.verification_keys)
        if not names:
            utils.warn("No explorer API keys configured.")
            return
        name = names[0] if len(names) == 1 else self.prompt_choice("Select network", names)

        try:
            client = ExplorerClient.for_network(name, self.deployment.verification_keys)
        except ValueError as e:
            utils.error(str(e))
            return

        contract_address = self.prompt_contract_address()
        if not contract_address:
            utils.warn("Contract address is required.")
            return

        source_path = input("Standard JSON input path: ").strip()
        if not source_path:
            utils.warn("Standard JSON input is required.")
            return
        contract_name = self.prompt_input("Contract name: ", DEFAULT_CONTRACT_NAME)

        try:
            source = Path(source_path).read_text()
            guid = client.submit_verification(contract_address, contract_name, source)
            utils.success(f"Verification submitted: {guid}")
            utils.result(client.check_verification(guid))
        except Exception as e:
            utils.error(f"Verification failed: {e}")
            return

        print(f"{utils.bold('Explorer:')} {client.contract_url(contract_address)}")

    def exit_program(self) -> None:
        """Exit the program."""
        print("\nGoodbye!")
        self.should_exit = True


def main(env_file: Optional[str] = None, print_config: bool = False) -> int:
    """Main entry point."""
    if env_file:
        load_dotenv(env_file, override=True)

    deployment = networks.assemble(config.load_secret_bundle())

    if print_config:
        print(json.dumps(masked_config(deployment), indent=2))
        return 0

    cli = DeployCLI(deployment)
    cli.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
