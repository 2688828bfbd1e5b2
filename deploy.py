#!/usr/bin/env python3
"""Command-line entry point for the WantaekToken deployer."""

import argparse
import sys
from wantaek.cli import main

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="WantaekToken deployer")
    parser.add_argument(
        "--env-file",
        help="Load secrets from this .env file (overrides the environment)"
    )
    parser.add_argument(
        "--print-config",
        action="store_true",
        help="Print the assembled network configuration with secrets masked and exit"
    )

    args = parser.parse_args()

    sys.exit(main(args.env_file, args.print_config))
