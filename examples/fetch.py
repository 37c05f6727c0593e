#!/usr/bin/env python3
"""Example CLI that fetches and displays node status."""

import argparse
import logging
import sys

from noderpc.client import Client
from noderpc.config import DEFAULT_HTTP_TIMEOUT, RPC_URLS
from noderpc.errors import RPCClientError, RPCError, TransportError
from noderpc.state import Commitment


def main() -> None:
    parser = argparse.ArgumentParser(description="Fetch node status over JSON-RPC")
    parser.add_argument(
        "--env",
        default="mainnet-beta",
        choices=list(RPC_URLS),
        help="Environment to connect to",
    )
    parser.add_argument("--url", help="RPC URL (overrides --env)")
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_HTTP_TIMEOUT,
        help="Overall HTTP timeout in seconds",
    )
    parser.add_argument(
        "--commitment",
        default=Commitment.FINALIZED.value,
        choices=[c.value for c in Commitment],
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log RPC traffic")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    url = args.url or RPC_URLS[args.env]
    print(f"Fetching node status from {url}...\n")

    with Client(url, http_timeout=args.timeout) as client:
        try:
            client.test_connection()
        except RPCClientError as e:
            print(f"Node unreachable: {e}")
            sys.exit(1)

        print("=== Node ===")
        print(f"Version:                {client.get_version()}")
        try:
            print(f"Health:                 {client.get_health()}")
        except RPCError as e:
            print(f"Health:                 unhealthy ({e.message})")
        print()

        try:
            info = client.get_epoch_info(args.commitment)
            print(f"=== Epoch ({args.commitment}) ===")
            print(f"Epoch:                  {info.epoch}")
            print(f"Absolute Slot:          {info.absolute_slot}")
            print(f"Block Height:           {info.block_height}")
            print(f"Slot Index:             {info.slot_index}/{info.slots_in_epoch}")
            if info.transaction_count is not None:
                print(f"Transaction Count:      {info.transaction_count}")
        except TransportError as e:
            print(f"  Error: {e}")
            sys.exit(1)
        except RPCClientError as e:
            print(f"  Not available: {e}")
        print()

        print("=== Ledger ===")
        for label, fetch in (
            ("Minimum Ledger Slot", client.get_minimum_ledger_slot),
            ("First Available Block", client.get_first_available_block),
        ):
            try:
                print(f"{label + ':':<24}{fetch()}")
            except RPCClientError as e:
                print(f"{label + ':':<24}error: {e}")
        try:
            info = client.get_epoch_info(args.commitment)
            block_time = client.get_block_time(info.absolute_slot)
            print(f"{'Block Time:':<24}{'not available' if block_time is None else block_time}")
        except RPCClientError as e:
            print(f"{'Block Time:':<24}error: {e}")
        print()

    print("Done.")


if __name__ == "__main__":
    main()
