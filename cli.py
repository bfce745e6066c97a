#!/usr/bin/env python3
"""Operator CLI for checking sweep configuration and draining an agent wallet"""

import argparse
import asyncio
import json
import os
import sys
from typing import List, Optional

from wallet_sweep.config import settings
from wallet_sweep.core.chain import sweep_networks
from wallet_sweep.core.deletion import build_sweep_notice
from wallet_sweep.core.sweep import (
    AgentRecord,
    SweepOrchestrator,
    load_transfer_token_config,
)
from wallet_sweep.logging_config import setup_logging


def _network_keys(raw: Optional[str]) -> List[str]:
    if not raw:
        return list(settings.sweep_networks)
    return [key.strip() for key in raw.split(",") if key.strip()]


def cli_check_config(path: Optional[str], networks: Optional[str]) -> int:
    """Validate the token configuration without touching any chain."""
    validation = load_transfer_token_config(path, _network_keys(networks))
    if not validation.ok:
        print("❌ Token configuration is not usable")
        print(json.dumps(validation.config_error.to_dict(), indent=2))
        return 1

    print("✅ Token configuration is valid")
    print(f"Required symbols: {', '.join(validation.required_symbols)}")
    for network, tokens in validation.tokens_by_network.items():
        print(f"\n{network}:")
        for token in tokens:
            print(f"  {token.symbol:<8} {token.address} (decimals={token.decimals})")
    return 0


async def cli_sweep(destination: str, key_env: str, networks: Optional[str], confirmed: bool) -> int:
    """Sweep the wallet behind ``$key_env`` to ``destination``."""
    private_key = os.getenv(key_env)
    if not private_key:
        print(f"❌ Environment variable {key_env} is not set")
        return 1

    specs = sweep_networks(_network_keys(networks))
    print("=" * 60)
    print("AGENT WALLET SWEEP")
    print("=" * 60)
    print(f"Destination: {destination}")
    print(f"Networks:    {', '.join(f'{s.name} ({s.chain_id})' for s in specs)}")
    print("=" * 60)

    if not confirmed:
        print("Transfers are irreversible. Re-run with --yes to broadcast.")
        return 1

    orchestrator = SweepOrchestrator(networks=specs)
    record = AgentRecord(id="cli", name="wallet", creator_address=destination)
    result = await orchestrator.sweep_agent(record, private_key)

    if not result.ok:
        print(f"❌ Sweep failed ({result.status} {result.code.value}): {result.error}")
        print(json.dumps(dict(result.details), indent=2))
        return 1

    notice = build_sweep_notice({"deletedAgentName": record.name, "deleteSweep": result.to_dict()})
    print(f"\n✓ {notice.subtitle}")
    for line in notice.transfers:
        print(f"  - {line}")
    for transfer in result.transfers:
        print(f"  {transfer.network}: {transfer.tx_hash}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Agent wallet sweep tools")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check-config", help="Validate the transfer token configuration")
    check.add_argument("--path", default=None, help="Token config JSON (default: settings)")
    check.add_argument("--networks", default=None, help="Comma-separated network keys")

    sweep = subparsers.add_parser("sweep", help="Drain a wallet to a destination address")
    sweep.add_argument("--destination", required=True, help="Address that receives every asset")
    sweep.add_argument("--key-env", default="AGENT_PRIVATE_KEY", help="Env var holding the wallet key")
    sweep.add_argument("--networks", default=None, help="Comma-separated network keys")
    sweep.add_argument("--yes", action="store_true", help="Broadcast transactions")

    args = parser.parse_args()
    setup_logging(args.log_level)

    if args.command == "check-config":
        return cli_check_config(args.path, args.networks)
    return asyncio.run(cli_sweep(args.destination, args.key_env, args.networks, args.yes))


if __name__ == "__main__":
    sys.exit(main())
