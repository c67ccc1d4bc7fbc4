"""
GIF Portal CLI
==============
Command-line presentation layer: renders the record list and forwards the
operator's intents to the SessionOrchestrator.

    python -m src.modules.gif_portal.cli list
    python -m src.modules.gif_portal.cli init
    python -m src.modules.gif_portal.cli submit https://media.giphy.com/media/x/giphy.gif
    python -m src.modules.gif_portal.cli vote https://media.giphy.com/media/x/giphy.gif
"""

import argparse
import asyncio
import sys
from dataclasses import replace

from rich.console import Console
from rich.prompt import Confirm
from rich.table import Table

from config.settings import Settings
from src.modules.gif_portal.account_client import RemoteAccountClient
from src.modules.gif_portal.config import PortalConfig, PortalConfigError
from src.modules.gif_portal.models import RecordList, RecordListState
from src.modules.gif_portal.orchestrator import SessionOrchestrator
from src.modules.gif_portal.results import CallResult, CallStatus
from src.modules.gif_portal.synchronizer import RecordListSynchronizer
from src.modules.gif_portal.wallet import KeypairWalletProvider
from src.modules.gif_portal.wallet_session import WalletSession
from src.shared.system.logging import Logger

console = Console()


def build_orchestrator(config: PortalConfig, assume_yes: bool = False) -> SessionOrchestrator:
    """Wire the components from one explicit config object."""
    def approve(pubkey) -> bool:
        return assume_yes or Confirm.ask(f"Connect wallet [bold]{pubkey}[/] to the GIF portal?")

    provider = None
    if config.wallet_keypair is not None:
        provider = KeypairWalletProvider(config.wallet_keypair, trusted=config.wallet_trusted, approve=approve)

    session = WalletSession(provider)
    client = RemoteAccountClient(config, provider)
    return SessionOrchestrator(session, client, RecordListSynchronizer(client))


def render(records: RecordList) -> None:
    if records.state is RecordListState.UNINITIALIZED:
        console.print("[yellow]GIF account not initialized.[/] Run [bold]init[/] for the one-time setup.")
        return
    if records.state is RecordListState.UNLOADED:
        console.print("[dim]GIF list not loaded.[/]")
        return

    table = Table(title="🖼 GIF Portal", min_width=60)
    table.add_column("#", justify="right")
    table.add_column("GIF")
    table.add_column("Owner")
    table.add_column("❤️", justify="right")
    for index, (_, record) in enumerate(records.keyed()):
        table.add_row(str(index), record.link, str(record.owner), str(record.votes))
    console.print(table)
    console.print(f"[dim]{records.total_count} submitted[/]")


def report(result: CallResult) -> int:
    if result.success:
        if result.signature:
            console.print(f"[green]✔ {result.operation}[/] {result.signature}")
        return 0
    style = "yellow" if result.status in (CallStatus.PROVIDER_UNAVAILABLE, CallStatus.MALFORMED_INPUT) else "red"
    console.print(f"[{style}]✘ {result.operation}: {result.error_message}[/]")
    return 1


async def run(args, config: PortalConfig) -> int:
    orchestrator = build_orchestrator(config, assume_yes=args.yes)
    try:
        await orchestrator.start()
        if not orchestrator.session.state.is_connected:
            connected = await orchestrator.session.connect()
            if not connected.success:
                return report(connected)
        await orchestrator.drain()
        if orchestrator.synchronizer.state is RecordListState.UNLOADED:
            # connect-time fetch failed; one more try before giving up
            await orchestrator.request_refresh()

        exit_code = 0
        if args.command == "init":
            exit_code = report(await orchestrator.request_initialize())
        elif args.command == "submit":
            orchestrator.set_input(args.link)
            exit_code = report(await orchestrator.request_submit())
        elif args.command == "vote":
            exit_code = report(await orchestrator.request_vote(args.link))

        await orchestrator.drain()
        render(orchestrator.synchronizer.records)
        return exit_code
    finally:
        await orchestrator.close()


def main(argv=None) -> int:
    """Main CLI entrypoint for the GIF portal."""
    parser = argparse.ArgumentParser(prog="gif-portal", description="Solana GIF portal client")
    parser.add_argument("-y", "--yes", action="store_true", help="Approve the wallet connect prompt")
    parser.add_argument("--rpc-url", default=None, help=f"RPC endpoint (default: {Settings.RPC_URL})")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    subparsers.add_parser("list", help="Show the GIF list")
    subparsers.add_parser("init", help="One-time initialization of the GIF account")
    submit_parser = subparsers.add_parser("submit", help="Submit a GIF link")
    submit_parser.add_argument("link")
    vote_parser = subparsers.add_parser("vote", help="Vote for a GIF link")
    vote_parser.add_argument("link")

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    try:
        config = PortalConfig.from_settings()
    except PortalConfigError as e:
        Logger.error(f"[PORTAL] {e}")
        return 2
    if args.rpc_url:
        config = replace(config, rpc_url=args.rpc_url)

    return asyncio.run(run(args, config))


if __name__ == "__main__":
    sys.exit(main())
