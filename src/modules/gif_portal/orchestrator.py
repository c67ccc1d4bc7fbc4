"""
Session Orchestrator
====================
Top-level driver wiring WalletSession, RemoteAccountClient and
RecordListSynchronizer together.

Intents (initialize, submit, vote) are fire-and-forget: each returns an
asyncio future at once and runs its steps strictly in order in a task
(remote call, then refresh). Distinct intents are not serialized against
each other; overlapping refreshes settle as last-refresh-wins. Every refresh
is pinned to the synchronizer epoch current when it was scheduled, so a
disconnect drops the refreshes still pending.

Usage:
    orchestrator = SessionOrchestrator(session, client, synchronizer)
    await orchestrator.start()          # silent reconnect
    orchestrator.request_vote("https://media.giphy.com/x.gif")
    await orchestrator.drain()
"""

import asyncio
from typing import Optional, Set

from solders.pubkey import Pubkey

from src.modules.gif_portal.account_client import RemoteAccountClient
from src.modules.gif_portal.models import ConnectionState, ConnectionStatus, RecordListState
from src.modules.gif_portal.results import CallResult, CallStatus
from src.modules.gif_portal.synchronizer import RecordListSynchronizer
from src.modules.gif_portal.wallet_session import WalletSession
from src.shared.system.logging import Logger


class SessionOrchestrator:

    def __init__(
        self,
        session: WalletSession,
        client: RemoteAccountClient,
        synchronizer: RecordListSynchronizer,
    ):
        self.session = session
        self.client = client
        self.synchronizer = synchronizer
        self.pending_input = ""

        self._refreshed_for: Optional[Pubkey] = None
        self._tasks: Set[asyncio.Future] = set()

        session.subscribe(self._on_connection_change)

    # =========================================================================
    # WALLET EVENTS
    # =========================================================================

    def _on_connection_change(self, state: ConnectionState) -> None:
        if state.status is ConnectionStatus.CONNECTED:
            # one refresh per identity, however many times we are notified
            if state.identity == self._refreshed_for:
                return
            self._refreshed_for = state.identity
            Logger.info("[PORTAL] Fetching GIF list...")
            self._spawn(self._refresh_for(state.identity, self.synchronizer.epoch))
        elif state.status is ConnectionStatus.DISCONNECTED:
            self._refreshed_for = None
            self.synchronizer.reset()

    async def _refresh_for(self, identity: Pubkey, epoch: int) -> CallResult:
        result = await self.synchronizer.refresh(epoch)
        if result.status is CallStatus.FETCH_FAILED and self._refreshed_for == identity:
            # let the next notification or request_refresh() try again
            self._refreshed_for = None
        return result

    # =========================================================================
    # INTENTS
    # =========================================================================

    def set_input(self, value: str) -> None:
        self.pending_input = value

    def request_refresh(self) -> asyncio.Future:
        """Re-read the BaseAccount on demand, e.g. after the connect-time fetch failed."""
        identity = self.session.identity
        if identity is None:
            return self._resolved(CallResult.failed("request_refresh", CallStatus.NOT_CONNECTED, "wallet not connected"))
        self._refreshed_for = identity
        return self._spawn(self._refresh_for(identity, self.synchronizer.epoch))

    def request_initialize(self) -> asyncio.Future:
        """One-time BaseAccount creation; only offered while the list is UNINITIALIZED."""
        op = "request_initialize"
        identity = self.session.identity
        if identity is None:
            return self._resolved(CallResult.failed(op, CallStatus.NOT_CONNECTED, "wallet not connected"))
        if self.synchronizer.state is not RecordListState.UNINITIALIZED:
            return self._resolved(CallResult.failed(
                op, CallStatus.INVALID_STATE,
                f"account initialization not available while list is {self.synchronizer.state.value}",
            ))
        return self._spawn(self._then_refresh(self.client.initialize_account(identity), self.synchronizer.epoch))

    def request_submit(self, link: Optional[str] = None) -> asyncio.Future:
        """Submit `link` (or the pending input). Input is cleared before the remote call."""
        op = "request_submit"
        value = self.pending_input if link is None else link
        if not value:
            Logger.info("[PORTAL] No link has been provided!")
            return self._resolved(CallResult.failed(op, CallStatus.MALFORMED_INPUT, "no link provided"))

        identity = self.session.identity
        if identity is None:
            return self._resolved(CallResult.failed(op, CallStatus.NOT_CONNECTED, "wallet not connected"))
        if not self.synchronizer.records.is_initialized:
            return self._resolved(CallResult.failed(
                op, CallStatus.INVALID_STATE,
                f"cannot submit while list is {self.synchronizer.state.value}",
            ))

        self.pending_input = ""
        Logger.info(f"[PORTAL] Gif link: {value}")
        return self._spawn(self._then_refresh(self.client.append_record(value, identity), self.synchronizer.epoch))

    def request_vote(self, link: str) -> asyncio.Future:
        """Optimistically bump the local count, then vote on chain and refresh."""
        op = "request_vote"
        if not link:
            return self._resolved(CallResult.failed(op, CallStatus.MALFORMED_INPUT, "no link provided"))
        identity = self.session.identity
        if identity is None:
            return self._resolved(CallResult.failed(op, CallStatus.NOT_CONNECTED, "wallet not connected"))

        self.synchronizer.optimistic_vote_bump(link)
        return self._spawn(self._then_refresh(self.client.update_record_vote(link, identity), self.synchronizer.epoch))

    async def _then_refresh(self, remote_call, epoch: int) -> CallResult:
        """Await the remote call, then refresh whatever its outcome (unless disconnected since)."""
        result = await remote_call
        if not result.success:
            Logger.warning(f"[PORTAL] {result.operation} failed ({result.status.value}): {result.error_message}")
        await self.synchronizer.refresh(epoch)
        return result

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def start(self) -> CallResult:
        """Process start: reconnect silently if the wallet already trusts us."""
        return await self.session.attempt_silent_connect()

    async def drain(self) -> None:
        """Wait for every in-flight intent and refresh, including ones they spawn."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        await self.drain()
        await self.client.close()

    def _spawn(self, coro) -> asyncio.Future:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @staticmethod
    def _resolved(result: CallResult) -> asyncio.Future:
        future = asyncio.get_running_loop().create_future()
        future.set_result(result)
        return future
