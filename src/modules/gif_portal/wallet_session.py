"""
Wallet Session
==============
Connection state machine over the external wallet provider.

    DISCONNECTED ──connect()──▶ CONNECTING ──ok──▶ CONNECTED(identity)
         ▲                          │                  │
         └──────── rejected ────────┘◀── disconnect() ─┘

Every transition is published to subscribers. Silent reconnect at startup
is best effort: its failures are swallowed. An explicit connect reports
its failure to the caller. A disconnect() while a connect is pending
invalidates that connect: its late result is dropped, and no second
connect may start until the first has returned.
"""

import asyncio
import inspect
from typing import Callable, List, Optional, Set, Tuple

from solders.pubkey import Pubkey

from src.modules.gif_portal.models import ConnectionState, ConnectionStatus
from src.modules.gif_portal.results import CallResult, CallStatus
from src.modules.gif_portal.wallet import WalletProvider, WalletRejectedError
from src.shared.system.logging import Logger

NO_PROVIDER_ADVISORY = "Solana wallet not found! Install a wallet (e.g. Phantom) to continue."


class WalletSession:
    """Owns ConnectionState; the only component that talks to the wallet's connect API."""

    def __init__(self, provider: Optional[WalletProvider]):
        self._provider = provider
        self._state = ConnectionState.disconnected()
        self._subscribers: List[Callable[[ConnectionState], None]] = []
        self._notify_tasks: Set[asyncio.Task] = set()

        # bumped by disconnect(); a connect that started under an older
        # generation is dropped when it returns
        self._generation = 0
        self._in_flight = False

    @property
    def provider(self) -> Optional[WalletProvider]:
        return self._provider

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def identity(self) -> Optional[Pubkey]:
        return self._state.identity

    def subscribe(self, callback: Callable[[ConnectionState], None]) -> None:
        """Register a callback for every state transition."""
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def _transition(self, new_state: ConnectionState) -> None:
        if new_state == self._state:
            return
        Logger.debug(f"[WALLET] {self._state.status.value} -> {new_state.status.value}")
        self._state = new_state
        for callback in list(self._subscribers):
            if inspect.iscoroutinefunction(callback):
                task = asyncio.create_task(callback(new_state))
                self._notify_tasks.add(task)
                task.add_done_callback(self._notify_tasks.discard)
            else:
                callback(new_state)

    def _provider_available(self) -> bool:
        return self._provider is not None and self._provider.is_available()

    def _refuse(self, op: str) -> Optional[CallResult]:
        """Guards shared by both connect paths."""
        if self._state.status is ConnectionStatus.CONNECTED:
            return CallResult.ok(op)
        if self._in_flight or self._state.status is ConnectionStatus.CONNECTING:
            return CallResult.failed(op, CallStatus.INVALID_STATE, "connect already in progress")
        if not self._provider_available():
            Logger.warning(f"[WALLET] {NO_PROVIDER_ADVISORY}")
            return CallResult.failed(op, CallStatus.PROVIDER_UNAVAILABLE, NO_PROVIDER_ADVISORY)
        return None

    def _superseded(self, op: str, generation: int) -> Optional[CallResult]:
        if generation == self._generation:
            return None
        Logger.debug(f"[WALLET] {op} finished after disconnect, result dropped")
        return CallResult.failed(op, CallStatus.INVALID_STATE, "connect superseded by disconnect")

    async def _connect_once(self, op: str, only_if_trusted: bool) -> Tuple[Optional[Pubkey], Optional[CallResult]]:
        """
        One provider.connect() round trip.

        Returns (identity, None) on success and (None, result) when the
        connect failed or was overtaken by disconnect(). A late success is
        handed back to the provider so it does not stay connected.
        """
        generation = self._generation
        self._in_flight = True
        self._transition(ConnectionState.connecting())
        try:
            identity = await self._provider.connect(only_if_trusted=only_if_trusted)
        except Exception as e:
            stale = self._superseded(op, generation)
            if stale is not None:
                return None, stale
            if only_if_trusted:
                # best effort: stay disconnected, nothing surfaced to the user
                Logger.debug(f"[WALLET] silent reconnect declined: {e}")
            elif isinstance(e, WalletRejectedError):
                Logger.warning(f"[WALLET] Connection declined: {e}")
            else:
                Logger.error(f"[WALLET] Connect failed: {e}")
            self._transition(ConnectionState.disconnected())
            return None, CallResult.failed(op, CallStatus.CONNECTION_DECLINED, str(e))
        finally:
            self._in_flight = False

        stale = self._superseded(op, generation)
        if stale is not None:
            self._provider.disconnect()
            return None, stale
        return identity, None

    async def attempt_silent_connect(self) -> CallResult:
        """Reconnect without prompting, only if the wallet already trusts us."""
        op = "attempt_silent_connect"
        refused = self._refuse(op)
        if refused is not None:
            return refused

        Logger.info(f"[WALLET] {self._provider.name} wallet found, trying silent reconnect")
        identity, failure = await self._connect_once(op, only_if_trusted=True)
        if failure is not None:
            return failure

        Logger.info(f"[WALLET] Connected with public key: {identity}")
        self._transition(ConnectionState.connected(identity))
        return CallResult.ok(op)

    async def connect(self) -> CallResult:
        """User-initiated connect; prompts the wallet."""
        op = "connect"
        refused = self._refuse(op)
        if refused is not None:
            return refused

        identity, failure = await self._connect_once(op, only_if_trusted=False)
        if failure is not None:
            return failure

        Logger.success(f"[WALLET] Connected with public key: {identity}")
        self._transition(ConnectionState.connected(identity))
        return CallResult.ok(op)

    def disconnect(self) -> None:
        """Drop the connection; a connect still in flight is invalidated."""
        self._generation += 1
        if self._provider is not None:
            self._provider.disconnect()
        if self._state.status is not ConnectionStatus.DISCONNECTED:
            Logger.info("[WALLET] Disconnected")
        self._transition(ConnectionState.disconnected())
