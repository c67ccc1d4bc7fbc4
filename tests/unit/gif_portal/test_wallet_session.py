"""
WalletSession Unit Tests
========================
Connection state machine, notifications, and failure classification.
"""

import asyncio

import pytest

from src.modules.gif_portal.models import ConnectionStatus
from src.modules.gif_portal.results import CallStatus
from src.modules.gif_portal.wallet_session import WalletSession
from tests.mocks.mock_wallet import MockWalletProvider


def _record_transitions(session):
    seen = []
    session.subscribe(lambda state: seen.append(state.status))
    return seen


class TestSilentConnect:

    @pytest.mark.asyncio
    async def test_untrusted_stays_disconnected_without_prompt(self, session, wallet):
        """No prior trust grant: DISCONNECTED and no user prompt."""
        result = await session.attempt_silent_connect()

        assert session.state.status == ConnectionStatus.DISCONNECTED
        assert wallet.prompt_count == 0
        assert result.status == CallStatus.CONNECTION_DECLINED

    @pytest.mark.asyncio
    async def test_trusted_connects_silently(self, session, wallet):
        wallet.trusted = True

        result = await session.attempt_silent_connect()

        assert result.success
        assert session.state.status == ConnectionStatus.CONNECTED
        assert session.identity == wallet.pubkey
        assert wallet.prompt_count == 0

    @pytest.mark.asyncio
    async def test_missing_provider_is_advisory(self):
        session = WalletSession(None)

        result = await session.attempt_silent_connect()

        assert result.status == CallStatus.PROVIDER_UNAVAILABLE
        assert "wallet" in result.error_message.lower()
        assert session.state.status == ConnectionStatus.DISCONNECTED

    @pytest.mark.asyncio
    async def test_unavailable_provider_is_advisory(self):
        session = WalletSession(MockWalletProvider(available=False))
        result = await session.attempt_silent_connect()
        assert result.status == CallStatus.PROVIDER_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_declined_silent_connect_emits_round_trip(self, session):
        seen = _record_transitions(session)

        await session.attempt_silent_connect()

        assert seen == [ConnectionStatus.CONNECTING, ConnectionStatus.DISCONNECTED]


class TestExplicitConnect:

    @pytest.mark.asyncio
    async def test_connect_prompts_and_connects(self, session, wallet):
        seen = _record_transitions(session)

        result = await session.connect()

        assert result.success
        assert wallet.prompt_count == 1
        assert seen == [ConnectionStatus.CONNECTING, ConnectionStatus.CONNECTED]

    @pytest.mark.asyncio
    async def test_declined_connect_is_reported(self, session, wallet):
        wallet.decline = True

        result = await session.connect()

        assert not result.success
        assert result.status == CallStatus.CONNECTION_DECLINED
        assert session.state.status == ConnectionStatus.DISCONNECTED

    @pytest.mark.asyncio
    async def test_connect_when_connected_is_noop(self, session, wallet):
        await session.connect()
        seen = _record_transitions(session)

        result = await session.connect()

        assert result.success
        assert wallet.prompt_count == 1
        assert seen == []

    @pytest.mark.asyncio
    async def test_connect_while_connecting_is_rejected(self, session, wallet):
        wallet.gate = asyncio.Event()
        first = asyncio.ensure_future(session.connect())
        await asyncio.sleep(0)
        assert session.state.status == ConnectionStatus.CONNECTING

        second = await session.connect()
        wallet.gate.set()
        await first

        assert second.status == CallStatus.INVALID_STATE
        assert wallet.connect_calls == 1
        assert session.state.status == ConnectionStatus.CONNECTED

    @pytest.mark.asyncio
    async def test_connect_without_provider(self):
        result = await WalletSession(None).connect()
        assert result.status == CallStatus.PROVIDER_UNAVAILABLE


class TestDisconnect:

    @pytest.mark.asyncio
    async def test_disconnect_collapses_state(self, session, wallet):
        await session.connect()
        seen = _record_transitions(session)

        session.disconnect()

        assert session.state.status == ConnectionStatus.DISCONNECTED
        assert session.identity is None
        assert seen == [ConnectionStatus.DISCONNECTED]
        assert wallet.disconnect_count == 1

    def test_disconnect_when_disconnected_emits_nothing(self, session):
        seen = _record_transitions(session)
        session.disconnect()
        assert seen == []

    @pytest.mark.asyncio
    async def test_async_subscriber_is_scheduled(self, session):
        received = []

        async def on_change(state):
            received.append(state.status)

        session.subscribe(on_change)
        await session.connect()
        await asyncio.sleep(0)

        assert ConnectionStatus.CONNECTED in received


class TestDisconnectDuringConnect:

    @pytest.mark.asyncio
    async def test_pending_connect_is_dropped_after_disconnect(self, session, wallet):
        seen = _record_transitions(session)
        wallet.gate = asyncio.Event()
        first = asyncio.ensure_future(session.connect())
        await asyncio.sleep(0)

        session.disconnect()
        second = await session.connect()
        wallet.gate.set()
        late = await first

        assert second.status == CallStatus.INVALID_STATE
        assert late.status == CallStatus.INVALID_STATE
        assert wallet.connect_calls == 1
        assert session.state.status == ConnectionStatus.DISCONNECTED
        assert seen == [ConnectionStatus.CONNECTING, ConnectionStatus.DISCONNECTED]

    @pytest.mark.asyncio
    async def test_late_success_is_handed_back_to_wallet(self, session, wallet):
        wallet.gate = asyncio.Event()
        first = asyncio.ensure_future(session.connect())
        await asyncio.sleep(0)

        session.disconnect()
        wallet.gate.set()
        await first

        # once by disconnect(), once for the dropped late approval
        assert wallet.disconnect_count == 2

    @pytest.mark.asyncio
    async def test_connect_works_again_once_stale_attempt_returns(self, session, wallet):
        wallet.gate = asyncio.Event()
        first = asyncio.ensure_future(session.connect())
        await asyncio.sleep(0)
        session.disconnect()
        wallet.gate.set()
        await first

        result = await session.connect()

        assert result.success
        assert session.identity == wallet.pubkey
        assert wallet.connect_calls == 2


@pytest.mark.asyncio
async def test_async_subscriber_tasks_are_held_until_done(session):
    release = asyncio.Event()
    finished = []

    async def slow_subscriber(state):
        await release.wait()
        finished.append(state.status)

    session.subscribe(slow_subscriber)
    await session.connect()

    assert len(session._notify_tasks) == 2
    release.set()
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    assert finished == [ConnectionStatus.CONNECTING, ConnectionStatus.CONNECTED]
    assert not session._notify_tasks
