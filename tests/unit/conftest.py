"""
Unit Test Configuration
=======================
Fixtures for pure logic tests - NO I/O ALLOWED.

All unit tests run against the in-memory program fake in tests/mocks;
nothing here may reach a real RPC node.
"""

import pytest


# ============================================================================
# AUTOUSE: ENFORCE I/O ISOLATION
# ============================================================================


@pytest.fixture(autouse=True)
def isolate_unit_tests(monkeypatch):
    """
    Automatically disable all network I/O for unit tests.
    Any test that accidentally tries to make a network call will fail.
    """
    def block_network(*args, **kwargs):
        raise RuntimeError(
            "Network I/O detected in unit test! "
            "Unit tests must use MockGifProgramRpc instead of a live RPC node."
        )

    monkeypatch.setattr("httpx.AsyncClient.post", block_network)
    monkeypatch.setattr("httpx.Client.post", block_network)


# ============================================================================
# GIF PORTAL FIXTURES
# ============================================================================


@pytest.fixture
def wallet():
    from tests.mocks.mock_wallet import MockWalletProvider
    return MockWalletProvider()


@pytest.fixture
def backend(program_id, base_keypair):
    from tests.mocks.mock_rpc import MockGifProgramRpc
    return MockGifProgramRpc(program_id, base_keypair.pubkey())


@pytest.fixture
def client(portal_config, wallet, backend):
    from src.modules.gif_portal.account_client import RemoteAccountClient
    return RemoteAccountClient(portal_config, wallet, rpc=backend)


@pytest.fixture
def synchronizer(client):
    from src.modules.gif_portal.synchronizer import RecordListSynchronizer
    return RecordListSynchronizer(client)


@pytest.fixture
def session(wallet):
    from src.modules.gif_portal.wallet_session import WalletSession
    return WalletSession(wallet)


@pytest.fixture
def orchestrator(session, client, synchronizer):
    from src.modules.gif_portal.orchestrator import SessionOrchestrator
    return SessionOrchestrator(session, client, synchronizer)
