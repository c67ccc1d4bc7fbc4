"""
GIF Portal Test Configuration
=============================
Shared fixtures and pytest markers for the test suite.
"""

import pytest
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


# ============================================================================
# PYTEST MARKERS
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "network: marks tests that require network access"
    )
    config.addinivalue_line(
        "markers", "integration: marks integration tests"
    )


# ============================================================================
# SHARED FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def quiet_logger():
    """Keep console output clean; file logging still runs."""
    from src.shared.system.logging import Logger
    Logger.set_silent(True)
    yield
    Logger.set_silent(False)


@pytest.fixture
def program_id():
    from solders.keypair import Keypair
    return Keypair().pubkey()


@pytest.fixture
def base_keypair():
    from solders.keypair import Keypair
    return Keypair()


@pytest.fixture
def portal_config(program_id, base_keypair):
    from src.modules.gif_portal.config import PortalConfig
    return PortalConfig(
        program_id=program_id,
        base_account=base_keypair,
        rpc_url="http://127.0.0.1:8899",
    )
