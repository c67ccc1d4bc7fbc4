"""
GIF Portal Test Mocks
=====================
Reusable mock classes for isolated testing.
"""

from tests.mocks.mock_rpc import MockGifProgramRpc
from tests.mocks.mock_wallet import MockWalletProvider

__all__ = [
    "MockGifProgramRpc",
    "MockWalletProvider",
]
