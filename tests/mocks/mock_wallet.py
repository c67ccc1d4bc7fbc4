"""
Mock Wallet Provider
====================
Scriptable wallet for testing WalletSession and signing without a browser.
"""

import asyncio
from typing import Optional

from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature

from src.modules.gif_portal.wallet import WalletRejectedError


class MockWalletProvider:
    """
    Fake WalletProvider.

    Usage:
        wallet = MockWalletProvider(trusted=True)
        wallet.decline = True          # user clicks "Cancel"
        wallet.gate = asyncio.Event()  # hold connect() until gate.set()
    """

    name = "mock"

    def __init__(
        self,
        keypair: Optional[Keypair] = None,
        available: bool = True,
        trusted: bool = False,
        decline: bool = False,
    ):
        self.keypair = keypair or Keypair()
        self.available = available
        self.trusted = trusted
        self.decline = decline
        self.reject_signing = False
        self.gate: Optional[asyncio.Event] = None

        self.prompt_count = 0
        self.connect_calls = 0
        self.sign_count = 0
        self.disconnect_count = 0

    @property
    def pubkey(self) -> Pubkey:
        return self.keypair.pubkey()

    def is_available(self) -> bool:
        return self.available

    async def connect(self, only_if_trusted: bool = False) -> Pubkey:
        self.connect_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if only_if_trusted:
            if not self.trusted:
                raise WalletRejectedError("app not trusted")
            return self.pubkey

        self.prompt_count += 1
        if self.decline:
            raise WalletRejectedError("User rejected the request.")
        self.trusted = True
        return self.pubkey

    async def sign_message(self, message: bytes) -> Signature:
        self.sign_count += 1
        if self.reject_signing:
            raise WalletRejectedError("User rejected the signature request.")
        return self.keypair.sign_message(message)

    def disconnect(self) -> None:
        self.disconnect_count += 1
