"""
Wallet Provider Protocol
========================
Interface to the external wallet (Phantom in a browser, a local keypair
on the command line).

The portal only needs three capabilities from a wallet: tell whether it is
installed, hand over a public key (silently if the site is already trusted,
otherwise after prompting), and sign a transaction message.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol, runtime_checkable

from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature

from src.shared.system.logging import Logger


class WalletRejectedError(Exception):
    """The wallet (or its user) refused a connect or signing request."""


@runtime_checkable
class WalletProvider(Protocol):
    """External wallet capability consumed by WalletSession and RemoteAccountClient."""

    name: str

    def is_available(self) -> bool:
        ...

    async def connect(self, only_if_trusted: bool = False) -> Pubkey:
        """Return the wallet public key or raise WalletRejectedError."""
        ...

    async def sign_message(self, message: bytes) -> Signature:
        ...

    def disconnect(self) -> None:
        ...


class KeypairWalletProvider:
    """
    WalletProvider backed by a local solders Keypair.

    `approve` plays the role of the wallet's connect prompt; it receives the
    public key and returns True to accept. `trusted` mirrors a wallet that
    already approved this app, which is what silent reconnect relies on.
    """

    name = "keypair"

    def __init__(
        self,
        keypair: Optional[Keypair],
        trusted: bool = False,
        approve: Optional[Callable[[Pubkey], bool]] = None,
    ):
        self._keypair = keypair
        self.trusted = trusted
        self._approve = approve
        self._connected = False

    def is_available(self) -> bool:
        return self._keypair is not None

    async def connect(self, only_if_trusted: bool = False) -> Pubkey:
        if self._keypair is None:
            raise WalletRejectedError("no wallet key configured")
        pubkey = self._keypair.pubkey()

        if only_if_trusted:
            if not self.trusted:
                raise WalletRejectedError("app not trusted by wallet")
        elif self._approve is not None and not self._approve(pubkey):
            raise WalletRejectedError("user rejected the request")

        self.trusted = True
        self._connected = True
        Logger.debug(f"[WALLET] keypair provider connected {pubkey}")
        return pubkey

    async def sign_message(self, message: bytes) -> Signature:
        if self._keypair is None or not self._connected:
            raise WalletRejectedError("wallet not connected")
        return self._keypair.sign_message(message)

    def disconnect(self) -> None:
        self._connected = False
