"""
GIF Portal Configuration
========================
Explicit configuration object handed to every component.

Addresses and credentials are resolved once, here, and passed down;
components never reach for module-level globals.

SECURITY: the shared BaseAccount secret key is loaded from a plain JSON
file and held in memory for the process lifetime. That is acceptable for a
devnet demo only.
"""

import json
import os
from dataclasses import dataclass
from typing import Optional

import base58
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from config.settings import Settings


class PortalConfigError(ValueError):
    """Configuration is missing or unreadable."""


def keypair_from_json(payload) -> Keypair:
    """
    Build a Keypair from a decoded keypair JSON document.

    Accepts the solana-keygen byte array ([12, 34, ...]) and the web3.js
    dump ({"_keypair": {"secretKey": {"0": 12, "1": 34, ...}}}).
    """
    try:
        if isinstance(payload, dict):
            secret = payload.get("_keypair", payload).get("secretKey")
            if isinstance(secret, dict):
                secret = [secret[k] for k in sorted(secret, key=int)]
            payload = secret
        secret_bytes = bytes(payload) if isinstance(payload, list) else b""
    except (ValueError, TypeError, AttributeError) as e:
        raise PortalConfigError(f"malformed keypair JSON: {e}") from e

    if len(secret_bytes) != 64:
        raise PortalConfigError("keypair JSON must hold a 64-byte secret key")
    try:
        return Keypair.from_bytes(secret_bytes)
    except ValueError as e:
        raise PortalConfigError(f"invalid keypair: {e}") from e


def load_keypair_file(path: str) -> Keypair:
    try:
        with open(path, "r") as f:
            return keypair_from_json(json.load(f))
    except (OSError, json.JSONDecodeError) as e:
        raise PortalConfigError(f"cannot read keypair file {path}: {e}") from e


def parse_wallet_key(value: str) -> Keypair:
    """Wallet secret as base58 string or JSON byte array."""
    value = value.strip()
    try:
        if value.startswith("["):
            return Keypair.from_bytes(bytes(json.loads(value)))
        return Keypair.from_bytes(base58.b58decode(value))
    except (ValueError, TypeError) as e:
        raise PortalConfigError(f"invalid wallet key: {e}") from e


def _pubkey(value: str, source: str) -> Pubkey:
    try:
        return Pubkey.from_string(value)
    except ValueError as e:
        raise PortalConfigError(f"invalid program id in {source}: {value!r} ({e})") from e


def load_program_id(program_id: str, idl_path: str) -> Pubkey:
    """Program id from explicit setting, else the IDL's metadata.address."""
    if program_id:
        return _pubkey(program_id, "GIF_PROGRAM_ID")
    if idl_path and os.path.exists(idl_path):
        try:
            with open(idl_path, "r") as f:
                address = json.load(f).get("metadata", {}).get("address")
        except (OSError, json.JSONDecodeError, AttributeError) as e:
            raise PortalConfigError(f"cannot read IDL {idl_path}: {e}") from e
        if address:
            return _pubkey(address, idl_path)
    raise PortalConfigError("GIF_PROGRAM_ID not set and no IDL metadata.address found")


@dataclass(frozen=True)
class PortalConfig:
    """Resolved addresses, credentials and cluster options."""
    program_id: Pubkey
    base_account: Keypair
    rpc_url: str = "https://api.devnet.solana.com"
    preflight_commitment: str = "processed"
    wallet_keypair: Optional[Keypair] = None
    wallet_trusted: bool = False

    @property
    def base_account_address(self) -> Pubkey:
        return self.base_account.pubkey()

    @classmethod
    def from_settings(cls, settings=Settings) -> "PortalConfig":
        wallet = None
        if settings.SOLANA_PRIVATE_KEY:
            wallet = parse_wallet_key(settings.SOLANA_PRIVATE_KEY)
        return cls(
            program_id=load_program_id(settings.GIF_PROGRAM_ID, settings.GIF_IDL_PATH),
            base_account=load_keypair_file(settings.GIF_BASE_ACCOUNT_KEYPAIR),
            rpc_url=settings.RPC_URL,
            preflight_commitment=settings.PREFLIGHT_COMMITMENT,
            wallet_keypair=wallet,
            wallet_trusted=settings.WALLET_TRUSTED,
        )
