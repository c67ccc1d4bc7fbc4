"""
GIF Portal Module
=================
Client for a Solana program that keeps a shared list of GIF links with
owner addresses and vote counts in a single BaseAccount.

Components:
- wallet_session.py: wallet connection state machine
- account_client.py: the program's three instructions and account read
- synchronizer.py: in-memory record list, optimistic votes, refresh
- orchestrator.py: wallet events and user intents
- config.py: explicit configuration (addresses, credentials)
- cli.py: command-line interface
"""

from src.modules.gif_portal.config import PortalConfig
from src.modules.gif_portal.models import (
    ConnectionState,
    ConnectionStatus,
    GifRecord,
    RecordList,
    RecordListState,
)
from src.modules.gif_portal.results import CallResult, CallStatus

__all__ = [
    'PortalConfig',
    'ConnectionState',
    'ConnectionStatus',
    'GifRecord',
    'RecordList',
    'RecordListState',
    'CallResult',
    'CallStatus',
]
