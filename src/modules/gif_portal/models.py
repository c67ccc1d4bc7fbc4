"""GIF records, the shared record list, and wallet connection state."""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterator, Optional, Tuple

from solders.pubkey import Pubkey


@dataclass(frozen=True)
class GifRecord:
    """One entry of the shared BaseAccount's gif_list."""
    link: str
    owner: Pubkey
    votes: int = 0

    def with_vote(self) -> "GifRecord":
        return replace(self, votes=self.votes + 1)


class RecordListState(Enum):
    UNLOADED = "UNLOADED"            # no fetch has completed yet
    UNINITIALIZED = "UNINITIALIZED"  # last fetch: account not found
    EMPTY = "EMPTY"                  # account exists, no records
    POPULATED = "POPULATED"


@dataclass(frozen=True)
class RecordList:
    """
    Snapshot of the shared account as last seen by this client.

    UNINITIALIZED and EMPTY are distinct states: the first offers the
    one-time account initialization, the second offers GIF submission.
    Check `state`, never the truthiness of `records`.
    """
    state: RecordListState
    records: Tuple[GifRecord, ...] = ()
    total_count: int = 0

    @classmethod
    def unloaded(cls) -> "RecordList":
        return cls(RecordListState.UNLOADED)

    @classmethod
    def uninitialized(cls) -> "RecordList":
        return cls(RecordListState.UNINITIALIZED)

    @classmethod
    def from_records(cls, records, total_count: Optional[int] = None) -> "RecordList":
        records = tuple(records)
        state = RecordListState.POPULATED if records else RecordListState.EMPTY
        if total_count is None:
            total_count = len(records)
        return cls(state, records, total_count)

    @property
    def is_initialized(self) -> bool:
        return self.state in (RecordListState.EMPTY, RecordListState.POPULATED)

    @property
    def links(self) -> list:
        return [r.link for r in self.records]

    def keyed(self) -> Iterator[Tuple[str, GifRecord]]:
        """Stable rendering keys: (link, position) as '<link>-<index>'."""
        for index, record in enumerate(self.records):
            yield f"{record.link}-{index}", record

    def bump_first(self, link: str) -> Optional["RecordList"]:
        """Copy with the first record matching `link` voted once, or None if no match."""
        for index, record in enumerate(self.records):
            if record.link == link:
                bumped = self.records[:index] + (record.with_vote(),) + self.records[index + 1:]
                return replace(self, records=bumped)
        return None


class ConnectionStatus(Enum):
    DISCONNECTED = "DISCONNECTED"
    CONNECTING = "CONNECTING"
    CONNECTED = "CONNECTED"


@dataclass(frozen=True)
class ConnectionState:
    status: ConnectionStatus
    identity: Optional[Pubkey] = None

    @classmethod
    def disconnected(cls) -> "ConnectionState":
        return cls(ConnectionStatus.DISCONNECTED)

    @classmethod
    def connecting(cls) -> "ConnectionState":
        return cls(ConnectionStatus.CONNECTING)

    @classmethod
    def connected(cls, identity: Pubkey) -> "ConnectionState":
        return cls(ConnectionStatus.CONNECTED, identity)

    @property
    def is_connected(self) -> bool:
        return self.status is ConnectionStatus.CONNECTED
