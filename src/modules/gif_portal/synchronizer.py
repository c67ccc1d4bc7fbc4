"""
Record List Synchronizer
========================
Single owner of the in-memory RecordList.

Consistency model: the remote BaseAccount is the only source of truth and
every successful fetch replaces local state wholesale. The optimistic vote
bump is a latency mask: it is never reconciled or rolled back, the next
refresh simply overwrites it. Concurrent refreshes are not serialized, so
the last one to complete wins.

reset() starts a new epoch. A refresh started under an older epoch never
touches the list, so a disconnect cannot be undone by a late fetch.

A failed fetch keeps the current list, whatever its state. That includes
UNINITIALIZED: the list then reflects the last fetch that did answer.
"""

from typing import Callable, List, Optional

from src.modules.gif_portal.account_client import RemoteAccountClient
from src.modules.gif_portal.models import RecordList, RecordListState
from src.modules.gif_portal.results import CallResult, CallStatus
from src.shared.system.logging import Logger


class RecordListSynchronizer:

    def __init__(self, client: RemoteAccountClient):
        self._client = client
        self._records = RecordList.unloaded()
        self._listeners: List[Callable[[RecordList], None]] = []
        self._epoch = 0

    @property
    def records(self) -> RecordList:
        return self._records

    @property
    def state(self) -> RecordListState:
        return self._records.state

    @property
    def epoch(self) -> int:
        return self._epoch

    def subscribe(self, listener: Callable[[RecordList], None]) -> None:
        """Called with the new RecordList after every local change (re-render hook)."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def _replace(self, records: RecordList) -> None:
        self._records = records
        for listener in list(self._listeners):
            listener(records)

    async def refresh(self, epoch: Optional[int] = None) -> CallResult:
        """
        Fetch the BaseAccount and replace the local list with it.

        `epoch` is the epoch the caller asked under (defaults to the current
        one); if reset() ran since, the result is discarded.
        """
        op = "refresh"
        if epoch is None:
            epoch = self._epoch
        if epoch != self._epoch:
            return self._stale(op)

        result = await self._client.fetch_records()
        if epoch != self._epoch:
            return self._stale(op)
        if not result.success:
            # Keep what we have; only "not found" means UNINITIALIZED
            Logger.warning(f"[SYNC] Refresh failed, keeping {self.state.value} list: {result.error_message}")
            return result

        self._replace(result.records)
        Logger.debug(f"[SYNC] List now {self.state.value} ({len(self._records.records)} GIFs)")
        return result

    @staticmethod
    def _stale(op: str) -> CallResult:
        Logger.debug("[SYNC] List was reset during refresh, result dropped")
        return CallResult.failed(op, CallStatus.INVALID_STATE, "list reset while refreshing")

    def optimistic_vote_bump(self, link: str) -> bool:
        """Bump the first local record matching `link`. No match is a silent no-op."""
        bumped = self._records.bump_first(link)
        if bumped is None:
            Logger.debug(f"[SYNC] Vote bump skipped, {link!r} not in local list")
            return False
        self._replace(bumped)
        return True

    def reset(self) -> None:
        """Back to UNLOADED; refreshes already in flight are invalidated."""
        self._epoch += 1
        if self.state is not RecordListState.UNLOADED:
            self._replace(RecordList.unloaded())
