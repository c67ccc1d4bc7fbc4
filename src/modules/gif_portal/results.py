"""
Call Results
============
Classified outcome of every wallet and remote-account operation.

Nothing below the orchestrator raises across its public surface: a failed
RPC, a declined wallet prompt or an empty link all come back as a
CallResult with a CallStatus the presentation layer can branch on.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
import time

from src.modules.gif_portal.models import RecordList


class CallStatus(Enum):
    """Error taxonomy for portal operations."""
    SUCCESS = "SUCCESS"
    PROVIDER_UNAVAILABLE = "PROVIDER_UNAVAILABLE"  # advisory: no wallet installed
    CONNECTION_DECLINED = "CONNECTION_DECLINED"    # user/wallet refused connect
    NOT_CONNECTED = "NOT_CONNECTED"
    INVALID_STATE = "INVALID_STATE"                # intent not valid right now
    MALFORMED_INPUT = "MALFORMED_INPUT"            # rejected before any remote call
    REMOTE_CALL_REJECTED = "REMOTE_CALL_REJECTED"  # mutating RPC failed
    FETCH_FAILED = "FETCH_FAILED"                  # read failed (not "not found")


@dataclass
class CallResult:
    """Result of a portal operation."""

    success: bool
    status: CallStatus
    operation: str = ""

    # Mutating calls
    signature: Optional[str] = None

    # fetch_records / refresh
    records: Optional[RecordList] = None

    error_message: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    @classmethod
    def ok(cls, operation: str, signature: Optional[str] = None,
           records: Optional[RecordList] = None) -> "CallResult":
        return cls(
            success=True,
            status=CallStatus.SUCCESS,
            operation=operation,
            signature=signature,
            records=records,
        )

    @classmethod
    def failed(cls, operation: str, status: CallStatus, error: str) -> "CallResult":
        return cls(
            success=False,
            status=status,
            operation=operation,
            error_message=error,
        )

    def __repr__(self):
        mark = "OK" if self.success else self.status.value
        detail = self.signature or self.error_message or ""
        return f"<CallResult {self.operation} {mark} {detail[:32]}>"
