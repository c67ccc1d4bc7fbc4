"""
Anchor Wire Codec
=================
Instruction data and BaseAccount layout for the GIF portal program.

Instruction data:  sha256("global:<ix_name>")[:8] + borsh(args)
Account data:      sha256("account:BaseAccount")[:8] + borsh(BaseAccount)

BaseAccount layout (little-endian, Borsh):
    total_gifs   u64
    gif_list     u32 length + ItemStruct[length]
ItemStruct:
    gif_link     u32 length + utf-8 bytes
    user_address [u8; 32]
    votes        u64
"""

import hashlib
import struct
from typing import List, Tuple

from solders.pubkey import Pubkey

from src.modules.gif_portal.models import GifRecord, RecordList

IX_INITIALIZE = "start_stuff_off"
IX_APPEND = "add_gif"
IX_VOTE = "update_gif"
ACCOUNT_NAME = "BaseAccount"


class AccountDecodeError(ValueError):
    """Account data does not match the BaseAccount layout."""


def instruction_discriminator(name: str) -> bytes:
    return hashlib.sha256(f"global:{name}".encode()).digest()[:8]


def account_discriminator(name: str = ACCOUNT_NAME) -> bytes:
    return hashlib.sha256(f"account:{name}".encode()).digest()[:8]


def encode_string(value: str) -> bytes:
    raw = value.encode("utf-8")
    return struct.pack("<I", len(raw)) + raw


def encode_instruction(name: str, *string_args: str) -> bytes:
    """Discriminator followed by Borsh-encoded string arguments."""
    return instruction_discriminator(name) + b"".join(encode_string(a) for a in string_args)


def _read_u32(data: bytes, offset: int) -> Tuple[int, int]:
    return struct.unpack_from("<I", data, offset)[0], offset + 4


def _read_u64(data: bytes, offset: int) -> Tuple[int, int]:
    return struct.unpack_from("<Q", data, offset)[0], offset + 8


def _read_string(data: bytes, offset: int) -> Tuple[str, int]:
    length, offset = _read_u32(data, offset)
    end = offset + length
    if end > len(data):
        raise AccountDecodeError(f"string of {length} bytes overruns account data")
    return data[offset:end].decode("utf-8"), end


def decode_base_account(data: bytes) -> RecordList:
    """Decode raw BaseAccount bytes into a RecordList (EMPTY or POPULATED)."""
    data = bytes(data)
    if data[:8] != account_discriminator():
        raise AccountDecodeError("account discriminator mismatch (not a BaseAccount)")

    try:
        total, offset = _read_u64(data, 8)
        count, offset = _read_u32(data, offset)
        records: List[GifRecord] = []
        for _ in range(count):
            link, offset = _read_string(data, offset)
            owner_end = offset + 32
            if owner_end > len(data):
                raise AccountDecodeError("user_address overruns account data")
            owner = Pubkey.from_bytes(data[offset:owner_end])
            votes, offset = _read_u64(data, owner_end)
            records.append(GifRecord(link=link, owner=owner, votes=votes))
    except (struct.error, UnicodeDecodeError) as e:
        raise AccountDecodeError(f"truncated or corrupt BaseAccount: {e}") from e

    return RecordList.from_records(records, total_count=total)
