"""Single-table, composite-key storage engine."""

from .keys import decode, encode, sort_key_for
from .record_store import RecordStore
from .secondary_index import SecondaryIndex
from .ttl_reaper import TTLReaper
from .update_expression import UpdateInstruction, build_update

__all__ = [
    "RecordStore",
    "SecondaryIndex",
    "TTLReaper",
    "UpdateInstruction",
    "build_update",
    "decode",
    "encode",
    "sort_key_for",
]
