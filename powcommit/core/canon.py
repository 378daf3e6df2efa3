# powcommit/core/canon.py
import json
from typing import Any

try:
    import jcs
except ImportError:
    raise ImportError("Please install jcs: pip install jcs")


def canonical_json(obj: Any) -> bytes:
    """
    Produce deterministic UTF-8 bytes according to RFC 8785 (JSON Canonicalization Scheme).
    Returns bytes ready for hashing or signing.
    """
    return jcs.canonicalize(obj)


def commit_preimage(serialized_data: bytes, commit_at: str, nonce: int) -> bytes:
    """Bytes hashed for a commit: canonical payload || timestamp || nonce."""
    return serialized_data + commit_at.encode("utf-8") + str(nonce).encode("ascii")


def compact_json(obj: Any) -> str:
    """Single-line JSON used for export (JSONL) and CLI output."""
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)
