# powcommit/crypto/hashing.py
"""
SHA-256 digests for commits. The algorithm is pinned per protocol version:
swapping it changes every commit id, so it is not configurable.
"""
import hashlib
from typing import Any, Mapping, Union

from powcommit.core.canon import canonical_json, commit_preimage
from powcommit.core.types import Commit, Payload, payload_to_dict

HASH_ALGORITHM = "sha256"
DIGEST_HEX_LENGTH = 64


def digest(data: bytes) -> str:
    """Hex SHA-256 of raw bytes (lowercase, no 0x prefix)."""
    return hashlib.sha256(data).hexdigest()


def serialize_payload(data: Union[Payload, Mapping[str, Any]]) -> bytes:
    return canonical_json(payload_to_dict(data))


def commit_digest(data: Union[Payload, Mapping[str, Any]], commit_at: str, nonce: int) -> str:
    """Digest a commit signs: hash(canonical(data) + commitAt + nonce)."""
    return digest(commit_preimage(serialize_payload(data), commit_at, nonce))


def commit_hash(commit: Commit) -> str:
    """Digest of an assembled commit, usable as its id (e.g. a post's `parent`)."""
    return commit_digest(commit.data, commit.commit_at, commit.nonce)
