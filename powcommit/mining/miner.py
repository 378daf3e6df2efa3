# powcommit/mining/miner.py
"""
Proof-of-work nonce search.

A digest meets difficulty `d` when its hex form starts with `d` '0'
characters. The search starts at nonce 1 and walks upward, so the nonce it
returns is always the smallest one that qualifies.
"""
import logging
import threading
import time
from dataclasses import dataclass
from typing import Optional

from powcommit.core.canon import commit_preimage
from powcommit.core.errors import MiningAborted
from powcommit.crypto.hashing import DIGEST_HEX_LENGTH, digest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MiningResult:
    nonce: int
    digest: str
    attempts: int


def check_difficulty(difficulty: int) -> int:
    if isinstance(difficulty, bool) or not isinstance(difficulty, int):
        raise ValueError(f"Difficulty must be an integer, got {difficulty!r}")
    if not 0 <= difficulty <= DIGEST_HEX_LENGTH:
        raise ValueError(f"Difficulty must be between 0 and {DIGEST_HEX_LENGTH}, got {difficulty}")
    return difficulty


def satisfies_difficulty(digest_hex: str, difficulty: int) -> bool:
    """True iff the first `difficulty` hex nibbles are zero."""
    return digest_hex.startswith("0" * difficulty)


def mine(
    serialized: bytes,
    timestamp: str,
    difficulty: int,
    *,
    max_attempts: Optional[int] = None,
    timeout: Optional[float] = None,
    cancel: Optional[threading.Event] = None,
) -> MiningResult:
    """
    Find the smallest nonce >= 1 whose commit digest meets `difficulty`.

    Unbounded unless guarded: `max_attempts` caps the number of hashes,
    `timeout` caps wall-clock seconds and `cancel` is polled between
    attempts. Any guard tripping raises MiningAborted.
    """
    check_difficulty(difficulty)
    if max_attempts is not None and max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    deadline = time.monotonic() + timeout if timeout is not None else None
    prefix = "0" * difficulty
    nonce = 0

    logger.debug("Mining at difficulty %d (max_attempts=%s, timeout=%s)", difficulty, max_attempts, timeout)

    while True:
        if cancel is not None and cancel.is_set():
            raise MiningAborted("cancelled", nonce)
        if max_attempts is not None and nonce >= max_attempts:
            raise MiningAborted("attempt ceiling reached", nonce)
        if deadline is not None and time.monotonic() >= deadline:
            raise MiningAborted("timed out", nonce)

        nonce += 1
        candidate = digest(commit_preimage(serialized, timestamp, nonce))
        if candidate.startswith(prefix):
            logger.debug("Found nonce %d at difficulty %d: %s", nonce, difficulty, candidate)
            return MiningResult(nonce=nonce, digest=candidate, attempts=nonce)
