# powcommit/verify/verifier.py
import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Union

from powcommit.core.errors import (
    CommitEngineError,
    DifficultyNotMet,
    InvalidPayloadSchema,
    SignerMismatch,
)
from powcommit.core.types import DEFAULT_DIFFICULTY, Commit
from powcommit.crypto.hashing import commit_digest
from powcommit.crypto.keys import recover_signer
from powcommit.mining.miner import check_difficulty, satisfies_difficulty
from powcommit.verify.schema import verify_object

logger = logging.getLogger(__name__)

CommitLike = Union[Commit, Mapping[str, Any]]


def _wire_form(commit: Any) -> Any:
    return commit.to_dict() if isinstance(commit, Commit) else commit


def check_commit(commit: CommitLike, difficulty: int = DEFAULT_DIFFICULTY) -> str:
    """
    Run every verification step and raise the first failure:
    InvalidPayloadSchema, DifficultyNotMet, InvalidSignature or SignerMismatch.
    Returns the commit digest on success.
    """
    check_difficulty(difficulty)
    wire = _wire_form(commit)

    # 1. Shape + payload schema
    if not verify_object(wire):
        raise InvalidPayloadSchema("Commit fields or payload do not match the schema")

    # 2. Proof of work, re-derived from the commit contents
    digest_hex = commit_digest(wire["data"], wire["commitAt"], wire["nonce"])
    if not satisfies_difficulty(digest_hex, difficulty):
        raise DifficultyNotMet(f"Digest {digest_hex} does not meet difficulty {difficulty}")

    # 3. Recovered signer must be the declared author
    signer = recover_signer(wire["signature"], digest_hex)
    if signer != wire["publicKey"]:
        raise SignerMismatch("Recovered signer does not match publicKey")

    return digest_hex


def verify_commit(commit: CommitLike, difficulty: int = DEFAULT_DIFFICULTY) -> bool:
    """True iff `commit` passes schema, proof-of-work and signature checks. Never raises."""
    try:
        check_commit(commit, difficulty)
    except CommitEngineError as e:
        logger.debug("Commit rejected (%s): %s", e.category, e)
        return False
    except Exception as e:
        logger.debug("Error verifying commit: %s", e)
        return False
    return True


@dataclass
class VerificationFailure:
    index: int
    message: str
    category: str = "general"  # e.g. "schema", "difficulty", "signature", "signer", "trust"


@dataclass
class VerificationResult:
    is_valid: bool
    message: str = ""
    failures: List[VerificationFailure] = None

    def __post_init__(self):
        if self.failures is None:
            self.failures = []

    @property
    def first_failure(self) -> Optional[VerificationFailure]:
        return self.failures[0] if self.failures else None

    def __bool__(self):
        return self.is_valid

    def __str__(self):
        if self.is_valid:
            return "All commits valid ✓"
        lines = [f"Verification FAILED ({len(self.failures)} issues):"]
        for f in self.failures:
            lines.append(f"  • [{f.index}] {f.category}: {f.message}")
        return "\n".join(lines)


class CommitVerifier:
    """
    Offline verifier for a feed of commits (e.g. a JSONL export).
    Optionally restricts accepted authors to a set of trusted public keys.
    """

    def __init__(self, difficulty: int = DEFAULT_DIFFICULTY, trusted_keys: Optional[Iterable[str]] = None):
        self.difficulty = check_difficulty(difficulty)
        self.trusted_keys = frozenset(trusted_keys) if trusted_keys is not None else None

    def verify(self, commit: CommitLike) -> bool:
        return not self._check(0, commit)

    def verify_all(self, commits: Iterable[CommitLike]) -> VerificationResult:
        result = VerificationResult(True)
        count = 0

        for i, commit in enumerate(commits):
            count += 1
            failures = self._check(i, commit)
            if failures:
                result.failures.extend(failures)
                result.is_valid = False

        if count == 0:
            result.message = "No commits to verify"
        elif result.is_valid:
            result.message = f"{count} valid commits"
        else:
            result.message = f"Failed with {len(result.failures)} issues in {count} commits"
        return result

    def _check(self, index: int, commit: CommitLike) -> List[VerificationFailure]:
        try:
            check_commit(commit, self.difficulty)
        except CommitEngineError as e:
            return [VerificationFailure(index, str(e), e.category)]
        except Exception as e:
            return [VerificationFailure(index, f"Unexpected error: {e}", "general")]

        if self.trusted_keys is not None:
            public_key = _wire_form(commit)["publicKey"]
            if public_key not in self.trusted_keys:
                return [VerificationFailure(index, f"Untrusted author {public_key[:18]}...", "trust")]
        return []
