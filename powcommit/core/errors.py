# powcommit/core/errors.py
"""
Error taxonomy for commit creation and verification.

`verify_commit` reduces all of these to False; `check_commit` raises them so
callers can see why a commit was rejected.
"""


class CommitEngineError(Exception):
    """Base class for every commit engine failure."""
    category = "general"


class InvalidPayloadSchema(CommitEngineError):
    category = "schema"


class DifficultyNotMet(CommitEngineError):
    category = "difficulty"


class InvalidSignature(CommitEngineError):
    category = "signature"


class SignerMismatch(CommitEngineError):
    category = "signer"


class CommitCreationFailed(CommitEngineError):
    category = "creation"


class MiningAborted(CommitCreationFailed):
    """Nonce search stopped by cancellation, attempt ceiling or timeout."""

    def __init__(self, reason: str, attempts: int):
        super().__init__(f"Mining aborted after {attempts} attempts: {reason}")
        self.reason = reason
        self.attempts = attempts


class MessageCodecError(CommitEngineError):
    category = "message"
