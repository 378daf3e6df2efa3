from .schema import check_data_structure, verify_object
from .verifier import (
    CommitVerifier,
    VerificationFailure,
    VerificationResult,
    check_commit,
    verify_commit,
)

__all__ = [
    "CommitVerifier",
    "VerificationFailure",
    "VerificationResult",
    "check_commit",
    "check_data_structure",
    "verify_commit",
    "verify_object",
]
