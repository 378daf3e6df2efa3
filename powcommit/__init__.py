# powcommit/__init__.py
"""
powcommit — signed, proof-of-work gated commits for posts, profile updates
and encrypted messages.

A commit binds a typed payload to a public key and a timestamp. Anyone can
check authorship and effort offline: re-derive the digest, confirm its
leading zero nibbles, and recover the signer from the signature.
"""

__version__ = "0.1.0"

from powcommit.commit.assembler import create_commit
from powcommit.core.errors import (
    CommitCreationFailed,
    CommitEngineError,
    DifficultyNotMet,
    InvalidPayloadSchema,
    InvalidSignature,
    MessageCodecError,
    MiningAborted,
    SignerMismatch,
)
from powcommit.core.types import Attachment, Commit, MessageEnvelope, Meta, Post
from powcommit.crypto.cipher import CipherProvider, decode_message, encode_message
from powcommit.crypto.keys import Identity, create_identity, private_key_to_public_key
from powcommit.verify import CommitVerifier, check_commit, check_data_structure, verify_commit

__all__ = [
    "Attachment",
    "CipherProvider",
    "Commit",
    "CommitCreationFailed",
    "CommitEngineError",
    "CommitVerifier",
    "DifficultyNotMet",
    "Identity",
    "InvalidPayloadSchema",
    "InvalidSignature",
    "MessageCodecError",
    "MessageEnvelope",
    "Meta",
    "MiningAborted",
    "Post",
    "SignerMismatch",
    "check_commit",
    "check_data_structure",
    "create_commit",
    "create_identity",
    "decode_message",
    "encode_message",
    "private_key_to_public_key",
    "verify_commit",
]
