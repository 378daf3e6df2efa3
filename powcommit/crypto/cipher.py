# powcommit/crypto/cipher.py
"""
Private message envelopes.

The encryption scheme itself is pluggable: anything implementing
`CipherProvider` can be used. The sender signs the plaintext digest before
encryption so the receiver can recover who wrote it after decryption.
"""
import json
import logging
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from powcommit.core.errors import MessageCodecError
from powcommit.core.types import MessageEnvelope
from powcommit.crypto.hashing import digest
from powcommit.crypto.keys import private_key_to_public_key, recover_signer, sign_digest

logger = logging.getLogger(__name__)


@runtime_checkable
class CipherProvider(Protocol):
    """Asymmetric encryption to a recipient's public key."""

    def encrypt(self, plaintext: str, recipient_public_key: str) -> str:
        ...

    def decrypt(self, blob: str, private_key: str) -> str:
        ...


@dataclass(frozen=True)
class DecodedMessage:
    sender: str
    receiver: str
    message: str


def encode_message(
    message: str,
    sender_private_key: str,
    receiver_public_key: str,
    cipher: CipherProvider,
) -> MessageEnvelope:
    """Sign and encrypt `message` for the receiver, ready for a `message` commit."""
    try:
        signature = sign_digest(sender_private_key, digest(message.encode("utf-8")))
        blob = cipher.encrypt(json.dumps({"message": message, "signature": signature}), receiver_public_key)
    except Exception as e:
        logger.warning("Failed to encode message: %s", e)
        raise MessageCodecError("Failed to encode message") from e

    return MessageEnvelope(receiver=receiver_public_key, message=blob)


def decode_message(blob: str, receiver_private_key: str, cipher: CipherProvider) -> DecodedMessage:
    """Decrypt an envelope blob and recover its sender."""
    try:
        inner = json.loads(cipher.decrypt(blob, receiver_private_key))
        message = inner["message"]
        sender = recover_signer(inner["signature"], digest(message.encode("utf-8")))
        receiver = private_key_to_public_key(receiver_private_key)
    except Exception as e:
        logger.warning("Failed to decode message: %s", e)
        raise MessageCodecError("Failed to decode message") from e

    return DecodedMessage(sender=sender, receiver=receiver, message=message)
