# powcommit/crypto/keys.py
"""
secp256k1 identities and recoverable ECDSA signatures over commit digests.

Signatures are hex `r || s || v` where `v` (0 or 1) picks which of the two
keys produced by public-key recovery is the signer. Verification never takes
a public key as input: it recovers one and lets the caller compare.
"""
import hashlib
from dataclasses import dataclass

from ecdsa import SECP256k1, SigningKey, VerifyingKey
from ecdsa.errors import MalformedPointError
from ecdsa.util import sigdecode_string, sigencode_string

from powcommit.core.errors import InvalidSignature

CURVE = SECP256k1
SIGNATURE_LENGTH = 2 * CURVE.baselen + 1    # r || s || recovery id
HALF_ORDER = CURVE.order // 2


@dataclass(frozen=True)
class Identity:
    """Key pair held by a single author. Only `public_key` ever leaves it."""
    private_key: str    # 32-byte secret exponent, hex
    public_key: str     # uncompressed point, hex ("04" + X + Y)

    @classmethod
    def generate(cls) -> "Identity":
        sk = SigningKey.generate(curve=CURVE)
        return cls(private_key=sk.to_string().hex(), public_key=_public_hex(sk.get_verifying_key()))

    @classmethod
    def from_private_key(cls, private_key: str) -> "Identity":
        return cls(private_key=private_key, public_key=private_key_to_public_key(private_key))

    def sign(self, digest_hex: str) -> str:
        return sign_digest(self.private_key, digest_hex)

    def __repr__(self) -> str:
        return f"Identity(public_key={self.public_key[:18]}...)"


def _public_hex(vk: VerifyingKey) -> str:
    return vk.to_string("uncompressed").hex()


def _load_signing_key(private_key: str) -> SigningKey:
    try:
        return SigningKey.from_string(bytes.fromhex(private_key), curve=CURVE)
    except (ValueError, TypeError, MalformedPointError) as e:
        raise ValueError(f"Invalid private key: {e}") from e


def _digest_bytes(digest_hex: str) -> bytes:
    raw = bytes.fromhex(digest_hex)
    if len(raw) != CURVE.baselen:
        raise ValueError(f"Digest must be {CURVE.baselen} bytes, got {len(raw)}")
    return raw


def create_identity() -> Identity:
    return Identity.generate()


def private_key_to_public_key(private_key: str) -> str:
    return _public_hex(_load_signing_key(private_key).get_verifying_key())


def sign_digest(private_key: str, digest_hex: str) -> str:
    """
    Deterministic (RFC 6979) signature over a 32-byte digest.
    Raises ValueError for a malformed key or digest.
    """
    sk = _load_signing_key(private_key)
    raw_digest = _digest_bytes(digest_hex)
    rs = sk.sign_digest_deterministic(raw_digest, hashfunc=hashlib.sha256, sigencode=sigencode_string)
    r, s = sigdecode_string(rs, CURVE.order)
    if s > HALF_ORDER:
        # Normalise to low-s: (r, n - s) verifies over the same digest
        rs = sigencode_string(r, CURVE.order - s, CURVE.order)

    own = sk.get_verifying_key().to_string()
    candidates = VerifyingKey.from_public_key_recovery_with_digest(
        rs, raw_digest, CURVE, hashfunc=hashlib.sha256, sigdecode=sigdecode_string
    )
    for recovery_id, candidate in enumerate(candidates):
        if candidate.to_string() == own:
            return (rs + bytes([recovery_id])).hex()

    # Recovery always yields the signer for a well-formed signature
    raise ValueError("Signature recovery did not yield the signing key")


def recover_signer(signature: str, digest_hex: str) -> str:
    """Public key (hex) that produced `signature` over `digest_hex`."""
    try:
        raw = bytes.fromhex(signature)
    except (ValueError, TypeError) as e:
        raise InvalidSignature(f"Signature is not hex: {e}") from e
    if signature != raw.hex():
        raise InvalidSignature("Signature must be lowercase hex")
    if len(raw) != SIGNATURE_LENGTH:
        raise InvalidSignature(f"Signature must be {SIGNATURE_LENGTH} bytes, got {len(raw)}")

    rs, recovery_id = raw[:-1], raw[-1]
    if recovery_id not in (0, 1):
        raise InvalidSignature(f"Unknown recovery id {recovery_id}")
    if sigdecode_string(rs, CURVE.order)[1] > HALF_ORDER:
        raise InvalidSignature("High-s signature")

    try:
        candidates = VerifyingKey.from_public_key_recovery_with_digest(
            rs, _digest_bytes(digest_hex), CURVE, hashfunc=hashlib.sha256, sigdecode=sigdecode_string
        )
    except Exception as e:
        raise InvalidSignature(f"Public key recovery failed: {e}") from e

    if recovery_id >= len(candidates):
        raise InvalidSignature("Recovery id out of range")
    return _public_hex(candidates[recovery_id])
