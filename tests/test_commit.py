# tests/test_commit.py
import logging
from dataclasses import replace

import pytest

from powcommit.commit.assembler import create_commit
from powcommit.core.errors import (
    CommitCreationFailed,
    DifficultyNotMet,
    InvalidPayloadSchema,
    InvalidSignature,
    MiningAborted,
    SignerMismatch,
)
from powcommit.core.types import Attachment, Commit, MessageEnvelope, Meta, Post
from powcommit.crypto.hashing import commit_digest, commit_hash
from powcommit.crypto.keys import CURVE, Identity, create_identity
from powcommit.verify.verifier import CommitVerifier, check_commit, verify_commit

FIXED_TIME = "2026-10-18T09:15:02.113Z"


@pytest.fixture(scope="module")
def author() -> Identity:
    return create_identity()


@pytest.fixture(scope="module")
def hello_post() -> Post:
    return Post(content="Hello Boy", hashtags=["news"], attachments=[])


@pytest.fixture(scope="module")
def signed_post(author, hello_post) -> Commit:
    return create_commit(author.private_key, hello_post, "post", 2)


def test_hello_boy_at_difficulty_four(author, hello_post):
    commit = create_commit(author.private_key, hello_post, "post", 4)

    digest_hex = commit_hash(commit)
    assert digest_hex.startswith("0000")
    assert commit.type == "post"
    assert commit.public_key == author.public_key
    assert commit.nonce >= 1
    assert verify_commit(commit, 4) is True
    assert verify_commit(commit, 5) is digest_hex.startswith("00000")


@pytest.mark.parametrize("difficulty", [0, 1, 2, 3])
def test_roundtrip_all_payload_types(author, difficulty):
    payloads = [
        Post(content="reply", hashtags=["a1"], parent="e" * 64),
        Meta(name="alice", about="", image="", website="", followed=[author.public_key]),
        MessageEnvelope(receiver=create_identity().public_key, message="opaque-blob"),
    ]
    for payload in payloads:
        commit = create_commit(author.private_key, payload, difficulty=difficulty)
        assert commit.type == payload.TYPE
        assert verify_commit(commit, difficulty)


def test_wire_dict_verifies(signed_post):
    assert verify_commit(signed_post.to_dict(), 2)
    assert verify_commit(Commit.from_dict(signed_post.to_dict()), 2)


def test_mapping_payload_is_detached(author):
    data = {"parent": None, "content": "x", "hashtags": [], "attachments": []}
    commit = create_commit(author.private_key, data, "post", 1)
    data["hashtags"].append("edited")
    assert commit.data["hashtags"] == []
    assert verify_commit(commit, 1)


def test_mapping_payload_requires_type(author):
    with pytest.raises(ValueError):
        create_commit(author.private_key, {"receiver": "x", "message": "y"})


def test_injected_clock(author, hello_post):
    commit = create_commit(author.private_key, hello_post, "post", 1, clock=lambda: FIXED_TIME)
    assert commit.commit_at == FIXED_TIME


def test_commit_is_immutable(signed_post):
    with pytest.raises(AttributeError):
        signed_post.nonce = 1


def test_tamper_data(signed_post):
    tampered = replace(signed_post, data=replace(signed_post.data, content="HACKED CONTENT"))
    assert verify_commit(tampered, 2) is False


def test_tamper_commit_at(signed_post):
    assert verify_commit(replace(signed_post, commit_at="2020-01-01T00:00:00.000Z"), 2) is False


def test_tamper_nonce(signed_post):
    assert verify_commit(replace(signed_post, nonce=signed_post.nonce + 1), 2) is False


def test_tamper_signature(signed_post):
    sig = signed_post.signature
    flipped = ("0" if sig[10] != "0" else "1")
    assert verify_commit(replace(signed_post, signature=sig[:10] + flipped + sig[11:]), 2) is False


def test_uppercase_signature_rejected(signed_post):
    upper = signed_post.signature.upper()
    assert upper != signed_post.signature
    assert verify_commit(replace(signed_post, signature=upper), 2) is False


def test_high_s_twin_signature_rejected(signed_post):
    raw = bytes.fromhex(signed_post.signature)
    n = CURVE.order
    s = int.from_bytes(raw[32:64], "big")
    assert s <= n // 2

    # (r, n - s) with the other recovery id recovers the same key
    twin = raw[:32] + (n - s).to_bytes(32, "big") + bytes([raw[64] ^ 1])
    assert verify_commit(replace(signed_post, signature=twin.hex()), 2) is False
    with pytest.raises(InvalidSignature):
        check_commit(replace(signed_post, signature=twin.hex()), 2)


def test_nonce_digit_shifted_into_commit_at_rejected(author):
    for i in range(200):
        commit = create_commit(author.private_key, Post(content=f"shift {i}"), "post", 1, clock=lambda: FIXED_TIME)
        digits = str(commit.nonce)
        if len(digits) >= 2 and digits[1] != "0":
            break
    else:
        pytest.fail("no commit with a multi-digit nonce found")

    shifted = replace(commit, commit_at=commit.commit_at + digits[0], nonce=int(digits[1:]))
    assert commit_digest(shifted.data, shifted.commit_at, shifted.nonce) == commit_hash(commit)
    assert verify_commit(shifted, 1) is False
    with pytest.raises(InvalidPayloadSchema):
        check_commit(shifted, 1)


def test_post_with_attachment_dicts(author):
    post = Post(content="pics", attachments=[{"type": "image", "cid": "bafy1"}])
    assert post.attachments == (Attachment(type="image", cid="bafy1"),)

    commit = create_commit(author.private_key, post, "post", 1)
    assert commit.to_dict()["data"]["attachments"] == [{"type": "image", "cid": "bafy1"}]
    assert verify_commit(commit, 1)


def test_tamper_public_key(signed_post):
    other = create_identity()
    assert verify_commit(replace(signed_post, public_key=other.public_key), 2) is False


def test_swapped_key_and_signature_from_other_author(signed_post, hello_post):
    # Valid commit by someone else, public key replaced with the victim's
    other = create_identity()
    forged = create_commit(other.private_key, hello_post, "post", 2)
    assert verify_commit(replace(forged, public_key=signed_post.public_key), 2) is False


def test_check_commit_reports_signer_mismatch(signed_post):
    with pytest.raises(SignerMismatch):
        check_commit(replace(signed_post, public_key=create_identity().public_key), 2)


def test_check_commit_reports_difficulty(signed_post):
    commit = signed_post
    # Raise the bar until the stored nonce no longer qualifies
    digest_hex = commit_hash(commit)
    zeros = len(digest_hex) - len(digest_hex.lstrip("0"))
    with pytest.raises(DifficultyNotMet):
        check_commit(commit, zeros + 1)


def test_check_commit_reports_schema(signed_post):
    wire = signed_post.to_dict()
    wire["data"]["hashtags"] = ["not valid!"]
    with pytest.raises(InvalidPayloadSchema):
        check_commit(wire, 2)


def test_check_commit_reports_bad_signature(signed_post):
    with pytest.raises(InvalidSignature):
        check_commit(replace(signed_post, signature="abcd"), 2)


def test_check_commit_returns_digest(signed_post):
    assert check_commit(signed_post, 2) == commit_hash(signed_post)


def test_verify_never_raises(signed_post):
    assert verify_commit(None) is False
    assert verify_commit({"garbage": True}) is False
    assert verify_commit(signed_post, -3) is False
    assert verify_commit(replace(signed_post, type="comment"), 2) is False


def test_verify_logs_rejection_reason(signed_post, caplog):
    with caplog.at_level(logging.DEBUG, logger="powcommit.verify.verifier"):
        verify_commit(replace(signed_post, public_key=create_identity().public_key), 2)
    assert "signer" in caplog.text


@pytest.mark.parametrize("bad_key", ["", "zz", "00" * 32])
def test_create_commit_bad_private_key(hello_post, bad_key):
    with pytest.raises(CommitCreationFailed):
        create_commit(bad_key, hello_post, "post", 0)


def test_create_commit_unserializable_payload_propagates(author):
    with pytest.raises(Exception) as exc:
        create_commit(author.private_key, {"content": object()}, "post", 0)
    assert not isinstance(exc.value, CommitCreationFailed)


def test_create_commit_mining_guard(author, hello_post):
    with pytest.raises(MiningAborted):
        create_commit(author.private_key, hello_post, "post", 64, max_attempts=10)


def test_commit_verifier_batch(author, signed_post, hello_post):
    good = create_commit(author.private_key, hello_post, "post", 2)
    bad = replace(good, nonce=good.nonce + 1)

    verifier = CommitVerifier(difficulty=2)
    result = verifier.verify_all([signed_post, good.to_dict(), bad])

    assert result.is_valid is False
    assert not result
    assert len(result.failures) == 1
    assert result.first_failure.index == 2
    assert result.first_failure.category in ("difficulty", "signature", "signer")
    assert "FAILED" in str(result)


def test_commit_verifier_all_valid(signed_post):
    result = CommitVerifier(difficulty=2).verify_all([signed_post])
    assert result
    assert result.failures == []
    assert "1 valid" in result.message


def test_commit_verifier_empty():
    result = CommitVerifier(difficulty=1).verify_all([])
    assert result.is_valid
    assert result.message == "No commits to verify"


def test_commit_verifier_trusted_keys(author, signed_post, hello_post):
    stranger = create_identity()
    foreign = create_commit(stranger.private_key, hello_post, "post", 1)

    verifier = CommitVerifier(difficulty=1, trusted_keys=[author.public_key])
    assert verifier.verify(signed_post)
    assert not verifier.verify(foreign)

    result = verifier.verify_all([signed_post, foreign])
    assert [f.category for f in result.failures] == ["trust"]


def test_commit_verifier_rejects_bad_difficulty():
    with pytest.raises(ValueError):
        CommitVerifier(difficulty=99)
