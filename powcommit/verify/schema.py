# powcommit/verify/schema.py
"""
Structural checks for commit payloads, one validator per type tag.

Validators never raise: anything unexpected (wrong container types, missing
keys, an unknown tag) yields False. Collections are checked with `all()` so a
single bad element rejects the whole payload.
"""
import re
from typing import Any, Callable, Dict, Mapping

from powcommit.core.types import ATTACHMENT_TYPES, COMMIT_FIELDS

MAX_HASHTAG_LENGTH = 32
HASHTAG_PATTERN = re.compile(r"[A-Za-z0-9]*")
# commitAt as written by utc_iso_now, e.g. 2026-10-18T09:15:02.113Z
TIMESTAMP_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", re.ASCII)

POST_FIELDS = ("parent", "content", "hashtags", "attachments")
META_FIELDS = ("followed", "hashtags", "bookmarks", "name", "about", "image", "website")
MESSAGE_FIELDS = ("receiver", "message")


def _has_fields(data: Mapping[str, Any], fields) -> bool:
    return all(f in data for f in fields)


def _is_list(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def is_valid_hashtag(tag: Any) -> bool:
    return (
        isinstance(tag, str)
        and len(tag) <= MAX_HASHTAG_LENGTH
        and HASHTAG_PATTERN.fullmatch(tag) is not None
    )


def is_valid_attachment(attachment: Any) -> bool:
    return (
        isinstance(attachment, Mapping)
        and attachment.get("type") in ATTACHMENT_TYPES
        and (attachment.get("cid") is not None or attachment.get("url") is not None)
    )


def _valid_hashtags(data: Mapping[str, Any]) -> bool:
    return _is_list(data["hashtags"]) and all(is_valid_hashtag(t) for t in data["hashtags"])


def validate_post(data: Mapping[str, Any]) -> bool:
    return (
        _has_fields(data, POST_FIELDS)
        and _valid_hashtags(data)
        and _is_list(data["attachments"])
        and all(is_valid_attachment(a) for a in data["attachments"])
    )


def validate_meta(data: Mapping[str, Any]) -> bool:
    return _has_fields(data, META_FIELDS) and _valid_hashtags(data)


def validate_message(data: Mapping[str, Any]) -> bool:
    # The encrypted blob is opaque here
    return _has_fields(data, MESSAGE_FIELDS)


VALIDATORS: Dict[str, Callable[[Mapping[str, Any]], bool]] = {
    "post": validate_post,
    "meta": validate_meta,
    "message": validate_message,
}


def check_data_structure(data: Any, type: Any) -> bool:
    """True iff `data` is a JSON object matching the schema for `type`."""
    if not isinstance(type, str) or not isinstance(data, Mapping):
        return False
    validator = VALIDATORS.get(type)
    if validator is None:
        return False
    return validator(data)


def has_commit_fields(commit: Any) -> bool:
    """Exactly the six wire fields, nothing missing and nothing extra."""
    return isinstance(commit, Mapping) and set(commit) == set(COMMIT_FIELDS)


def verify_object(commit: Any) -> bool:
    """Wire-level shape of a commit: field set, scalar types and payload schema."""
    if not has_commit_fields(commit):
        return False

    nonce = commit["nonce"]
    if isinstance(nonce, bool) or not isinstance(nonce, int) or nonce < 1:
        return False
    if not all(isinstance(commit[f], str) for f in ("commitAt", "publicKey", "signature", "type")):
        return False
    # Fixed-width timestamp keeps the commitAt/nonce boundary in the preimage unambiguous
    if TIMESTAMP_PATTERN.fullmatch(commit["commitAt"]) is None:
        return False

    return check_data_structure(commit["data"], commit["type"])
