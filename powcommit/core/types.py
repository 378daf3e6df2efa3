# powcommit/core/types.py
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Literal, Mapping, Optional, Tuple, Union

from powcommit.core.errors import InvalidPayloadSchema

PROTOCOL_VERSION = 1
DEFAULT_DIFFICULTY = 3

CommitType = Literal["post", "meta", "message"]
COMMIT_TYPES: Tuple[str, ...] = ("post", "meta", "message")
ATTACHMENT_TYPES: Tuple[str, ...] = ("image", "video", "others")

# Wire names, in the order they are emitted
COMMIT_FIELDS: Tuple[str, ...] = ("commitAt", "data", "publicKey", "signature", "type", "nonce")


def utc_iso_now() -> str:
    """Current UTC time as ISO 8601 with millis and a trailing Z."""
    now = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return now.replace("+00:00", "Z")


@dataclass(frozen=True)
class Attachment:
    """Media referenced by a post, by content id and/or URL."""
    type: Literal["image", "video", "others"]
    cid: Optional[str] = None
    url: Optional[str] = None

    def to_dict(self) -> dict:
        d: Dict[str, Any] = {"type": self.type}
        if self.cid is not None:
            d["cid"] = self.cid
        if self.url is not None:
            d["url"] = self.url
        return d

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Attachment":
        return cls(type=d["type"], cid=d.get("cid"), url=d.get("url"))


@dataclass(frozen=True)
class Post:
    """A public post, optionally replying to the commit named by `parent`."""
    TYPE: ClassVar[str] = "post"

    content: str
    hashtags: Tuple[str, ...] = ()
    attachments: Tuple[Attachment, ...] = ()
    parent: Optional[str] = None

    def __post_init__(self):
        # Accept lists and attachment dicts from callers, store tuples
        object.__setattr__(self, "hashtags", tuple(self.hashtags))
        object.__setattr__(self, "attachments", tuple(
            Attachment.from_dict(a) if isinstance(a, Mapping) else a for a in self.attachments
        ))

    def to_dict(self) -> dict:
        return {
            "parent": self.parent,
            "content": self.content,
            "hashtags": list(self.hashtags),
            "attachments": [a.to_dict() for a in self.attachments],
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Post":
        return cls(
            content=d["content"],
            hashtags=tuple(d["hashtags"]),
            attachments=tuple(Attachment.from_dict(a) for a in d["attachments"]),
            parent=d["parent"],
        )


@dataclass(frozen=True)
class Meta:
    """Profile update: display fields plus follow/hashtag/bookmark lists."""
    TYPE: ClassVar[str] = "meta"

    name: str
    about: str
    image: str
    website: str
    followed: Tuple[str, ...] = ()
    hashtags: Tuple[str, ...] = ()
    bookmarks: Tuple[str, ...] = ()

    def __post_init__(self):
        for name in ("followed", "hashtags", "bookmarks"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    def to_dict(self) -> dict:
        return {
            "followed": list(self.followed),
            "hashtags": list(self.hashtags),
            "bookmarks": list(self.bookmarks),
            "name": self.name,
            "about": self.about,
            "image": self.image,
            "website": self.website,
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Meta":
        return cls(
            name=d["name"],
            about=d["about"],
            image=d["image"],
            website=d["website"],
            followed=tuple(d["followed"]),
            hashtags=tuple(d["hashtags"]),
            bookmarks=tuple(d["bookmarks"]),
        )


@dataclass(frozen=True)
class MessageEnvelope:
    """Private message: `message` is an opaque blob produced by a cipher."""
    TYPE: ClassVar[str] = "message"

    receiver: str
    message: Any

    def to_dict(self) -> dict:
        return {"receiver": self.receiver, "message": self.message}

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "MessageEnvelope":
        return cls(receiver=d["receiver"], message=d["message"])


Payload = Union[Post, Meta, MessageEnvelope]

PAYLOAD_CLASSES = {cls.TYPE: cls for cls in (Post, Meta, MessageEnvelope)}


def payload_to_dict(data: Union[Payload, Mapping[str, Any]]) -> dict:
    """JSON object form of a payload dataclass or an already-plain mapping."""
    if isinstance(data, (Post, Meta, MessageEnvelope)):
        return data.to_dict()
    return dict(data)


def payload_from_dict(type: str, d: Mapping[str, Any]) -> Payload:
    """Build the payload dataclass for `type`; raises InvalidPayloadSchema if malformed."""
    from powcommit.verify.schema import check_data_structure

    if not check_data_structure(d, type):
        raise InvalidPayloadSchema(f"Payload does not match schema for type {type!r}")
    return PAYLOAD_CLASSES[type].from_dict(d)


@dataclass(frozen=True)
class Commit:
    """Signed, proof-of-work gated record binding a payload to a public key."""
    commit_at: str                  # ISO 8601 UTC with millis, set once at creation
    data: Union[Payload, Mapping[str, Any]]
    public_key: str                 # hex, uncompressed secp256k1 point
    signature: str                  # hex r || s || recovery id
    type: str                       # "post" | "meta" | "message"
    nonce: int                      # smallest positive nonce meeting the difficulty

    def to_dict(self) -> dict:
        """Six-field wire form."""
        return {
            "commitAt": self.commit_at,
            "data": payload_to_dict(self.data),
            "publicKey": self.public_key,
            "signature": self.signature,
            "type": self.type,
            "nonce": self.nonce,
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Commit":
        missing = [f for f in COMMIT_FIELDS if f not in d]
        if missing:
            raise InvalidPayloadSchema(f"Commit is missing fields: {', '.join(missing)}")
        return cls(
            commit_at=d["commitAt"],
            data=payload_from_dict(d["type"], d["data"]),
            public_key=d["publicKey"],
            signature=d["signature"],
            type=d["type"],
            nonce=d["nonce"],
        )
