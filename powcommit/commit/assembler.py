# powcommit/commit/assembler.py
import copy
import logging
import threading
from typing import Any, Callable, Mapping, Optional, Union

from powcommit.core.errors import CommitCreationFailed
from powcommit.core.types import DEFAULT_DIFFICULTY, Commit, Payload, utc_iso_now
from powcommit.crypto.hashing import serialize_payload
from powcommit.crypto.keys import private_key_to_public_key, sign_digest
from powcommit.mining.miner import mine

logger = logging.getLogger(__name__)


def create_commit(
    private_key: str,
    data: Union[Payload, Mapping[str, Any]],
    type: Optional[str] = None,
    difficulty: int = DEFAULT_DIFFICULTY,
    *,
    max_attempts: Optional[int] = None,
    timeout: Optional[float] = None,
    cancel: Optional[threading.Event] = None,
    clock: Callable[[], str] = utc_iso_now,
) -> Commit:
    """
    Mine a nonce for `data`, sign the resulting digest and return the commit.

    `type` defaults to the tag of a payload dataclass; it must be given for
    plain mappings. The payload is not schema-checked here, only on
    verification. Key or signing failures raise CommitCreationFailed;
    a payload that is not JSON-serializable propagates as-is.
    """
    if type is None:
        type = getattr(data, "TYPE", None)
        if type is None:
            raise ValueError("type is required for plain mapping payloads")

    if isinstance(data, Mapping):
        # Detach from the caller's object so later edits cannot alter the commit
        data = copy.deepcopy(dict(data))

    try:
        public_key = private_key_to_public_key(private_key)
    except ValueError as e:
        logger.warning("Error creating commit: %s", e)
        raise CommitCreationFailed("Failed to create commit: invalid private key") from e

    serialized = serialize_payload(data)
    commit_at = clock()

    result = mine(
        serialized,
        commit_at,
        difficulty,
        max_attempts=max_attempts,
        timeout=timeout,
        cancel=cancel,
    )

    try:
        signature = sign_digest(private_key, result.digest)
    except ValueError as e:
        logger.warning("Error signing commit digest: %s", e)
        raise CommitCreationFailed("Failed to create commit: signing failed") from e

    logger.debug("Created %s commit at %s with nonce %d", type, commit_at, result.nonce)
    return Commit(
        commit_at=commit_at,
        data=data,
        public_key=public_key,
        signature=signature,
        type=type,
        nonce=result.nonce,
    )
