# powcommit/config.py
"""
Mining settings resolved in this order:
1. explicit argument (CLI flag or keyword)
2. POWCOMMIT_* environment variable
3. built-in default
"""
import os
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from powcommit.core.types import DEFAULT_DIFFICULTY

T = TypeVar("T")

ENV_DIFFICULTY = "POWCOMMIT_DIFFICULTY"
ENV_MAX_ATTEMPTS = "POWCOMMIT_MAX_ATTEMPTS"
ENV_TIMEOUT = "POWCOMMIT_TIMEOUT"
ENV_PRIVATE_KEY = "POWCOMMIT_PRIVATE_KEY"


def _from_env(name: str, parse: Callable[[str], T]) -> Optional[T]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    try:
        return parse(raw)
    except ValueError as e:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from e


@dataclass(frozen=True)
class MiningSettings:
    difficulty: int = DEFAULT_DIFFICULTY
    max_attempts: Optional[int] = None
    timeout: Optional[float] = None

    @classmethod
    def resolve(
        cls,
        difficulty: Optional[int] = None,
        max_attempts: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> "MiningSettings":
        if difficulty is None:
            difficulty = _from_env(ENV_DIFFICULTY, int)
        if max_attempts is None:
            max_attempts = _from_env(ENV_MAX_ATTEMPTS, int)
        if timeout is None:
            timeout = _from_env(ENV_TIMEOUT, float)
        return cls(
            difficulty=DEFAULT_DIFFICULTY if difficulty is None else difficulty,
            max_attempts=max_attempts,
            timeout=timeout,
        )
