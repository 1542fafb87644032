from __future__ import annotations

import itertools
import secrets
import string
from typing import Callable

IdGenerator = Callable[[], str]

TOKEN_ALPHABET = string.ascii_uppercase + string.digits
REPORT_ID_LENGTH = 9
HOTSPOT_ID_LENGTH = 6
HOTSPOT_ID_PREFIX = "HS-"


def random_token(length: int) -> str:
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def new_report_id() -> str:
    return random_token(REPORT_ID_LENGTH)


def new_hotspot_id() -> str:
    return f"{HOTSPOT_ID_PREFIX}{random_token(HOTSPOT_ID_LENGTH)}"


class SequentialIds:
    """Deterministic id source, mostly useful in tests and demo data."""

    def __init__(self, prefix: str = "", start: int = 1, width: int = 4) -> None:
        self._prefix = prefix
        self._width = width
        self._counter = itertools.count(start)

    def __call__(self) -> str:
        return f"{self._prefix}{next(self._counter):0{self._width}d}"
