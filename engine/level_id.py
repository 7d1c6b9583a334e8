"""Level id generation and validation."""

import secrets
from collections.abc import Callable
from typing import Any

UINT32_MAX = 4_294_967_295


def is_valid_level_id(value: Any) -> bool:
    """Check whether a value is an unsigned 32-bit integer.

    Zero is accepted: externally authored levels may use it even though
    ``generate_level_id`` never does.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return 0 <= value <= UINT32_MAX


def generate_level_id(randbits: Callable[[int], int] = secrets.randbits) -> int:
    """Draw a random uint32 level id that is never zero.

    Args:
        randbits: Source of random bits, ``secrets.randbits`` by default.
            Injected by tests to force specific draws.

    Returns:
        An integer in [1, UINT32_MAX]. A zero draw maps to 1 so ids stay
        truthy for tools that treat 0 as unset.
    """
    generated = randbits(32)
    return generated if generated != 0 else 1
