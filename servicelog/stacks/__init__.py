"""
Stack sub-record support.

Several categories record one sub-entry per physical stack position. The
positions are named by a fixed alphabet, truncated to the number of stacks
the equipment actually has.
"""

from __future__ import annotations

ALL_STACK_IDENTIFIERS: tuple[str, ...] = ("a", "b", "c", "d", "e")
MIN_STACK_COUNT = 1
MAX_STACK_COUNT = len(ALL_STACK_IDENTIFIERS)


def clamp_stack_count(count: int) -> int:
    """Clamp an equipment stack count into the supported 1..5 range."""
    return max(MIN_STACK_COUNT, min(int(count), MAX_STACK_COUNT))


def stack_identifiers(count: int) -> list[str]:
    """Return the active stack identifiers for an equipment stack count."""
    return list(ALL_STACK_IDENTIFIERS[: clamp_stack_count(count)])


def stack_label(identifier: str) -> str:
    return f"Stack {identifier.upper()}"
