"""npm-style version range helpers."""

from __future__ import annotations

from nodesemver import satisfies

RANGE_OPERATORS = ("^", "~")


def range_type(range_: str) -> str:
    """Range operator prefix of ``range_``.

    Only a leading ``^`` or ``~`` counts. Anything else, including a digit
    of a pinned version, yields ``""``.
    """
    if range_[:1] in RANGE_OPERATORS:
        return range_[:1]
    return ""


def admits(version: str, range_: str) -> bool:
    """Whether ``version`` satisfies ``range_``.

    Unparseable versions or ranges never satisfy.
    """
    try:
        return bool(satisfies(version, range_))
    except (ValueError, TypeError):
        return False
