"""Answer comparison shared by solo runs and hosted games."""

from __future__ import annotations


def normalize_answer(value: object) -> str:
    """Stringify, trim and case-fold an answer for comparison."""
    if value is None:
        return ""
    return str(value).strip().casefold()


def answers_match(submitted: object, correct: object) -> bool:
    """Return True when ``submitted`` equals ``correct`` ignoring case and surrounding spaces.

    Numbers are compared through their string form, so ``1999`` matches ``"1999"``.
    An empty submission never matches.
    """
    normalized = normalize_answer(submitted)
    if not normalized:
        return False
    return normalized == normalize_answer(correct)
