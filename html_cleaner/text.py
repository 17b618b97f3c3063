"""
Small string helpers shared by the mutators.
"""

import re
from typing import Iterable, Union


def _glob_to_regex(pattern: str) -> "re.Pattern[str]":
    # Only '*' is special; everything else matches literally
    return re.compile("^" + re.escape(pattern).replace(r"\*", ".*") + "$", re.DOTALL)


def matches_glob(patterns: Union[str, Iterable[str]], candidate: str) -> bool:
    """
    Check whether ``candidate`` matches any of the glob ``patterns``.

    ``*`` matches any run of characters (``data-*`` matches ``data-foo``).
    Matching is case-sensitive, like attribute names after parsing.

    Args:
        patterns: One pattern or a list of patterns
        candidate: String to test

    Returns:
        True if at least one pattern matches
    """
    if isinstance(patterns, str):
        patterns = [patterns]

    for pattern in patterns:
        if pattern == candidate:
            return True
        if "*" in pattern and _glob_to_regex(pattern).match(candidate):
            return True

    return False
