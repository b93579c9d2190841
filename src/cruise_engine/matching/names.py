"""Fuzzy matching of boat and cabin names across independently maintained feeds.

The ship catalog, the cabin catalog and the availability feed each spell a
vessel or room type their own way ("MV Aurora", "Aurora Liveaboard",
"AURORA (Luxury)"). Everything that joins those feeds goes through the two
predicates in this module. Both are pure and total: any input yields a bool.
"""
from __future__ import annotations

import re
from typing import Any, List

_PARENTHETICAL = re.compile(r"\s*\(.*?\)\s*")
_NON_ALNUM = re.compile(r"[^A-Z0-9]")
_NON_WORD = re.compile(r"[^A-Z0-9 ]")
_WHITESPACE = re.compile(r"\s+")

# Hull prefixes carried by some feeds but not others.
VESSEL_PREFIXES = frozenset({"MV", "KM", "KLM", "SY", "MY"})

MIN_SHARED_WORD_LENGTH = 4


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def _boat_words(name: Any) -> List[str]:
    text = _PARENTHETICAL.sub(" ", _as_text(name).upper())
    text = text.replace("LIVEBOARD", "LIVEABOARD")
    text = _NON_WORD.sub(" ", text)
    return [word for word in _WHITESPACE.split(text) if word]


def normalize_boat_name(name: Any) -> str:
    """Collapse a boat name to upper-case alphanumerics.

    Parenthetical qualifiers such as ``(Deluxe)`` are dropped and the common
    ``LIVEBOARD`` misspelling is corrected.
    """
    text = _PARENTHETICAL.sub("", _as_text(name).upper())
    text = text.replace("LIVEBOARD", "LIVEABOARD")
    return _NON_ALNUM.sub("", text)


def _significant_words(name: Any) -> List[str]:
    words = _boat_words(name)
    significant = [word for word in words if word not in VESSEL_PREFIXES]
    return significant or words


def _contains_either(left: str, right: str) -> bool:
    if not left or not right:
        return False
    return left in right or right in left


def boat_names_match(first: Any, second: Any) -> bool:
    """Return True when two boat/operator names refer to the same vessel."""
    n1 = normalize_boat_name(first)
    n2 = normalize_boat_name(second)
    if not n1 or not n2:
        return False
    if n1 == n2 or _contains_either(n1, n2):
        return True

    words1 = _significant_words(first)
    words2 = _significant_words(second)
    if not words1 or not words2:
        return False
    if words1[0] == words2[0] and len(words1[0]) > 3:
        return True

    compact1 = "".join(words1)
    compact2 = "".join(words2)
    return _contains_either(compact1, compact2)


def _normalize_cabin_name(name: Any) -> str:
    return _WHITESPACE.sub(" ", _as_text(name).upper()).strip()


def cabin_names_match(cabin_name: Any, availability_name: Any) -> bool:
    """Return True when a catalog cabin name and a reported cabin name agree.

    Besides equality and containment, any word of at least four characters
    from ``cabin_name`` appearing in ``availability_name`` counts.
    """
    cn1 = _normalize_cabin_name(cabin_name)
    cn2 = _normalize_cabin_name(availability_name)
    if not cn1 or not cn2:
        return False
    if cn1 == cn2 or _contains_either(cn1, cn2):
        return True
    return any(
        word in cn2 for word in cn1.split(" ") if len(word) >= MIN_SHARED_WORD_LENGTH
    )


def cabin_matches_any_name(names: List[Any], availability_name: Any) -> bool:
    """Match a cabin known under several names (display and API names)."""
    return any(cabin_names_match(name, availability_name) for name in names)
