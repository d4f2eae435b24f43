"""
Name normalization and edit-distance similarity.
Used to compare spreadsheet-declared table/column names with scanned schema names.
"""
import re
from rapidfuzz.distance import Levenshtein

_WHITESPACE = re.compile(r"\s+")
_NON_NAME_CHARS = re.compile(r"[^a-z0-9_\s]")


def normalize_name(value: str) -> str:
    """Identity form of a name: trimmed, whitespace collapsed, lowercased."""
    return _WHITESPACE.sub(" ", value.strip()).lower()


def normalize_for_compare(value: str) -> str:
    """
    Fuzzy form of a name, only used as input to similarity scoring.
    
    Lowercases, drops everything outside [a-z0-9_ ] and collapses whitespace.
    """
    cleaned = _NON_NAME_CHARS.sub("", value.lower())
    return _WHITESPACE.sub(" ", cleaned).strip()


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance with unit insert/delete/substitute costs."""
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """
    Similarity ratio of two names in [0, 1].
    
    Computed as 1 - distance / max(len) on the fuzzy forms.
    Two names that are both empty after normalization are identical (1.0).
    """
    aa = normalize_for_compare(a)
    bb = normalize_for_compare(b)
    if not aa and not bb:
        return 1.0
    distance = edit_distance(aa, bb)
    return 1 - distance / max(len(aa), len(bb))
