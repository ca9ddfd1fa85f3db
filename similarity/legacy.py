"""
Whole-text similarity signal.

Compares the two sources as plain strings after removing C-style comments
and collapsing whitespace. Cheap and blind to structure, it balances the
structural score for very short programs.
"""
import re

from rapidfuzz.distance import Levenshtein

_LINE_COMMENT_RE = re.compile(r"//.*$", re.MULTILINE)
_BLOCK_COMMENT_RE = re.compile(r"/\*[\s\S]*?\*/")
_WHITESPACE_RE = re.compile(r"\s+")


def clean_code(code: str) -> str:
    """
    Drop // and /* */ comments and collapse whitespace.

    Examples:
        >>> clean_code("int a; // counter\\n/* x */  int b;")
        'int a; int b;'
    """
    code = _LINE_COMMENT_RE.sub("", code)
    code = _BLOCK_COMMENT_RE.sub("", code)
    return _WHITESPACE_RE.sub(" ", code).strip()


def legacy_similarity(code_a: str, code_b: str) -> float:
    """
    Normalized edit-distance similarity of the cleaned sources.

    Returns:
        1 - distance / max(len): 1.0 when both are empty, 0.0 when one is

    Examples:
        >>> legacy_similarity("int a;", "int a;")
        1.0
        >>> legacy_similarity("", "x")
        0.0
    """
    clean_a = clean_code(code_a)
    clean_b = clean_code(code_b)

    if not clean_a and not clean_b:
        return 1.0
    if not clean_a or not clean_b:
        return 0.0

    max_len = max(len(clean_a), len(clean_b))
    return 1.0 - (Levenshtein.distance(clean_a, clean_b) / max_len)
