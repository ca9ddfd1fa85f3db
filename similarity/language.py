"""
Source language detection and language id helpers.

Detection is heuristic: each candidate language has a battery of regex
indicators and the language with the most indicators firing wins.
"""
import re

from .config import default_language

LANGUAGE_INDICATORS: dict[str, list[re.Pattern]] = {
    "cpp": [
        re.compile(r"#include\s*<.*>"),
        re.compile(r"\bstd::"),
        re.compile(r"\b(cout|cin|endl)\b"),
        re.compile(r"\b(int|char|float|double|void)\s+\w+\s*\("),
        re.compile(r"#define\b"),
    ],
    "java": [
        re.compile(r"\bpublic\s+class\b"),
        re.compile(r"\bpublic\s+static\s+void\s+main\b"),
        re.compile(r"\bimport\s+java\."),
        re.compile(r"\bSystem\.out\.print"),
        re.compile(r"\b(String|Integer|ArrayList)\b"),
    ],
    "python": [
        re.compile(r"\bdef\s+\w+\s*\("),
        re.compile(r"\bimport\s+\w+"),
        re.compile(r"\bfrom\s+\w+\s+import\b"),
        re.compile(r"\bprint\s*\("),
        re.compile(r"\b(True|False|None)\b"),
    ],
    "javascript": [
        re.compile(r"\bfunction\s+\w+\s*\("),
        re.compile(r"\b(var|let|const)\s+\w+"),
        re.compile(r"\bconsole\.log\b"),
        re.compile(r"\b(document|window)\."),
        re.compile(r"\b(async|await)\b"),
    ],
}

# Judge language ids (e.g. "cc.cc17o2", "py.py3") -> canonical tag
LANGUAGE_ALIASES = {
    "c": "c",
    "cc": "cpp",
    "cpp": "cpp",
    "c++": "cpp",
    "cxx": "cpp",
    "java": "java",
    "py": "python",
    "py3": "python",
    "python": "python",
    "python3": "python",
    "js": "javascript",
    "node": "javascript",
    "javascript": "javascript",
}

DISPLAY_NAMES = {
    "c": "C",
    "cpp": "C++",
    "java": "Java",
    "python": "Python",
    "javascript": "JavaScript",
}


def indicator_scores(source: str) -> dict[str, int]:
    """
    Count how many indicators fire for each candidate language.

    Examples:
        >>> indicator_scores('print("hi")')["python"]
        1
    """
    return {
        language: sum(1 for pattern in patterns if pattern.search(source))
        for language, patterns in LANGUAGE_INDICATORS.items()
    }


def detect_language(source: str, default: str | None = None) -> str:
    """
    Guess the language of a source snippet.

    The language with the strictly highest indicator count wins.
    A tie at the top or no indicators at all gives the default.

    Args:
        source: Source code text
        default: Fallback tag (SIMILARITY_DEFAULT_LANGUAGE or "cpp" if None)

    Returns:
        Language tag, never raises

    Examples:
        >>> detect_language("#include <iostream>\\nint main() { std::cout << 1; }")
        'cpp'
        >>> detect_language("", default="java")
        'java'
    """
    fallback = default or default_language()
    if not source:
        return fallback

    scores = indicator_scores(source)
    best = max(scores.values())
    if best == 0:
        return fallback

    leaders = [language for language, score in scores.items() if score == best]
    if len(leaders) > 1:
        return fallback
    return leaders[0]


def normalize_language(lang_id: str) -> str:
    """
    Map a judge language id to a canonical language tag.

    The part before the first dot selects the family ("cc.cc14o2" -> "cc").
    Unknown ids are returned lower-cased.

    Examples:
        >>> normalize_language("cc.cc17o2")
        'cpp'
        >>> normalize_language("py.py3")
        'python'
        >>> normalize_language("Rust")
        'rust'
    """
    lang = (lang_id or "").strip().lower()
    if lang in LANGUAGE_ALIASES:
        return LANGUAGE_ALIASES[lang]
    family = lang.split(".", 1)[0]
    return LANGUAGE_ALIASES.get(family, lang)


def language_display_name(language: str) -> str:
    """
    Human-readable language name.

    Examples:
        >>> language_display_name("cpp")
        'C++'
        >>> language_display_name("go")
        'GO'
    """
    return DISPLAY_NAMES.get(language, language.upper())
