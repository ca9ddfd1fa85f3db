"""
Lexical tokenizer.

Turns source text into a flat sequence of typed tokens using an ordered,
per-language table of (pattern, kind) pairs. At each position the first
pattern that matches is committed. The order is part of the contract:
keywords are tried before the general identifier pattern, otherwise
"for" would become an IDENTIFIER and stop matching other keywords.
"""
import re

from .config import SimilarityConfig
from .tokens import Token, TokenKind, TokenSequence

# (pattern, kind); kind None means whitespace, which is always dropped
PatternTable = list[tuple[re.Pattern, TokenKind | None]]

# Unterminated literals run to the end of input
_LINE_COMMENT = r"//[^\n]*"
_BLOCK_COMMENT = r"/\*[\s\S]*?(?:\*/|\Z)"
_DOUBLE_QUOTED = r'"(?:\\[\s\S]|[^"\\])*(?:"|\Z)'
_SINGLE_QUOTED = r"'(?:\\[\s\S]|[^'\\])*(?:'|\Z)"
_IDENTIFIER = r"[A-Za-z_][A-Za-z0-9_]*"
_NUMBER = r"0[xX][0-9a-fA-F]+[uUlL]*|\d+(?:\.\d+)?(?:[eE][+-]?\d+)?[fFdDlLuU]*"
_WHITESPACE = r"\s+"

_C_OPERATORS = (
    r"<<=|>>=|->\*?|\+\+|--|&&|\|\||==|!=|<=|>=|<<|>>|::"
    r"|[+\-*/%&|^]=|[+\-*/%=!<>&|^~?:]"
)
_JS_OPERATORS = (
    r"===|!==|\*\*=|>>>=?|<<=|>>=|=>|\?\?=?|\?\.|\+\+|--|&&=?|\|\|=?|==|!=|<=|>=|<<|>>|\*\*"
    r"|[+\-*/%&|^]=|[+\-*/%=!<>&|^~?:]"
)
_PY_OPERATORS = (
    r"\*\*=|//=|>>=|<<=|->|:=|\*\*|//|==|!=|<=|>=|<<|>>"
    r"|[+\-*/%&|^@]=|[+\-*/%=<>&|^~@]"
)

C_KEYWORDS = [
    "if", "else", "for", "while", "do", "switch", "case", "default", "break",
    "continue", "return", "goto", "int", "char", "float", "double", "void",
    "long", "short", "signed", "unsigned", "bool", "auto", "class", "struct",
    "union", "enum", "typedef", "public", "private", "protected", "virtual",
    "static", "const", "extern", "inline", "namespace", "using", "include",
    "template", "typename", "new", "delete", "try", "catch", "throw", "this",
    "true", "false", "nullptr", "sizeof", "operator",
]

JAVA_KEYWORDS = [
    "abstract", "assert", "boolean", "break", "byte", "case", "catch", "char",
    "class", "const", "continue", "default", "do", "double", "else", "enum",
    "extends", "final", "finally", "float", "for", "goto", "if", "implements",
    "import", "instanceof", "int", "interface", "long", "native", "new",
    "package", "private", "protected", "public", "return", "short", "static",
    "strictfp", "super", "switch", "synchronized", "this", "throw", "throws",
    "transient", "try", "void", "volatile", "while", "true", "false", "null",
]

PYTHON_KEYWORDS = [
    "and", "as", "assert", "async", "await", "break", "class", "continue",
    "def", "del", "elif", "else", "except", "finally", "for", "from",
    "global", "if", "import", "in", "is", "lambda", "nonlocal", "not", "or",
    "pass", "raise", "return", "try", "while", "with", "yield", "True",
    "False", "None",
]

JAVASCRIPT_KEYWORDS = [
    "async", "await", "break", "case", "catch", "class", "const", "continue",
    "debugger", "default", "delete", "do", "else", "export", "extends",
    "finally", "for", "function", "if", "import", "in", "instanceof", "let",
    "new", "return", "super", "switch", "this", "throw", "try", "typeof",
    "var", "void", "while", "with", "yield", "true", "false", "null",
    "undefined",
]


def _keywords(words: list[str]) -> re.Pattern:
    # Longest first so alternation never stops at a prefix
    ordered = sorted(words, key=len, reverse=True)
    return re.compile(r"\b(?:" + "|".join(map(re.escape, ordered)) + r")\b")


def _table(
    comments: list[str],
    keywords: list[str] | None,
    operators: str,
    punctuation: str,
    char_kind: TokenKind = TokenKind.CHAR,
    strings: list[str] | None = None,
) -> PatternTable:
    table: PatternTable = [(re.compile(c), TokenKind.COMMENT) for c in comments]
    if keywords:
        table.append((_keywords(keywords), TokenKind.KEYWORD))
    table.append((re.compile(_IDENTIFIER), TokenKind.IDENTIFIER))
    table.append((re.compile(_NUMBER), TokenKind.NUMBER))
    for s in strings or [_DOUBLE_QUOTED]:
        table.append((re.compile(s), TokenKind.STRING))
    table.append((re.compile(_SINGLE_QUOTED), char_kind))
    table.append((re.compile(operators), TokenKind.OPERATOR))
    table.append((re.compile(punctuation), TokenKind.PUNCTUATION))
    table.append((re.compile(_WHITESPACE), None))
    return table


def build_pattern_table(language: str) -> PatternTable:
    """
    Build the ordered pattern table for a language.

    Unknown languages get a generic table (no keywords).

    Args:
        language: Canonical language tag ("cpp", "java", ...)

    Returns:
        Ordered list of (compiled pattern, kind) pairs
    """
    lang = (language or "").lower()
    if lang in ("c", "cpp", "c++"):
        return _table(
            [_LINE_COMMENT, _BLOCK_COMMENT], C_KEYWORDS, _C_OPERATORS, r"[{}()\[\];,.#]"
        )
    if lang == "java":
        return _table(
            [_LINE_COMMENT, _BLOCK_COMMENT], JAVA_KEYWORDS, _C_OPERATORS, r"[{}()\[\];,.@]"
        )
    if lang == "javascript":
        return _table(
            [_LINE_COMMENT, _BLOCK_COMMENT],
            JAVASCRIPT_KEYWORDS,
            _JS_OPERATORS,
            r"[{}()\[\];,.]",
            char_kind=TokenKind.STRING,
            strings=[_DOUBLE_QUOTED, r"`(?:\\[\s\S]|[^`\\])*(?:`|\Z)"],
        )
    if lang == "python":
        # Docstrings are treated as comments
        return _table(
            [r"#[^\n]*", r'"""[\s\S]*?(?:"""|\Z)', r"'''[\s\S]*?(?:'''|\Z)"],
            PYTHON_KEYWORDS,
            _PY_OPERATORS,
            r"[{}()\[\]:;,.]",
            char_kind=TokenKind.STRING,
        )
    return _table(
        [_LINE_COMMENT, _BLOCK_COMMENT],
        None,
        _C_OPERATORS,
        r"[{}()\[\];,.]",
        char_kind=TokenKind.STRING,
    )


class LexicalTokenizer:
    """Pattern-table tokenizer for one language and configuration."""

    def __init__(self, language: str, config: SimilarityConfig):
        self.language = language
        self.config = config
        self.patterns = build_pattern_table(language)

    def tokenize(self, source: str) -> TokenSequence:
        """
        Convert source text to lexical tokens.

        Characters no pattern recognizes are skipped one at a time,
        so the scan always finishes.

        Examples:
            >>> from similarity.config import SimilarityConfig
            >>> lexer = LexicalTokenizer("cpp", SimilarityConfig(structural_only=False))
            >>> [t.kind.value for t in lexer.tokenize("int x = 1;")]
            ['keyword', 'identifier', 'operator', 'number', 'punctuation']
        """
        tokens: list[Token] = []
        pos = 0
        line = 1
        line_start = 0
        length = len(source)

        while pos < length:
            match = None
            kind = None
            for pattern, pattern_kind in self.patterns:
                match = pattern.match(source, pos)
                if match and match.end() > pos:
                    kind = pattern_kind
                    break
                match = None

            if match is None:
                if source[pos] == "\n":
                    line += 1
                    line_start = pos + 1
                pos += 1
                continue

            text = match.group(0)
            keep = kind is not None and not (self.config.ignore_comments and kind == TokenKind.COMMENT)
            if keep:
                tokens.append(Token(
                    kind=kind,
                    text=text.lower() if self.config.ignore_case else text,
                    line=line,
                    column=pos - line_start + 1,
                ))

            newlines = text.count("\n")
            if newlines:
                line += newlines
                line_start = pos + text.rfind("\n") + 1
            pos = match.end()

        return tuple(tokens)
