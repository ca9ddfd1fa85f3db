"""
Structural tokenizer.

Emits coarse tokens describing program shape (blocks, control flow,
declarations, calls) and drops identifier names and literal values, so
renamed or reformatted code still produces the same sequence.

Two independent rule sets exist:

- brace languages (C, C++, Java, JavaScript and anything unknown): a fold
  over lines that threads an immutable scan state holding the block stack;
- Python: a fold over logical lines driven by indentation.

Neither rule set is a parser. Constructs they do not recognize emit nothing.
"""
import logging
import re
from dataclasses import dataclass, replace

from .config import SimilarityConfig
from .tokens import (
    BLOCK_TAGS,
    Token,
    TokenKind,
    TokenSequence,
    block_begin,
    block_end,
    structural_token,
)

logger = logging.getLogger(__name__)

# Languages that have no structure worth extracting
NO_STRUCTURE_LANGUAGES = {"plaintext", "text", "markdown"}

# Stack marker for braces that belong to an initializer (int a[] = {1, 2})
_INIT = "=INIT"
# Stack marker for braces that open no structural construct
_ANONYMOUS = ""

_CONTROL_KEYWORDS = {"if", "for", "while", "switch", "catch", "do", "try"}

_TYPE_WORDS = {
    "int", "char", "float", "double", "void", "long", "short", "signed",
    "unsigned", "bool", "boolean", "byte", "auto", "string", "size_t",
    "var", "let", "const", "static", "final", "volatile", "register",
    "extern", "mutable", "constexpr", "struct", "enum", "union",
}

# Words that can start a statement but never a declaration
_NON_DECLARATION_WORDS = {
    "return", "delete", "throw", "goto", "new", "else", "case", "typeof",
    "yield", "await", "using", "namespace", "break", "continue", "default",
    "sizeof", "do", "print", "echo",
}

_MODIFIERS_RE = re.compile(
    r"^(?:(?:public|private|protected|internal|static|final|abstract|sealed|export|"
    r"default|typedef|inline|virtual|explicit|friend|async|template\s*<[^>]*>)\s+)*"
)
_LABEL_RE = re.compile(r"^(?:public|private|protected|[A-Za-z_]\w*)\s*:(?!:)\s*")
_CASE_RE = re.compile(r"^case\b.*?(?<!:):(?!:)\s*", re.DOTALL)
_DEFAULT_RE = re.compile(r"^default\s*:(?!:)\s*")
_ELSE_RE = re.compile(r"^else\b\s*")
_FIRST_WORD_RE = re.compile(r"^([A-Za-z_]\w*)")

_DECLARATION_RE = re.compile(
    r"^[A-Za-z_][\w:]*(?:\s*<[^;=]*>)?"        # type, optionally templated
    r"(?:\s*[\*&]+\s*|\s+)[\*&]*"              # separator, pointer/reference marks
    r"[A-Za-z_]\w*\s*(?:\[[^\]]*\]\s*)*"       # name and array dimensions
    r"(?:=|\(|,|;|:|$)"
)
_ASSIGN_RE = re.compile(r"\+\+|--|<<=|>>=|[+\-*/%&|^]=|(?<![=!<>])=(?![=>])")
_CALL_START_RE = re.compile(r"^[A-Za-z_][\w.:\->\[\]]*\s*(?:<[^;()]*>)?\s*\(")
_STREAM_RE = re.compile(r"^(?:std::)?(?:cout|cin|cerr|clog)\b")
_CALL_ANYWHERE_RE = re.compile(r"[A-Za-z_]\w*\s*\(")
_NEW_RE = re.compile(r"\bnew\b")
_FUNCTION_PREFIX_RE = re.compile(r"^[\w:<>,\s\*&~\[\]\.$]*[A-Za-z_$~][\w$]*$")
_FUNCTION_KEYWORD_RE = re.compile(r"\bfunction\b\s*\*?\s*[\w$]*\s*\(")
_ARRAY_INIT_RE = re.compile(r"=\s*new\s+[\w:<>.]+\s*(?:\[[^\]]*\]\s*)+$")
_INIT_HEADER_RE = re.compile(r"(?:[=,]|\breturn)$")
_FUNCTION_SUFFIX_RE = re.compile(
    r"^(?:const\b|noexcept\b|override\b|final\b|throws\b|->|=>|:|$)"
)

_BRACE_LITERALS_RE = re.compile(
    r"//[^\n]*"
    r"|/\*[\s\S]*?(?:\*/|\Z)"
    r'|"(?:\\[\s\S]|[^"\\])*(?:"|\Z)'
    r"|'(?:\\[\s\S]|[^'\\])*(?:'|\Z)"
    r"|`(?:\\[\s\S]|[^`\\])*(?:`|\Z)"
)
_BRACE_DIRECTIVE_RE = re.compile(
    r"^\s*(?:#\s*[A-Za-z_]+\b.*|using\s+[^;]*;|import\s+[^;]*;?|package\s+[^;]*;)\s*$"
)

_PYTHON_LITERALS_RE = re.compile(
    r'"""[\s\S]*?(?:"""|\Z)'
    r"|'''[\s\S]*?(?:'''|\Z)"
    r'|"(?:\\[\s\S]|[^"\\\n])*(?:"|$)'
    r"|'(?:\\[\s\S]|[^'\\\n])*(?:'|$)"
    r"|#[^\n]*",
    re.MULTILINE,
)
_PYTHON_DIRECTIVE_RE = re.compile(r"^\s*(?:import\s+\S.*|from\s+\S+\s+import\b.*)$")


def _blank_literal(match: re.Match) -> str:
    """Replace a comment with its newlines and a string literal with empty quotes."""
    text = match.group(0)
    newlines = "\n" * text.count("\n")
    if text.startswith(("//", "/*", "#")):
        return newlines
    quote = text[:3] if text[:3] in ('"""', "'''") else text[0]
    return quote + quote + newlines


def _blank_python_literal(match: re.Match) -> str:
    # Newlines inside a string become explicit continuations so the
    # statement stays one logical line.
    blanked = _blank_literal(match)
    if match.group(0).startswith("#"):
        return blanked
    return blanked.replace("\n", "\\\n")


def preprocess(source: str, language: str) -> str:
    """
    Strip comments, literal contents and directive-only lines.

    Line numbers are preserved: removed text keeps its newlines.

    Examples:
        >>> preprocess('#include <x>\\nputs("a;b"); // c', "cpp")
        '\\nputs("");'
    """
    if language == "python":
        text = _PYTHON_LITERALS_RE.sub(_blank_python_literal, source)
        directive = _PYTHON_DIRECTIVE_RE
    else:
        text = _BRACE_LITERALS_RE.sub(_blank_literal, source)
        directive = _BRACE_DIRECTIVE_RE
    lines = ["" if directive.match(line) else line.rstrip() for line in text.split("\n")]
    return "\n".join(lines)


def _first_word(text: str) -> str:
    match = _FIRST_WORD_RE.match(text)
    return match.group(1) if match else ""


def _split_parenthesized(text: str) -> tuple[str, str] | None:
    """
    Split "kw (inside) rest" into (inside, rest).

    Returns None when the parentheses are missing or unbalanced.
    """
    start = text.find("(")
    if start < 0:
        return None
    depth = 0
    for i in range(start, len(text)):
        if text[i] == "(":
            depth += 1
        elif text[i] == ")":
            depth -= 1
            if depth == 0:
                return text[start + 1:i], text[i + 1:].strip()
    return None


def _top_level_split(text: str, separator: str) -> list[str]:
    parts = []
    depth = 0
    current = []
    for ch in text:
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth = max(0, depth - 1)
        if ch == separator and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    parts.append("".join(current))
    return parts


def _balanced(text: str) -> bool:
    return text.count("(") == text.count(")") and text.count("[") == text.count("]")


def _is_declaration(text: str) -> bool:
    word = _first_word(text)
    if not word or word in _NON_DECLARATION_WORDS:
        return False
    if word in _TYPE_WORDS and len(text.split()) > 1:
        return True
    return bool(_DECLARATION_RE.match(text))


def _rhs_tokens(rhs: str, line: int) -> list[Token]:
    if _NEW_RE.search(rhs):
        return [structural_token(TokenKind.NEW, line)]
    if _CALL_ANYWHERE_RE.search(rhs):
        return [structural_token(TokenKind.CALL, line)]
    return []


def operation_tokens(text: str, line: int) -> list[Token]:
    """
    Classify a simple statement as declaration, assignment, call or construction.

    Examples:
        >>> [t.kind.value for t in operation_tokens("int i=0", 1)]
        ['VARDEF']
        >>> [t.kind.value for t in operation_tokens("x = f(y)", 1)]
        ['ASSIGN', 'CALL']
    """
    text = text.strip()
    if text.startswith("await "):
        text = text[len("await "):].strip()
    if not text:
        return []

    if _is_declaration(text):
        parts = _top_level_split(text, "=")
        rhs = "=".join(parts[1:]) if len(parts) > 1 else ""
        return [structural_token(TokenKind.VARDEF, line)] + _rhs_tokens(rhs, line)

    if _STREAM_RE.match(text):
        return [structural_token(TokenKind.CALL, line)]

    assign = _ASSIGN_RE.search(text)
    if assign and _balanced(text[:assign.start()]):
        rhs = text[assign.end():]
        return [structural_token(TokenKind.ASSIGN, line)] + _rhs_tokens(rhs, line)

    if _NEW_RE.match(text):
        return [structural_token(TokenKind.NEW, line)]

    if _CALL_START_RE.match(text):
        return [structural_token(TokenKind.CALL, line)]

    return []


def _label_tokens(text: str, line: int) -> tuple[list[Token], str]:
    """Strip leading case/default/access labels; emit CASE/DEFAULT for switch labels."""
    tokens: list[Token] = []
    while True:
        match = _CASE_RE.match(text)
        if match:
            tokens.append(structural_token(TokenKind.CASE, line))
            text = text[match.end():]
            continue
        match = _DEFAULT_RE.match(text)
        if match:
            tokens.append(structural_token(TokenKind.DEFAULT, line))
            text = text[match.end():]
            continue
        match = _LABEL_RE.match(text)
        if match and not text.startswith(("case", "default")):
            text = text[match.end():]
            continue
        return tokens, text.strip()


def _for_init_tokens(inside: str, line: int) -> list[Token]:
    clauses = _top_level_split(inside, ";")
    init = clauses[0]
    if len(clauses) == 1:
        # Range-based loop: "auto x : v", "const x of items"
        init = re.split(r"(?<!:):(?!:)|\bof\b|\bin\b", init, maxsplit=1)[0]
    return operation_tokens(init, line)


# ---------------------------------------------------------------------------
# Brace languages
# ---------------------------------------------------------------------------

def _is_function_header(text: str) -> bool:
    if text.endswith("=>") or _FUNCTION_KEYWORD_RE.search(text):
        return True
    split = _split_parenthesized(text)
    if split is None:
        return False
    prefix = text[:text.find("(")].strip()
    _, suffix = split
    if "=" in prefix or _first_word(prefix) in _CONTROL_KEYWORDS | _NON_DECLARATION_WORDS:
        return False
    if prefix and not _FUNCTION_PREFIX_RE.match(prefix):
        return False
    if not prefix and not suffix.startswith("=>"):
        return False
    return bool(_FUNCTION_SUFFIX_RE.match(suffix))


def header_tokens(text: str, line: int) -> tuple[str, list[Token]]:
    """
    Classify the text before an opening brace.

    Returns:
        Tuple of (stack tag to push, tokens to emit). The tag is one of
        BLOCK_TAGS or an anonymous marker.

    Examples:
        >>> tag, tokens = header_tokens("for(int i=0;i<n;i++)", 1)
        >>> tag, [t.kind.value for t in tokens]
        ('FOR', ['FOR_BEGIN', 'VARDEF'])
    """
    tokens, text = _label_tokens(text.strip(), line)

    match = _ELSE_RE.match(text)
    if match:
        tokens.append(structural_token(TokenKind.ELSE, line))
        text = text[match.end():]
    if not text:
        return _ANONYMOUS, tokens

    word = _first_word(text)
    if word in ("if", "while", "switch", "catch", "do", "try"):
        tag = word.upper()
        tokens.append(structural_token(block_begin(tag), line))
        return tag, tokens
    if word == "for":
        tokens.append(structural_token(TokenKind.FOR_BEGIN, line))
        split = _split_parenthesized(text)
        if split is not None:
            tokens.extend(_for_init_tokens(split[0], line))
        return "FOR", tokens
    if word in ("finally", "namespace", "extern", "else"):
        return _ANONYMOUS, tokens

    declared = _MODIFIERS_RE.sub("", text)
    word = _first_word(declared)
    if word == "enum":
        tag = "ENUM"
    elif word in ("class", "interface"):
        tag = "CLASS"
    elif word in ("struct", "union"):
        tag = word.upper()
    elif _is_function_header(declared):
        tag = "FUNCTION"
    else:
        return _ANONYMOUS, tokens
    tokens.append(structural_token(block_begin(tag), line))
    return tag, tokens


def statement_tokens(text: str, line: int) -> list[Token]:
    """
    Classify the text before a semicolon.

    Examples:
        >>> [t.kind.value for t in statement_tokens("if (x) return 1", 1)]
        ['IF_BEGIN', 'RETURN', 'IF_END']
    """
    tokens, text = _label_tokens(text.strip(), line)
    if not text:
        return tokens

    match = _ELSE_RE.match(text)
    if match:
        tokens.append(structural_token(TokenKind.ELSE, line))
        text = text[match.end():].strip()
        if not text:
            return tokens

    word = _first_word(text)
    flow = {
        "return": TokenKind.RETURN,
        "break": TokenKind.BREAK,
        "continue": TokenKind.CONTINUE,
        "goto": TokenKind.GOTO,
        "throw": TokenKind.THROW,
    }
    if word in flow:
        tokens.append(structural_token(flow[word], line))
        return tokens

    if word in ("if", "while", "for", "switch"):
        tag = word.upper()
        tokens.append(structural_token(block_begin(tag), line))
        split = _split_parenthesized(text)
        if split is not None:
            inside, body = split
            if word == "for":
                tokens.extend(_for_init_tokens(inside, line))
            tokens.extend(statement_tokens(body, line))
        tokens.append(structural_token(block_end(tag), line))
        return tokens

    tokens.extend(operation_tokens(text, line))
    return tokens


@dataclass(frozen=True)
class BraceScanState:
    """Scan state threaded through the fold over lines."""
    stack: tuple[str, ...] = ()
    pending: str = ""          # statement text not yet terminated
    pending_line: int = 0      # line where the pending text starts
    depth: int = 0             # parenthesis/bracket depth
    after_do: bool = False     # a do-block just closed; its while(...) is not a loop


def scan_line(state: BraceScanState, line_no: int, text: str) -> tuple[BraceScanState, list[Token]]:
    """
    Process one source line.

    Args:
        state: State after the previous line
        line_no: 1-based line number
        text: Preprocessed line text

    Returns:
        Tuple of (new state, tokens emitted by this line)
    """
    stack = list(state.stack)
    pending = state.pending
    pending_line = state.pending_line
    depth = state.depth
    after_do = state.after_do
    emitted: list[Token] = []

    def append(ch: str) -> None:
        nonlocal pending, pending_line
        if not pending.strip() and not ch.isspace():
            pending_line = line_no
        pending += ch

    def flush_statement() -> None:
        nonlocal pending, after_do
        body = pending.strip()
        pending = ""
        if not body:
            return
        if after_do and _first_word(body) == "while":
            after_do = False
            return
        after_do = False
        emitted.extend(statement_tokens(body, pending_line or line_no))

    for ch in text:
        if ch in "([":
            depth += 1
            append(ch)
        elif ch in ")]":
            depth = max(0, depth - 1)
            append(ch)
        elif depth > 0 or ch not in "{};":
            append(ch)
        elif ch == "{":
            header = pending.strip()
            if (
                _INIT_HEADER_RE.search(header)
                or _ARRAY_INIT_RE.search(header)
                or (stack and stack[-1] == _INIT)
            ):
                stack.append(_INIT)
                append(ch)
                continue
            pending = ""
            after_do = False
            tag, tokens = header_tokens(header, pending_line or line_no) if header else (_ANONYMOUS, [])
            stack.append(tag)
            emitted.extend(tokens)
        elif ch == "}":
            if stack and stack[-1] == _INIT:
                stack.pop()
                append(ch)
                continue
            flush_statement()
            if not stack:
                continue
            tag = stack.pop()
            if tag in BLOCK_TAGS:
                emitted.append(structural_token(block_end(tag), line_no))
            after_do = tag == "DO"
        else:
            flush_statement()

    if pending:
        pending += " "

    new_state = BraceScanState(
        stack=tuple(stack),
        pending=pending,
        pending_line=pending_line,
        depth=depth,
        after_do=after_do,
    )
    return new_state, emitted


def tokenize_braces(source: str) -> list[Token]:
    """Fold scan_line over the lines of preprocessed brace-language source."""
    state = BraceScanState()
    tokens: list[Token] = []
    lines = source.split("\n")
    for line_no, text in enumerate(lines, start=1):
        state, emitted = scan_line(state, line_no, text)
        tokens.extend(emitted)

    if state.pending.strip():
        tokens.extend(statement_tokens(state.pending, state.pending_line or len(lines)))
    return tokens


# ---------------------------------------------------------------------------
# Python
# ---------------------------------------------------------------------------

_PY_BLOCKS = {
    "def": "FUNCTION",
    "class": "CLASS",
    "if": "IF",
    "for": "FOR",
    "while": "WHILE",
    "try": "TRY",
    "except": "CATCH",
}
_PY_ANONYMOUS_BLOCKS = {"else", "finally", "with", "match", "case"}


@dataclass(frozen=True)
class LogicalLine:
    line: int
    indent: int
    text: str


@dataclass(frozen=True)
class IndentScanState:
    """Stack of (indent, tag) pairs for open Python blocks."""
    stack: tuple[tuple[int, str], ...] = ()


def logical_lines(source: str) -> list[LogicalLine]:
    """Join bracket and backslash continuations into logical lines."""
    result: list[LogicalLine] = []
    buffer = ""
    start_line = 0
    indent = 0
    depth = 0

    for line_no, raw in enumerate(source.split("\n"), start=1):
        if not buffer:
            if not raw.strip():
                continue
            start_line = line_no
            expanded = raw.expandtabs(8)
            indent = len(expanded) - len(expanded.lstrip())
        for ch in raw:
            if ch in "([{":
                depth += 1
            elif ch in ")]}":
                depth = max(0, depth - 1)
        stripped = raw.strip()
        if stripped.endswith("\\"):
            buffer += stripped[:-1] + " "
            continue
        buffer += stripped + " "
        if depth > 0:
            continue
        result.append(LogicalLine(line=start_line, indent=indent, text=buffer.strip()))
        buffer = ""

    if buffer.strip():
        result.append(LogicalLine(line=start_line, indent=indent, text=buffer.strip()))
    return result


def _python_header_split(text: str) -> tuple[str, str] | None:
    """Split "if x: body" at the top-level colon."""
    depth = 0
    for i, ch in enumerate(text):
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth = max(0, depth - 1)
        elif ch == ":" and depth == 0 and text[i + 1:i + 2] != "=":
            return text[:i], text[i + 1:].strip()
    return None


def python_statement_tokens(text: str, line: int) -> list[Token]:
    """
    Classify a Python simple statement.

    Examples:
        >>> [t.kind.value for t in python_statement_tokens("total += f(x)", 1)]
        ['ASSIGN', 'CALL']
    """
    word = _first_word(text)
    flow = {
        "return": TokenKind.RETURN,
        "yield": TokenKind.RETURN,
        "break": TokenKind.BREAK,
        "continue": TokenKind.CONTINUE,
        "raise": TokenKind.THROW,
    }
    if word in flow:
        return [structural_token(flow[word], line)]
    if word in ("pass", "del", "global", "nonlocal", "assert"):
        return []
    if text.startswith("await "):
        text = text[len("await "):]

    annotated = re.match(r"^[A-Za-z_][\w.]*\s*:(?!=)\s*[^=]+(=(.*))?$", text)
    if annotated:
        rhs = annotated.group(2) or ""
        return [structural_token(TokenKind.VARDEF, line)] + _rhs_tokens(rhs, line)

    assign = _ASSIGN_RE.search(text)
    if assign and _balanced(text[:assign.start()]):
        return [structural_token(TokenKind.ASSIGN, line)] + _rhs_tokens(text[assign.end():], line)
    if _CALL_START_RE.match(text):
        return [structural_token(TokenKind.CALL, line)]
    return []


def _python_block(text: str) -> tuple[str | None, list[str], str] | None:
    """
    Recognize a compound statement header.

    Returns:
        (tag to push or None for anonymous, marker names to emit, inline body)
        or None when the line is not a header.
    """
    words = text.split(None, 1)
    if not words:
        return None
    word = _first_word(text)
    if word == "async":
        text = text[len("async"):].strip()
        word = _first_word(text)
    if word not in _PY_BLOCKS and word not in _PY_ANONYMOUS_BLOCKS and word != "elif":
        return None
    split = _python_header_split(text)
    if split is None:
        return None
    _, body = split
    if word == "elif":
        return "IF", ["ELSE", "IF_BEGIN"], body
    if word == "else":
        return None, ["ELSE"], body
    if word in _PY_ANONYMOUS_BLOCKS:
        return None, [], body
    tag = _PY_BLOCKS[word]
    return tag, [f"{tag}_BEGIN"], body


def python_step(state: IndentScanState, logical: LogicalLine) -> tuple[IndentScanState, list[Token]]:
    """Process one logical line: close dedented blocks, then open or classify."""
    stack = list(state.stack)
    emitted: list[Token] = []

    if logical.text.startswith("@"):
        return state, emitted

    while stack and stack[-1][0] >= logical.indent:
        _, tag = stack.pop()
        if tag:
            emitted.append(structural_token(block_end(tag), logical.line))

    block = _python_block(logical.text)
    if block is None:
        emitted.extend(python_statement_tokens(logical.text, logical.line))
        return IndentScanState(stack=tuple(stack)), emitted

    tag, markers, body = block
    emitted.extend(structural_token(TokenKind[m], logical.line) for m in markers)

    if body:
        # One-line body: "if x: return y"
        emitted.extend(python_statement_tokens(body, logical.line))
        if tag:
            emitted.append(structural_token(block_end(tag), logical.line))
    else:
        stack.append((logical.indent, tag or _ANONYMOUS))
    return IndentScanState(stack=tuple(stack)), emitted


def tokenize_python(source: str) -> list[Token]:
    """Fold python_step over logical lines, closing open blocks at the end."""
    state = IndentScanState()
    tokens: list[Token] = []
    lines = logical_lines(source)
    for logical in lines:
        state, emitted = python_step(state, logical)
        tokens.extend(emitted)

    last_line = lines[-1].line if lines else 1
    for _, tag in reversed(state.stack):
        if tag:
            tokens.append(structural_token(block_end(tag), last_line))
    return tokens


class StructuralTokenizer:
    """Structural tokenizer for one language and configuration."""

    def __init__(self, language: str, config: SimilarityConfig):
        self.language = (language or "").lower()
        self.config = config

    def tokenize(self, source: str) -> TokenSequence:
        """
        Convert source text to structural tokens.

        Examples:
            >>> from similarity.config import SimilarityConfig
            >>> tokenizer = StructuralTokenizer("cpp", SimilarityConfig())
            >>> [t.kind.value for t in tokenizer.tokenize("for(int i=0;i<n;i++){sum+=i;}")]
            ['FOR_BEGIN', 'VARDEF', 'ASSIGN', 'FOR_END']
        """
        if not source or self.language in NO_STRUCTURE_LANGUAGES:
            return ()

        cleaned = preprocess(source, self.language)
        if self.language == "python":
            tokens = tokenize_python(cleaned)
        else:
            tokens = tokenize_braces(cleaned)

        logger.debug(f"Structural tokenizer ({self.language}): {len(tokens)} tokens")
        return tuple(tokens)
