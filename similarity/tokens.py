"""
Token model shared by the tokenizers and the matcher.

Lexical tokens carry the matched source text; structural tokens carry only
their kind, so two programs that differ in names and literals still produce
equal structural sequences.
"""
from dataclasses import dataclass
from enum import Enum


class SemanticTag(Enum):
    """Coarse category of a structural token."""
    CONTROL = "control"          # if/for/while/switch/try/catch blocks
    DECLARATION = "declaration"  # class/struct/enum/union/function, VARDEF
    FLOW = "flow"                # else/case/return/break/...
    OPERATION = "operation"      # assignment, call, object construction


class TokenKind(Enum):
    """Fixed token vocabulary for both tokenizer modes."""
    # Lexical
    KEYWORD = "keyword"
    IDENTIFIER = "identifier"
    NUMBER = "number"
    STRING = "string"
    CHAR = "char"
    OPERATOR = "operator"
    PUNCTUATION = "punctuation"
    COMMENT = "comment"

    # Structural: blocks
    CLASS_BEGIN = "CLASS_BEGIN"
    CLASS_END = "CLASS_END"
    STRUCT_BEGIN = "STRUCT_BEGIN"
    STRUCT_END = "STRUCT_END"
    ENUM_BEGIN = "ENUM_BEGIN"
    ENUM_END = "ENUM_END"
    UNION_BEGIN = "UNION_BEGIN"
    UNION_END = "UNION_END"
    FUNCTION_BEGIN = "FUNCTION_BEGIN"
    FUNCTION_END = "FUNCTION_END"
    IF_BEGIN = "IF_BEGIN"
    IF_END = "IF_END"
    FOR_BEGIN = "FOR_BEGIN"
    FOR_END = "FOR_END"
    WHILE_BEGIN = "WHILE_BEGIN"
    WHILE_END = "WHILE_END"
    DO_BEGIN = "DO_BEGIN"
    DO_END = "DO_END"
    SWITCH_BEGIN = "SWITCH_BEGIN"
    SWITCH_END = "SWITCH_END"
    TRY_BEGIN = "TRY_BEGIN"
    TRY_END = "TRY_END"
    CATCH_BEGIN = "CATCH_BEGIN"
    CATCH_END = "CATCH_END"

    # Structural: flow
    ELSE = "ELSE"
    CASE = "CASE"
    DEFAULT = "DEFAULT"
    RETURN = "RETURN"
    BREAK = "BREAK"
    CONTINUE = "CONTINUE"
    GOTO = "GOTO"
    THROW = "THROW"

    # Structural: operations
    VARDEF = "VARDEF"
    ASSIGN = "ASSIGN"
    CALL = "CALL"
    NEW = "NEW"

    @property
    def is_structural(self) -> bool:
        return self not in LEXICAL_KINDS

    @property
    def semantic_tag(self) -> SemanticTag | None:
        return _SEMANTIC_TAGS.get(self)


LEXICAL_KINDS = frozenset({
    TokenKind.KEYWORD,
    TokenKind.IDENTIFIER,
    TokenKind.NUMBER,
    TokenKind.STRING,
    TokenKind.CHAR,
    TokenKind.OPERATOR,
    TokenKind.PUNCTUATION,
    TokenKind.COMMENT,
})

# Block tags that can be opened by a structural tokenizer
BLOCK_TAGS = (
    "CLASS", "STRUCT", "ENUM", "UNION", "FUNCTION",
    "IF", "FOR", "WHILE", "DO", "SWITCH", "TRY", "CATCH",
)

_DECLARATION_BLOCKS = {"CLASS", "STRUCT", "ENUM", "UNION", "FUNCTION"}

_SEMANTIC_TAGS: dict[TokenKind, SemanticTag] = {}
for _tag in BLOCK_TAGS:
    _category = SemanticTag.DECLARATION if _tag in _DECLARATION_BLOCKS else SemanticTag.CONTROL
    _SEMANTIC_TAGS[TokenKind[f"{_tag}_BEGIN"]] = _category
    _SEMANTIC_TAGS[TokenKind[f"{_tag}_END"]] = _category
for _kind in (TokenKind.ELSE, TokenKind.CASE, TokenKind.DEFAULT, TokenKind.RETURN,
              TokenKind.BREAK, TokenKind.CONTINUE, TokenKind.GOTO, TokenKind.THROW):
    _SEMANTIC_TAGS[_kind] = SemanticTag.FLOW
_SEMANTIC_TAGS[TokenKind.VARDEF] = SemanticTag.DECLARATION
for _kind in (TokenKind.ASSIGN, TokenKind.CALL, TokenKind.NEW):
    _SEMANTIC_TAGS[_kind] = SemanticTag.OPERATION


@dataclass(frozen=True)
class Token:
    """A classified unit of source text. Line and column are 1-based."""
    kind: TokenKind
    text: str
    line: int
    column: int
    semantic_tag: SemanticTag | None = None


TokenSequence = tuple[Token, ...]


def block_begin(tag: str) -> TokenKind:
    """
    Get the BEGIN marker for a block tag.

    Examples:
        >>> block_begin("FOR")
        <TokenKind.FOR_BEGIN: 'FOR_BEGIN'>
    """
    return TokenKind[f"{tag}_BEGIN"]


def block_end(tag: str) -> TokenKind:
    """Get the END marker for a block tag."""
    return TokenKind[f"{tag}_END"]


def structural_token(kind: TokenKind, line: int, column: int = 1) -> Token:
    """Create a structural token; its text is the marker name, never source text."""
    return Token(
        kind=kind,
        text=kind.value,
        line=line,
        column=column,
        semantic_tag=kind.semantic_tag,
    )
