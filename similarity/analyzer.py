"""
Similarity orchestrator.

Ties the pieces together for one pair of sources: resolve the language,
fetch a tokenizer/matcher pair from the engine cache, tokenize, tile and
map every tile back to line ranges and text fragments of the sources.
"""
import logging
import re
import threading
from dataclasses import dataclass, field
from typing import NamedTuple

from .config import DEFAULT_MINIMUM_TOKEN_MATCH, SimilarityConfig
from .ensemble import EnsembleResult, SimilarityDetail, classify_match_type, combine
from .language import detect_language, normalize_language
from .legacy import legacy_similarity
from .lexer import LexicalTokenizer
from .structure import StructuralTokenizer
from .tiling import ComparisonResult, GreedyStringTiling, Tile
from .tokens import TokenSequence

logger = logging.getLogger(__name__)

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
_HORIZONTAL_SPACE_RE = re.compile(r"[ \t\f\v]+")


class Engine(NamedTuple):
    """Tokenizer and matcher built for one (language, config) key."""
    tokenizer: LexicalTokenizer | StructuralTokenizer
    matcher: GreedyStringTiling


class EngineCache:
    """
    Append-only map from (language, config) to a constructed Engine.

    Building pattern tables is the only expensive part of setting up a
    comparison, so engines are reused across calls. The lock guarantees a
    key is constructed exactly once even under concurrent first access.
    """

    def __init__(self):
        self._engines: dict[tuple[str, SimilarityConfig], Engine] = {}
        self._lock = threading.Lock()

    def get(self, language: str, config: SimilarityConfig) -> Engine:
        key = (language, config)
        with self._lock:
            engine = self._engines.get(key)
            if engine is None:
                logger.debug(f"Engine cache miss for {language}, building engine")
                if config.structural_only:
                    tokenizer = StructuralTokenizer(language, config)
                else:
                    tokenizer = LexicalTokenizer(language, config)
                engine = Engine(tokenizer=tokenizer, matcher=GreedyStringTiling(config))
                self._engines[key] = engine
            return engine

    def __len__(self) -> int:
        with self._lock:
            return len(self._engines)


@dataclass(frozen=True)
class Evaluation:
    """Raw comparison result plus line-mapped details."""
    result: ComparisonResult
    details: list[SimilarityDetail] = field(default_factory=list)
    language: str = ""
    minimum_token_match: int = DEFAULT_MINIMUM_TOKEN_MATCH


def normalize_whitespace(source: str) -> str:
    """
    Normalize whitespace without changing the line structure.

    Line breaks become "\\n", runs of spaces and tabs after the indentation
    become one space, trailing whitespace is dropped. Indentation is kept
    as is, so Python blocks still nest.

    Examples:
        >>> normalize_whitespace("int\\t\\ta = 1;   \\r\\n    return a;")
        'int a = 1;\\n    return a;'
    """
    normalized = []
    for line in _LINE_BREAK_RE.split(source):
        body = line.lstrip(" \t")
        indent = line[:len(line) - len(body)]
        body = _HORIZONTAL_SPACE_RE.sub(" ", body).rstrip()
        normalized.append(indent + body if body else "")
    return "\n".join(normalized)


def source_lines(source: str) -> list[str]:
    """Split source text on any line break convention."""
    return _LINE_BREAK_RE.split(source)


def map_tile(
    tile: Tile,
    tokens_a: TokenSequence,
    tokens_b: TokenSequence,
    lines_a: list[str],
    lines_b: list[str],
) -> SimilarityDetail:
    """
    Project a tile onto line ranges and fragments.

    The line range runs from the line of the first token in the tile to
    the line of the last one.
    """
    start_a = tokens_a[tile.start_a].line
    end_a = tokens_a[tile.start_a + tile.length - 1].line
    start_b = tokens_b[tile.start_b].line
    end_b = tokens_b[tile.start_b + tile.length - 1].line

    fragment_a = "\n".join(lines_a[start_a - 1:end_a])
    fragment_b = "\n".join(lines_b[start_b - 1:end_b])

    return SimilarityDetail(
        start_line_a=start_a,
        end_line_a=end_a,
        start_line_b=start_b,
        end_line_b=end_b,
        fragment_a=fragment_a,
        fragment_b=fragment_b,
        match_type=classify_match_type(fragment_a, fragment_b),
        token_count=tile.length,
    )


class SimilarityAnalyzer:
    """
    Compares pairs of source files.

    One analyzer holds one base configuration and an engine cache; the
    cache may be shared between analyzers.
    """

    def __init__(self, config: SimilarityConfig | None = None, cache: EngineCache | None = None):
        """
        Initialize analyzer.

        Args:
            config: Base configuration (defaults if None)
            cache: Engine cache to use (a private one if None)
        """
        self.config = config or SimilarityConfig()
        self.cache = cache if cache is not None else EngineCache()

    def resolve_language(self, source_a: str, language: str | None = None) -> str:
        """Explicit language, then the configured one, then detection on source A."""
        tag = language or self.config.language
        if tag:
            return normalize_language(tag)
        return detect_language(source_a)

    def evaluate(self, source_a: str, source_b: str, language: str | None = None) -> Evaluation:
        """
        Tokenize and tile two sources.

        Args:
            source_a: First source text
            source_b: Second source text
            language: Language tag; detected from source_a if None

        Returns:
            Evaluation with the raw result and line-mapped details. Details
            are empty when similarity is below minimum_similarity.
        """
        lang = self.resolve_language(source_a, language)
        config = self.config.for_language(lang)
        engine = self.cache.get(lang, config)

        text_a = normalize_whitespace(source_a) if config.normalize_whitespace else source_a
        text_b = normalize_whitespace(source_b) if config.normalize_whitespace else source_b

        tokens_a = engine.tokenizer.tokenize(text_a)
        tokens_b = engine.tokenizer.tokenize(text_b)
        result = engine.matcher.compare(tokens_a, tokens_b)

        logger.debug(
            f"Compared {lang} sources: {len(tokens_a)} vs {len(tokens_b)} tokens, "
            f"similarity {result.similarity:.3f}, {len(result.tiles)} tiles"
        )

        if result.similarity < config.minimum_similarity:
            logger.debug(
                f"Similarity {result.similarity:.3f} below {config.minimum_similarity}, details suppressed"
            )
            return Evaluation(
                result=result, details=[], language=lang, minimum_token_match=config.minimum_token_match
            )

        lines_a = source_lines(source_a)
        lines_b = source_lines(source_b)
        details = [map_tile(tile, tokens_a, tokens_b, lines_a, lines_b) for tile in result.tiles]
        return Evaluation(
            result=result, details=details, language=lang, minimum_token_match=config.minimum_token_match
        )

    def analyze(self, source_a: str, source_b: str, language: str | None = None) -> EnsembleResult:
        """
        Full comparison: structural evaluation blended with the legacy score.

        Args:
            source_a: First source text
            source_b: Second source text
            language: Language tag; detected from source_a if None

        Returns:
            EnsembleResult with scores, confidence, details and algorithm label
        """
        evaluation = self.evaluate(source_a, source_b, language)
        legacy = legacy_similarity(source_a, source_b)
        return combine(evaluation, legacy)
