"""
Source code similarity engine.

This package compares pairs of program submissions and explains the result:
- tokens: Token model shared by the tokenizers
- config: Comparison options, YAML and environment loaders
- language: Language detection and language id helpers
- lexer: Lexical tokenizer (ordered pattern tables)
- structure: Structural tokenizer (C-family and Python rules)
- tiling: Greedy string tiling matcher
- legacy: Whole-text edit distance signal
- analyzer: Orchestrator mapping matches back to source lines
- ensemble: Score blending, confidence and match classification
- report: Summary text and detailed report views
- batch: All-pairs comparison over a submission set
- logs: Logging setup for applications
"""

from .tokens import (
    Token,
    TokenKind,
    TokenSequence,
    SemanticTag,
)

from .config import (
    SimilarityConfig,
    InvalidConfigurationError,
    config_from_env,
    load_course_config,
    load_lab_config,
)

from .language import (
    detect_language,
    normalize_language,
    language_display_name,
)

from .lexer import LexicalTokenizer

from .structure import StructuralTokenizer

from .tiling import (
    Tile,
    ComparisonResult,
    GreedyStringTiling,
)

from .legacy import legacy_similarity

from .analyzer import (
    SimilarityAnalyzer,
    EngineCache,
    Evaluation,
    normalize_whitespace,
)

from .ensemble import (
    MatchType,
    Algorithm,
    QualityTier,
    SimilarityDetail,
    EnsembleResult,
    combine,
    classify_match_type,
    select_algorithm,
    is_suspicious,
    quality_tier,
    recommendations,
    find_similar_segments,
)

from .report import (
    DetailedReport,
    summary_text,
    detailed_report,
)

from .batch import (
    Submission,
    SubmissionPair,
    LanguageGroupResult,
    PlagiarismDetectionService,
)

from .logs import setup_logging

__all__ = [
    # tokens
    "Token",
    "TokenKind",
    "TokenSequence",
    "SemanticTag",
    # config
    "SimilarityConfig",
    "InvalidConfigurationError",
    "config_from_env",
    "load_course_config",
    "load_lab_config",
    # language
    "detect_language",
    "normalize_language",
    "language_display_name",
    # tokenizers
    "LexicalTokenizer",
    "StructuralTokenizer",
    # tiling
    "Tile",
    "ComparisonResult",
    "GreedyStringTiling",
    # legacy
    "legacy_similarity",
    # analyzer
    "SimilarityAnalyzer",
    "EngineCache",
    "Evaluation",
    "normalize_whitespace",
    # ensemble
    "MatchType",
    "Algorithm",
    "QualityTier",
    "SimilarityDetail",
    "EnsembleResult",
    "combine",
    "classify_match_type",
    "select_algorithm",
    "is_suspicious",
    "quality_tier",
    "recommendations",
    "find_similar_segments",
    # report
    "DetailedReport",
    "summary_text",
    "detailed_report",
    # batch
    "Submission",
    "SubmissionPair",
    "LanguageGroupResult",
    "PlagiarismDetectionService",
    # logs
    "setup_logging",
]
