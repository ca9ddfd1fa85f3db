"""
Ensemble scoring and match classification.

Blends the structural tiling score with the whole-text legacy score,
estimates how much the blended figure can be trusted and classifies
every matched span. Everything here is a pure function of its inputs.
"""
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from .config import DEFAULT_MINIMUM_TOKEN_MATCH
from .tiling import ComparisonResult

if TYPE_CHECKING:
    from .analyzer import Evaluation

# Spans longer than this many tokens that are textually identical are a strong signal
LONG_EXACT_SPAN = 20
# More spans than this deserve a closer look
MANY_SPANS = 10

_WHITESPACE_RE = re.compile(r"\s+")
_IDENTIFIER_RE = re.compile(r"\b[a-zA-Z_][a-zA-Z0-9_]*\b")
_DIGITS_RE = re.compile(r"\d+")


class MatchType(Enum):
    """How closely two matched fragments agree as text."""
    EXACT = "exact"            # Same text once whitespace is normalized
    STRUCTURAL = "structural"  # Same text once names and numbers are masked
    SEMANTIC = "semantic"      # Same token shape, different text


class Algorithm(Enum):
    """Which signal the combiner considers most reliable. Informational only."""
    LEGACY = "legacy"
    STRUCTURAL = "structural"
    HYBRID = "hybrid"


class QualityTier(Enum):
    """Confidence bucket for reports."""
    HIGH = "high"      # confidence >= 0.8
    MEDIUM = "medium"  # confidence >= 0.5
    LOW = "low"


@dataclass(frozen=True)
class SimilarityDetail:
    """A tile projected onto source lines (1-based, inclusive)."""
    start_line_a: int
    end_line_a: int
    start_line_b: int
    end_line_b: int
    fragment_a: str
    fragment_b: str
    match_type: MatchType
    token_count: int
    similarity: float = 1.0  # A tile is a run of equal tokens


@dataclass(frozen=True)
class EnsembleResult:
    """Blended outcome of one comparison."""
    legacy_score: float
    structural_score: float
    combined_score: float
    confidence: float
    details: list[SimilarityDetail] = field(default_factory=list)
    algorithm: Algorithm = Algorithm.HYBRID
    comparison: ComparisonResult | None = None
    language: str = ""
    minimum_token_match: int = DEFAULT_MINIMUM_TOKEN_MATCH


def normalize_text(code: str) -> str:
    """Collapse every whitespace run to one space."""
    return _WHITESPACE_RE.sub(" ", code).strip()


def normalize_structure(code: str) -> str:
    """
    Mask identifiers and numbers so only the shape of the text remains.

    Examples:
        >>> normalize_structure("int add(int a, int b) { return a + 1; }")
        'VAR VAR(VAR VAR, VAR VAR) { VAR VAR + NUM; }'
    """
    code = _IDENTIFIER_RE.sub("VAR", code)
    code = _DIGITS_RE.sub("NUM", code)
    return normalize_text(code)


def classify_match_type(fragment_a: str, fragment_b: str) -> MatchType:
    """
    Classify a matched span by comparing its two fragments as text.

    Examples:
        >>> classify_match_type("a = 1;", "a  =  1;")
        <MatchType.EXACT: 'exact'>
        >>> classify_match_type("a = 1;", "b = 2;")
        <MatchType.STRUCTURAL: 'structural'>
        >>> classify_match_type("a = 1;", "b = f(2);")
        <MatchType.SEMANTIC: 'semantic'>
    """
    if normalize_text(fragment_a) == normalize_text(fragment_b):
        return MatchType.EXACT
    if normalize_structure(fragment_a) == normalize_structure(fragment_b):
        return MatchType.STRUCTURAL
    return MatchType.SEMANTIC


def structural_weight(span_count: int) -> float:
    """Weight of the structural score; grows with the number of matched spans."""
    return min(0.7, 0.3 + 0.1 * span_count)


def combined_score(legacy: float, structural: float, span_count: int) -> float:
    """Weighted average of the two signals."""
    weight = structural_weight(span_count)
    return legacy * (1 - weight) + structural * weight


def calculate_confidence(legacy: float, structural: float, result: ComparisonResult) -> float:
    """
    Estimate how trustworthy the blended score is.

    Agreement between the signals and token coverage weigh 0.4 each,
    the size of the inputs 0.2 (saturating at 100 tokens).

    Returns:
        Confidence in [0, 1]
    """
    total = result.total_tokens_a + result.total_tokens_b
    agreement = 1 - abs(legacy - structural)
    coverage = 2 * result.matched_token_count / total if total else 0.0
    length_factor = min(1.0, total / 100)

    confidence = 0.4 * agreement + 0.4 * coverage + 0.2 * length_factor
    return max(0.0, min(1.0, confidence))


def select_algorithm(legacy: float, structural: float, confidence: float) -> Algorithm:
    """
    Label the signal the combiner trusts most.

    Examples:
        >>> select_algorithm(0.2, 0.9, 0.5)
        <Algorithm.STRUCTURAL: 'structural'>
        >>> select_algorithm(0.5, 0.55, 0.5)
        <Algorithm.HYBRID: 'hybrid'>
    """
    if confidence > 0.8:
        return Algorithm.HYBRID
    if abs(legacy - structural) < 0.1:
        return Algorithm.HYBRID
    if structural > legacy:
        return Algorithm.STRUCTURAL
    return Algorithm.LEGACY


def combine(evaluation: "Evaluation", legacy_score: float) -> EnsembleResult:
    """
    Blend an evaluation with the legacy score.

    Args:
        evaluation: Output of SimilarityAnalyzer.evaluate
        legacy_score: Whole-text similarity of the same pair

    Returns:
        EnsembleResult carrying both signals, the blend and its confidence
    """
    result = evaluation.result
    structural = result.similarity
    details = list(evaluation.details)

    combined = combined_score(legacy_score, structural, len(details))
    confidence = calculate_confidence(legacy_score, structural, result)

    return EnsembleResult(
        legacy_score=legacy_score,
        structural_score=structural,
        combined_score=combined,
        confidence=confidence,
        details=details,
        algorithm=select_algorithm(legacy_score, structural, confidence),
        comparison=result,
        language=evaluation.language,
        minimum_token_match=evaluation.minimum_token_match,
    )


def is_suspicious(result: EnsembleResult) -> bool:
    """
    Flag a pair for review.

    A pair is suspicious when any of these hold:
    - high blended score backed by reasonable confidence;
    - a long span that is identical as text;
    - most of many spans are short, which is what piecewise copying
      with edits in between looks like.
    """
    if result.combined_score >= 0.8 and result.confidence >= 0.6:
        return True

    if any(d.match_type == MatchType.EXACT and d.token_count > LONG_EXACT_SPAN for d in result.details):
        return True

    if len(result.details) >= 5 and result.combined_score >= 0.5:
        tiny = [d for d in result.details if d.token_count < 2 * result.minimum_token_match]
        if len(tiny) > len(result.details) / 2:
            return True

    return False


def quality_tier(result: EnsembleResult) -> QualityTier:
    """Bucket the confidence of a result."""
    if result.confidence >= 0.8:
        return QualityTier.HIGH
    if result.confidence >= 0.5:
        return QualityTier.MEDIUM
    return QualityTier.LOW


def recommendations(result: EnsembleResult) -> list[str]:
    """Human-readable hints for whoever reviews the pair."""
    hints = []

    if result.confidence < 0.5:
        hints.append("Low confidence result, manual review recommended")

    if result.structural_score > 0.8 and result.legacy_score < 0.5:
        hints.append("High structural similarity with different text, code may have been refactored")

    if len(result.details) > MANY_SPANS:
        hints.append("Many similar segments detected, detailed analysis recommended")

    if any(d.match_type == MatchType.EXACT and d.token_count > LONG_EXACT_SPAN for d in result.details):
        hints.append("Long identical code segment detected, highly suspicious")

    return hints


def find_similar_segments(result: EnsembleResult, threshold: float = 0.4) -> list[SimilarityDetail]:
    """
    Details whose span similarity reaches the threshold.

    Raises:
        ValueError: If threshold is outside [0, 1]
    """
    if threshold < 0 or threshold > 1:
        raise ValueError("Threshold must be between 0 and 1")
    return [d for d in result.details if d.similarity >= threshold]
