"""
Views over an EnsembleResult for people reading the outcome.

Nothing here computes new similarity figures; both views are derived
from the result they are given.
"""
from dataclasses import dataclass, field

from .ensemble import (
    EnsembleResult,
    MatchType,
    QualityTier,
    is_suspicious,
    quality_tier,
    recommendations,
)
from .tiling import ComparisonResult


@dataclass(frozen=True)
class DetailedReport:
    """Everything a reviewer needs about one pair."""
    result: EnsembleResult
    tier: QualityTier
    suspicious: bool
    recommendations: list[str] = field(default_factory=list)
    comparison: ComparisonResult | None = None


def summary_text(result: EnsembleResult) -> str:
    """
    One-paragraph plain-text summary.

    Examples:
        >>> from similarity.ensemble import EnsembleResult
        >>> print(summary_text(EnsembleResult(0.5, 0.5, 0.5, 0.42)))
        Similarity: 50.0% (structural 50.0%, legacy 50.0%)
        Confidence: 42.0% (low), algorithm: hybrid
        Similar segments: 0
    """
    counts = {match_type: 0 for match_type in MatchType}
    for detail in result.details:
        counts[detail.match_type] += 1

    lines = [
        f"Similarity: {result.combined_score:.1%} "
        f"(structural {result.structural_score:.1%}, legacy {result.legacy_score:.1%})",
        f"Confidence: {result.confidence:.1%} ({quality_tier(result).value}), "
        f"algorithm: {result.algorithm.value}",
        f"Similar segments: {len(result.details)}",
    ]
    if result.details:
        lines[-1] += " (" + ", ".join(
            f"{counts[t]} {t.value}" for t in MatchType if counts[t]
        ) + ")"
    if is_suspicious(result):
        lines.append("Suspicious: yes")
    return "\n".join(lines)


def detailed_report(result: EnsembleResult) -> DetailedReport:
    """Quality tier, suspicious flag and recommendations for a result."""
    return DetailedReport(
        result=result,
        tier=quality_tier(result),
        suspicious=is_suspicious(result),
        recommendations=recommendations(result),
        comparison=result.comparison,
    )
