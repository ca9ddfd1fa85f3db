"""
All-pairs comparison over a set of submissions.

Submissions are grouped by problem and language, every pair within a
group written by different authors is analyzed, and pairs scoring above
the threshold are kept with their similar segments. Results are pydantic
models so callers can serialize them as they are.
"""
import logging
from collections import defaultdict

from pydantic import BaseModel, Field

from .analyzer import SimilarityAnalyzer
from .ensemble import EnsembleResult, find_similar_segments
from .language import language_display_name, normalize_language

logger = logging.getLogger(__name__)

DEFAULT_PAIR_THRESHOLD = 0.3
PROGRESS_EVERY = 10


class Submission(BaseModel):
    """One submitted source file."""
    id: str
    author: str
    code: str
    language: str                        # Judge language id, e.g. cc.cc17o2 or py.py3
    problem_id: str | None = None


class SegmentMatch(BaseModel):
    """Serializable view of a similar segment."""
    start_line_a: int
    end_line_a: int
    start_line_b: int
    end_line_b: int
    similarity: float
    match_type: str                      # exact / structural / semantic
    token_count: int


class SubmissionPair(BaseModel):
    """Two submissions whose combined score exceeded the threshold."""
    submission_a: str
    submission_b: str
    author_a: str
    author_b: str
    similarity: float                    # Combined score
    confidence: float
    algorithm: str
    segments: list[SegmentMatch] = Field(default_factory=list)


class LanguageGroupResult(BaseModel):
    """Outcome for one (problem, language) group, present even without pairs."""
    problem_id: str | None = None
    language: str
    language_name: str
    submission_count: int
    author_count: int
    pairs: list[SubmissionPair] = Field(default_factory=list)


def group_submissions(
    submissions: list[Submission],
) -> dict[tuple[str | None, str], list[Submission]]:
    """Group submissions by problem and canonical language, keeping input order."""
    groups: dict[tuple[str | None, str], list[Submission]] = defaultdict(list)
    for submission in submissions:
        groups[(submission.problem_id, normalize_language(submission.language))].append(submission)
    return dict(groups)


def _pair_from_result(a: Submission, b: Submission, result: EnsembleResult) -> SubmissionPair:
    segments = [
        SegmentMatch(
            start_line_a=d.start_line_a,
            end_line_a=d.end_line_a,
            start_line_b=d.start_line_b,
            end_line_b=d.end_line_b,
            similarity=d.similarity,
            match_type=d.match_type.value,
            token_count=d.token_count,
        )
        for d in find_similar_segments(result)
    ]
    return SubmissionPair(
        submission_a=a.id,
        submission_b=b.id,
        author_a=a.author,
        author_b=b.author,
        similarity=result.combined_score,
        confidence=result.confidence,
        algorithm=result.algorithm.value,
        segments=segments,
    )


class PlagiarismDetectionService:
    """Runs similarity checks over a collection of submissions."""

    def __init__(self, analyzer: SimilarityAnalyzer | None = None):
        self.analyzer = analyzer or SimilarityAnalyzer()
        self.results: list[LanguageGroupResult] = []

    def get_results(self) -> list[LanguageGroupResult]:
        """Results of the last run."""
        return self.results

    @staticmethod
    def _validate_threshold(threshold: float) -> float:
        if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
            raise ValueError("Threshold must be a number")
        if threshold < 0 or threshold > 1:
            raise ValueError("Threshold must be between 0 and 1")
        return float(threshold)

    def compare_group(
        self,
        submissions: list[Submission],
        language: str,
        threshold: float,
    ) -> list[SubmissionPair]:
        """
        Compare every pair in a group.

        Pairs by the same author are skipped. A pair is kept when its
        combined score is strictly above the threshold.

        Returns:
            Kept pairs sorted by similarity, highest first
        """
        pairs: list[SubmissionPair] = []
        total = len(submissions) * (len(submissions) - 1) // 2
        compared = 0

        for i in range(len(submissions)):
            for j in range(i + 1, len(submissions)):
                a = submissions[i]
                b = submissions[j]
                if a.author == b.author:
                    continue

                compared += 1
                if compared % PROGRESS_EVERY == 0:
                    logger.info(f"Compared {compared}/{total} {language} pairs")

                result = self.analyzer.analyze(a.code, b.code, language)
                if result.combined_score > threshold:
                    pairs.append(_pair_from_result(a, b, result))

        pairs.sort(key=lambda pair: pair.similarity, reverse=True)
        return pairs

    def run_check(
        self,
        submissions: list[Submission],
        threshold: float = DEFAULT_PAIR_THRESHOLD,
    ) -> list[LanguageGroupResult]:
        """
        Check a set of submissions.

        Args:
            submissions: Submissions to compare
            threshold: Combined score a pair must exceed to be reported (0-1)

        Returns:
            One LanguageGroupResult per (problem, language) group

        Raises:
            ValueError: If threshold is not a number in [0, 1]
        """
        threshold = self._validate_threshold(threshold)
        results = []

        for (problem_id, language), group in group_submissions(submissions).items():
            logger.info(f"Checking {len(group)} {language} submissions (problem {problem_id})")
            pairs = self.compare_group(group, language, threshold) if len(group) >= 2 else []
            logger.info(f"Found {len(pairs)} similar {language} pairs (problem {problem_id})")

            results.append(LanguageGroupResult(
                problem_id=problem_id,
                language=language,
                language_name=language_display_name(language),
                submission_count=len(group),
                author_count=len({s.author for s in group}),
                pairs=pairs,
            ))

        self.results = results
        return results
