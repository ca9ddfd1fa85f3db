"""
Unit tests for similarity/batch.py

All-pairs checks over small submission sets.
"""
import pytest

from similarity.analyzer import SimilarityAnalyzer
from similarity.batch import (
    LanguageGroupResult,
    PlagiarismDetectionService,
    Submission,
    group_submissions,
)
from similarity.config import SimilarityConfig
from conftest import ADD_FUNCTION, SUM_FUNCTION


@pytest.fixture
def service():
    return PlagiarismDetectionService(SimilarityAnalyzer(SimilarityConfig(minimum_token_match=3)))


@pytest.fixture
def submissions():
    return [
        Submission(id="s1", author="alice", code=ADD_FUNCTION, language="cc.cc17o2", problem_id="A"),
        Submission(id="s2", author="bob", code=SUM_FUNCTION, language="cc", problem_id="A"),
        Submission(id="s3", author="alice", code=ADD_FUNCTION, language="cc.cc14o2", problem_id="A"),
        Submission(id="s4", author="carol", code="def f(a):\n    return a\n", language="py.py3", problem_id="A"),
    ]


class TestGroupSubmissions:
    """Tests for group_submissions function."""

    def test_groups_by_problem_and_language(self, submissions):
        groups = group_submissions(submissions)
        assert list(groups) == [("A", "cpp"), ("A", "python")]
        assert [s.id for s in groups[("A", "cpp")]] == ["s1", "s2", "s3"]

    def test_problems_are_separate(self):
        subs = [
            Submission(id="1", author="a", code="", language="java", problem_id="A"),
            Submission(id="2", author="b", code="", language="java", problem_id="B"),
        ]
        assert len(group_submissions(subs)) == 2


class TestRunCheck:
    """Tests for PlagiarismDetectionService.run_check."""

    def test_pairs_and_groups(self, service, submissions):
        results = service.run_check(submissions)
        by_language = {r.language: r for r in results}

        cpp = by_language["cpp"]
        assert isinstance(cpp, LanguageGroupResult)
        assert cpp.language_name == "C++"
        assert cpp.submission_count == 3
        assert cpp.author_count == 2
        # s1/s3 share an author and are not compared
        assert {(p.submission_a, p.submission_b) for p in cpp.pairs} == {("s1", "s2"), ("s2", "s3")}

    def test_pair_contents(self, service, submissions):
        cpp = [r for r in service.run_check(submissions) if r.language == "cpp"][0]
        pair = cpp.pairs[0]
        assert pair.similarity > 0.8
        assert 0.0 <= pair.confidence <= 1.0
        assert pair.algorithm in ("legacy", "structural", "hybrid")
        assert len(pair.segments) == 1
        assert pair.segments[0].match_type == "structural"
        assert pair.segments[0].token_count == 3

    def test_single_submission_group_reported(self, service, submissions):
        """Groups with one submission still get a result."""
        python = [r for r in service.run_check(submissions) if r.language == "python"][0]
        assert python.submission_count == 1
        assert python.author_count == 1
        assert python.pairs == []

    def test_pairs_sorted_descending(self, service):
        subs = [
            Submission(id="a", author="u1", code=ADD_FUNCTION, language="cpp"),
            Submission(id="b", author="u2", code=SUM_FUNCTION, language="cpp"),
            Submission(id="c", author="u3", code=ADD_FUNCTION, language="cpp"),
        ]
        pairs = service.run_check(subs)[0].pairs
        similarities = [p.similarity for p in pairs]
        assert similarities == sorted(similarities, reverse=True)
        assert (pairs[0].submission_a, pairs[0].submission_b) == ("a", "c")

    def test_high_threshold_drops_pairs(self, service, submissions):
        cpp = [r for r in service.run_check(submissions, threshold=0.95) if r.language == "cpp"][0]
        assert cpp.pairs == []

    def test_results_kept(self, service, submissions):
        results = service.run_check(submissions)
        assert service.get_results() == results

    def test_results_serialize(self, service, submissions):
        """Results are plain pydantic models."""
        dumped = service.run_check(submissions)[0].model_dump()
        assert dumped["language"] == "cpp"
        assert dumped["pairs"][0]["segments"][0]["match_type"] == "structural"

    @pytest.mark.parametrize("threshold", [-0.1, 1.5, "high"])
    def test_invalid_threshold(self, service, submissions, threshold):
        with pytest.raises(ValueError):
            service.run_check(submissions, threshold=threshold)

    def test_empty_input(self, service):
        assert service.run_check([]) == []
