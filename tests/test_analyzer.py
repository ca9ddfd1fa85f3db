"""
Unit tests for similarity/analyzer.py

End-to-end comparisons through tokenization, tiling and line mapping.
"""
import pytest

from similarity.analyzer import EngineCache, SimilarityAnalyzer, normalize_whitespace
from similarity.config import SimilarityConfig
from similarity.ensemble import MatchType
from conftest import ADD_FUNCTION, SUM_FUNCTION, FOR_LOOP, RENAMED_FOR_LOOP


# 3 structural tokens, plus a 12-token function that shares nothing beyond the first three
SHORT_FUNCTION = "int f(int a){return a;}"
LONGER_PROGRAM = "int f(int a){return a;}\nint g(){x=1;y=2;z=3;w=4;v=5;u=6;t=7;}"


class TestNormalizeWhitespace:
    """Tests for normalize_whitespace function."""

    def test_collapses_runs_and_strips_trailing(self):
        assert normalize_whitespace("int\t\ta  =  1;   ") == "int a = 1;"

    def test_keeps_lines_and_indentation(self):
        """Line count and indentation survive normalization."""
        source = "def f():\r\n    x  =  1\r\n\r\n    return x"
        assert normalize_whitespace(source) == "def f():\n    x = 1\n\n    return x"

    def test_bare_carriage_returns(self):
        assert normalize_whitespace("a\rb") == "a\nb"


class TestEvaluate:
    """Tests for SimilarityAnalyzer.evaluate."""

    def test_for_loop_matches_at_low_minimum(self):
        """Renamed loop is a full structural match when 4 tokens suffice."""
        analyzer = SimilarityAnalyzer(SimilarityConfig(minimum_token_match=4))
        evaluation = analyzer.evaluate(FOR_LOOP, RENAMED_FOR_LOOP, "cpp")
        assert evaluation.result.similarity == 1.0
        assert len(evaluation.result.tiles) == 1
        assert evaluation.result.tiles[0].length == 4

    def test_for_loop_below_minimum(self):
        """With a minimum above the sequence length nothing is scanned."""
        analyzer = SimilarityAnalyzer(SimilarityConfig(minimum_token_match=5))
        evaluation = analyzer.evaluate(FOR_LOOP, RENAMED_FOR_LOOP, "cpp")
        assert evaluation.result.similarity == 0.0
        assert evaluation.result.tiles == ()
        assert evaluation.details == []

    def test_details_suppressed_below_minimum_similarity(self):
        """Similarity is still reported when details are suppressed."""
        analyzer = SimilarityAnalyzer(SimilarityConfig(minimum_token_match=3, minimum_similarity=0.5))
        evaluation = analyzer.evaluate(SHORT_FUNCTION, LONGER_PROGRAM, "cpp")
        assert evaluation.result.similarity == pytest.approx(0.4)
        assert evaluation.details == []

    def test_details_kept_above_minimum_similarity(self):
        """The same pair keeps its details with a lower gate."""
        analyzer = SimilarityAnalyzer(SimilarityConfig(minimum_token_match=3, minimum_similarity=0.3))
        evaluation = analyzer.evaluate(SHORT_FUNCTION, LONGER_PROGRAM, "cpp")
        assert evaluation.result.similarity == pytest.approx(0.4)
        assert len(evaluation.details) == 1
        detail = evaluation.details[0]
        assert (detail.start_line_a, detail.end_line_a) == (1, 1)
        assert (detail.start_line_b, detail.end_line_b) == (1, 1)
        assert detail.fragment_b == SHORT_FUNCTION
        assert detail.match_type == MatchType.EXACT

    def test_structural_match_type(self, analyzer):
        """Renamed function is classified structural."""
        evaluation = analyzer.evaluate(ADD_FUNCTION, SUM_FUNCTION, "cpp")
        assert evaluation.result.similarity == 1.0
        assert [d.match_type for d in evaluation.details] == [MatchType.STRUCTURAL]
        assert evaluation.details[0].token_count == 3

    def test_exact_match_with_different_whitespace(self, compute_function, reindented_compute_function):
        """Whitespace-only differences give one exact span covering the function."""
        analyzer = SimilarityAnalyzer()
        evaluation = analyzer.evaluate(compute_function, reindented_compute_function, "cpp")
        assert evaluation.result.similarity == 1.0
        assert len(evaluation.details) == 1
        detail = evaluation.details[0]
        assert detail.match_type == MatchType.EXACT
        assert detail.similarity == 1.0
        assert detail.token_count == 21
        assert (detail.start_line_a, detail.end_line_a) == (1, 20)
        assert (detail.start_line_b, detail.end_line_b) == (3, 22)

    def test_both_empty(self, analyzer):
        evaluation = analyzer.evaluate("", "", "cpp")
        assert evaluation.result.similarity == 1.0
        assert evaluation.details == []

    def test_one_empty(self, analyzer):
        assert analyzer.evaluate(ADD_FUNCTION, "", "cpp").result.similarity == 0.0

    def test_language_detected_from_first_source(self, analyzer):
        """Without a language the first source decides."""
        source = "import os\ndef main():\n    print(True)\n"
        assert analyzer.evaluate(source, source).language == "python"

    def test_configured_language(self):
        """A language in the config is used when none is passed."""
        analyzer = SimilarityAnalyzer(SimilarityConfig(language="java"))
        assert analyzer.evaluate("x = 1;", "x = 1;").language == "java"

    def test_judge_language_id(self, analyzer):
        """Judge ids are normalized."""
        assert analyzer.evaluate(ADD_FUNCTION, SUM_FUNCTION, "cc.cc17o2").language == "cpp"

    def test_lexical_mode(self):
        """Lexical mode compares text, so renamed variables break the run."""
        config = SimilarityConfig(minimum_token_match=3, structural_only=False)
        evaluation = SimilarityAnalyzer(config).evaluate("int a = 1;", "int b = 1;", "cpp")
        assert evaluation.result.similarity == pytest.approx(0.6)
        assert evaluation.result.tiles[0].start_a == 2


class TestEngineCache:
    """Tests for engine reuse."""

    def test_engine_built_once_per_language(self, analyzer):
        analyzer.evaluate(ADD_FUNCTION, SUM_FUNCTION, "cpp")
        analyzer.evaluate(SUM_FUNCTION, ADD_FUNCTION, "cpp")
        assert len(analyzer.cache) == 1
        analyzer.evaluate("x = 1\n", "y = 2\n", "python")
        assert len(analyzer.cache) == 2

    def test_same_engine_returned(self):
        cache = EngineCache()
        config = SimilarityConfig(language="cpp")
        assert cache.get("cpp", config) is cache.get("cpp", config)

    def test_different_options_different_engine(self):
        cache = EngineCache()
        structural = cache.get("cpp", SimilarityConfig(language="cpp"))
        lexical = cache.get("cpp", SimilarityConfig(language="cpp", structural_only=False))
        assert structural is not lexical
        assert len(cache) == 2

    def test_shared_between_analyzers(self, small_config):
        cache = EngineCache()
        SimilarityAnalyzer(small_config, cache).evaluate(ADD_FUNCTION, SUM_FUNCTION, "cpp")
        SimilarityAnalyzer(small_config, cache).evaluate(ADD_FUNCTION, SUM_FUNCTION, "cpp")
        assert len(cache) == 1


class TestAnalyze:
    """Tests for SimilarityAnalyzer.analyze."""

    def test_structural_beats_legacy_for_renamed_code(self, analyzer):
        """Renaming hurts the text score but not the structural one."""
        result = analyzer.analyze(ADD_FUNCTION, SUM_FUNCTION, "cpp")
        assert result.structural_score == 1.0
        assert result.structural_score > result.legacy_score
        assert result.details[0].match_type == MatchType.STRUCTURAL

    def test_scores_in_range(self, analyzer):
        result = analyzer.analyze(ADD_FUNCTION, LONGER_PROGRAM, "cpp")
        for value in (result.legacy_score, result.structural_score, result.combined_score, result.confidence):
            assert 0.0 <= value <= 1.0

    def test_both_empty(self, analyzer):
        result = analyzer.analyze("", "", "cpp")
        assert result.combined_score == pytest.approx(1.0)
