"""
Unit tests for similarity/language.py
"""
import pytest

from similarity.language import (
    detect_language,
    indicator_scores,
    language_display_name,
    normalize_language,
)


class TestDetectLanguage:
    """Tests for detect_language function."""

    def test_cpp(self):
        """Includes, std:: and streams point to C++."""
        source = "#include <iostream>\nint main() { std::cout << 1; }"
        assert detect_language(source) == "cpp"

    def test_java(self):
        """Class boilerplate points to Java."""
        source = (
            "public class Main {\n"
            "    public static void main(String[] args) {\n"
            "        System.out.println(1);\n"
            "    }\n"
            "}"
        )
        assert detect_language(source) == "java"

    def test_python(self):
        """def, import and print point to Python."""
        source = "import os\ndef main():\n    print(True)\n"
        assert detect_language(source) == "python"

    def test_javascript(self):
        """const, function and console.log point to JavaScript."""
        source = "const x = 1;\nfunction f(a) { console.log(a); }"
        assert detect_language(source) == "javascript"

    def test_empty_source_uses_default(self, clean_env):
        """Empty input resolves to the default."""
        assert detect_language("") == "cpp"
        assert detect_language("", default="java") == "java"

    def test_no_indicators_uses_default(self, clean_env):
        """Plain text resolves to the default."""
        assert detect_language("hello world") == "cpp"

    def test_tie_uses_default(self, clean_env):
        """Equal scores at the top resolve to the default."""
        source = "print(x)\nconsole.log(x)"
        scores = indicator_scores(source)
        assert scores["python"] == scores["javascript"] == 1
        assert detect_language(source) == "cpp"

    def test_default_from_environment(self, clean_env, monkeypatch):
        """SIMILARITY_DEFAULT_LANGUAGE changes the fallback."""
        monkeypatch.setenv("SIMILARITY_DEFAULT_LANGUAGE", "python")
        assert detect_language("hello world") == "python"


class TestNormalizeLanguage:
    """Tests for judge language id normalization."""

    @pytest.mark.parametrize("lang_id,expected", [
        ("cc.cc17o2", "cpp"),
        ("cc", "cpp"),
        ("C++", "cpp"),
        ("c", "c"),
        ("java", "java"),
        ("py.py3", "python"),
        ("py", "python"),
        ("js", "javascript"),
        ("Rust", "rust"),
    ])
    def test_normalize(self, lang_id, expected):
        """Judge ids map to canonical tags."""
        assert normalize_language(lang_id) == expected


class TestDisplayName:
    """Tests for language_display_name function."""

    def test_known(self):
        assert language_display_name("cpp") == "C++"
        assert language_display_name("javascript") == "JavaScript"

    def test_unknown_is_upper_cased(self):
        assert language_display_name("go") == "GO"
