"""
Pytest configuration and shared fixtures for testing.
"""
import logging
import os
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from similarity.analyzer import SimilarityAnalyzer
from similarity.config import SimilarityConfig
from similarity.tokens import TokenKind, structural_token


ADD_FUNCTION = "int add(int a,int b){return a+b;}"
SUM_FUNCTION = "int sum(int x,int y){return x+y;}"

FOR_LOOP = "for(int i=0;i<n;i++){sum+=i;}"
RENAMED_FOR_LOOP = "for(int j=0;j<m;j++){total+=j;}"

# 20 lines, 21 structural tokens
COMPUTE_FUNCTION = """int compute(int n) {
    int total = 0;
    int count = 0;
    for (int i = 0; i < n; i++) {
        if (i % 2 == 0) {
            total += i;
        } else {
            total -= 1;
        }
        count++;
    }
    while (count > 0) {
        count--;
        total = total * 2;
    }
    if (total > 100) {
        return 100;
    }
    return total;
}"""


def kinds(tokens):
    """Token kinds as marker names."""
    return [t.kind.value for t in tokens]


def make_tokens(*names):
    """Build a structural token sequence from kind names."""
    return tuple(structural_token(TokenKind[name], line=i + 1) for i, name in enumerate(names))


@pytest.fixture
def small_config():
    """Config whose minimum match is small enough for one-line programs."""
    return SimilarityConfig(minimum_token_match=3)


@pytest.fixture
def analyzer(small_config):
    """Analyzer with a small minimum match."""
    return SimilarityAnalyzer(small_config)


@pytest.fixture
def compute_function():
    """A 20-line C++ function."""
    return COMPUTE_FUNCTION


@pytest.fixture
def reindented_compute_function():
    """The same function with different surrounding whitespace, two lines lower."""
    lines = COMPUTE_FUNCTION.split("\n")
    reindented = [line.replace("    ", "\t") + "   " for line in lines]
    return "\n\n" + "\r\n".join(reindented)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove similarity environment variables."""
    for var in ("SIMILARITY_DEFAULT_LANGUAGE", "SIMILARITY_MIN_TOKEN_MATCH", "SIMILARITY_MIN_SIMILARITY"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def restore_root_logger():
    """Restore root logger handlers and level after a test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
