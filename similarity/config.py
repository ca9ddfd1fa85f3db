"""
Configuration for similarity checks.

SimilarityConfig is an immutable pydantic model. It can be built directly,
from environment variables, or from the plagiarism section of a lab in a
course YAML file:

    course:
      labs:
        "2":
          plagiarism:
            language: cpp
            minimum-token-match: 9
            minimum-similarity: 0.1
"""
import logging
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

load_dotenv()

DEFAULT_LANGUAGE = "cpp"
DEFAULT_MINIMUM_TOKEN_MATCH = 9
DEFAULT_MINIMUM_SIMILARITY = 0.1

# Course YAML keys -> SimilarityConfig fields
YAML_KEYS = {
    "language": "language",
    "minimum-token-match": "minimum_token_match",
    "minimum-similarity": "minimum_similarity",
    "ignore-case": "ignore_case",
    "ignore-comments": "ignore_comments",
    "normalize-whitespace": "normalize_whitespace",
    "structural-only": "structural_only",
}


class InvalidConfigurationError(ValueError):
    """Raised when similarity options are rejected at construction time."""


class SimilarityConfig(BaseModel):
    """
    Options for one tokenizer/matcher pair.

    Rejected options raise InvalidConfigurationError whether the config is
    built directly or through create().
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    language: str | None = None                    # None = detect from the first source
    minimum_token_match: int = Field(default=DEFAULT_MINIMUM_TOKEN_MATCH, ge=1)
    minimum_similarity: float = Field(default=DEFAULT_MINIMUM_SIMILARITY, ge=0.0, le=1.0)
    ignore_case: bool = False
    ignore_comments: bool = True
    normalize_whitespace: bool = True
    structural_only: bool = True                   # False = lexical tokens, kind+text equality

    def __init__(self, **options: Any):
        try:
            super().__init__(**options)
        except ValidationError as e:
            raise InvalidConfigurationError(f"Invalid configuration: {e}") from e

    @classmethod
    def create(cls, **options: Any) -> "SimilarityConfig":
        """
        Build a config from keyword options.

        Examples:
            >>> SimilarityConfig.create(minimum_token_match=5).minimum_token_match
            5
        """
        return cls(**options)

    def for_language(self, language: str) -> "SimilarityConfig":
        """Return a copy bound to a concrete language."""
        if self.language == language:
            return self
        return self.model_copy(update={"language": language})


def default_language() -> str:
    """Fallback language for detection, from SIMILARITY_DEFAULT_LANGUAGE."""
    return os.getenv("SIMILARITY_DEFAULT_LANGUAGE", DEFAULT_LANGUAGE).strip().lower() or DEFAULT_LANGUAGE


def config_from_env(**overrides: Any) -> SimilarityConfig:
    """
    Build a config from environment variables.

    Reads SIMILARITY_MIN_TOKEN_MATCH and SIMILARITY_MIN_SIMILARITY;
    keyword overrides win over the environment.

    Raises:
        InvalidConfigurationError: If a variable is not a number or out of range
    """
    options: dict[str, Any] = {}
    env_map = {
        "SIMILARITY_MIN_TOKEN_MATCH": ("minimum_token_match", int),
        "SIMILARITY_MIN_SIMILARITY": ("minimum_similarity", float),
    }
    for var, (field_name, convert) in env_map.items():
        raw = os.getenv(var)
        if raw is None or not raw.strip():
            continue
        try:
            options[field_name] = convert(raw.strip())
        except ValueError as e:
            raise InvalidConfigurationError(f"Invalid configuration: {var}={raw!r}") from e

    options.update(overrides)
    return SimilarityConfig.create(**options)


def load_course_config(path: str | Path) -> dict[str, Any]:
    """
    Read a course YAML file.

    Raises:
        InvalidConfigurationError: If the file is not valid YAML or not a mapping
    """
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidConfigurationError(f"Invalid configuration: cannot parse {path}: {e}") from e

    if not isinstance(data, dict):
        raise InvalidConfigurationError(f"Invalid configuration: {path} is not a mapping")
    return data


def load_lab_config(course_config: dict[str, Any], lab_id: str) -> SimilarityConfig:
    """
    Build a SimilarityConfig from a lab's plagiarism section.

    Labs are looked up under course.labs (course files) or labs (flattened
    course info). A lab may be referenced by its key or its short-name.

    Args:
        course_config: Parsed course YAML
        lab_id: Lab key or short-name

    Returns:
        SimilarityConfig with the lab's options applied over the defaults

    Raises:
        InvalidConfigurationError: If the lab is missing or its options are invalid
    """
    labs = course_config.get("course", {}).get("labs") or course_config.get("labs") or {}

    lab_config = None
    for key, value in labs.items():
        if str(key) == str(lab_id) or (isinstance(value, dict) and value.get("short-name") == lab_id):
            lab_config = value
            break

    if lab_config is None:
        raise InvalidConfigurationError(f"Invalid configuration: lab '{lab_id}' not found")

    section = lab_config.get("plagiarism") or {}
    if not isinstance(section, dict):
        raise InvalidConfigurationError(
            f"Invalid configuration: plagiarism section of lab '{lab_id}' must be a mapping"
        )

    options = {field: section[key] for key, field in YAML_KEYS.items() if key in section}
    logger.debug(f"Lab {lab_id} similarity options: {options}")
    return SimilarityConfig.create(**options)
