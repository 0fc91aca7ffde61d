# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-09
# Updated: 2026-01-24
# Description: settings.py
# -----------------------------------------------------------------------------
import os
from typing import Tuple


def _env(name: str, default: str = "") -> str:
    """Read env var safely and strip whitespace."""
    return (os.getenv(name) or default).strip()


def _env_int(name: str, default: int) -> int:
    v = _env(name, "")
    if v == "":
        return default
    try:
        return int(v)
    except ValueError as e:
        raise RuntimeError(f"Env var {name} must be an int, got {v!r}") from e


def _env_float(name: str, default: float) -> float:
    v = _env(name, "")
    if v == "":
        return default
    try:
        return float(v)
    except ValueError as e:
        raise RuntimeError(f"Env var {name} must be a float, got {v!r}") from e


def _env_bool(name: str, default: bool) -> bool:
    v = _env(name, "")
    if v == "":
        return default
    v = v.lower()
    if v in ("1", "true", "t", "yes", "y", "on"):
        return True
    if v in ("0", "false", "f", "no", "n", "off"):
        return False
    raise RuntimeError(f"Env var {name} must be a boolean, got {v!r}")


# -----------------------------------------------------------------------------
# Embeddings
# -----------------------------------------------------------------------------
EMBEDDING_DIM = _env_int("QA_EMBEDDING_DIM", 1536)
EMBED_BATCH_SIZE = _env_int("QA_EMBED_BATCH_SIZE", 64)
EMBED_CONCURRENCY = _env_int("QA_EMBED_CONCURRENCY", 4)
EMBED_NORMALIZE = _env_bool("QA_EMBED_NORMALIZE", True)

# 1 == provider errors are not retried
EMBED_MAX_ATTEMPTS = _env_int("QA_EMBED_MAX_ATTEMPTS", 1)


# -----------------------------------------------------------------------------
# Vector index
# -----------------------------------------------------------------------------
VECTOR_TABLE = _env("QA_VECTOR_TABLE", "qa_embeddings")
STORE_BATCH_SIZE = _env_int("QA_STORE_BATCH_SIZE", 500)
TEXT_SEARCH_CONFIG = _env("QA_TEXT_SEARCH_CONFIG", "english")


# -----------------------------------------------------------------------------
# Retrieval / ranking
# -----------------------------------------------------------------------------
DEFAULT_TOP_K = _env_int("QA_DEFAULT_TOP_K", 5)

# floor for the vector leg when answering vs. plain similarity search
ANSWER_SIMILARITY_FLOOR = _env_float("QA_ANSWER_SIMILARITY_FLOOR", 0.7)
SEARCH_SIMILARITY_FLOOR = _env_float("QA_SEARCH_SIMILARITY_FLOOR", 0.5)

VECTOR_WEIGHT = _env_float("QA_VECTOR_WEIGHT", 0.7)
LEXICAL_WEIGHT = _env_float("QA_LEXICAL_WEIGHT", 0.3)


# -----------------------------------------------------------------------------
# Answer synthesis
# -----------------------------------------------------------------------------
COMPLETION_TEMPERATURE = _env_float("QA_COMPLETION_TEMPERATURE", 0.7)
COMPLETION_MAX_TOKENS = _env_int("QA_COMPLETION_MAX_TOKENS", 1200)
MAX_CONTEXT_CHARS = _env_int("QA_MAX_CONTEXT_CHARS", 12000)

SELF_TEST_QUERY = _env(
    "QA_SELF_TEST_QUERY",
    "What is an ADU and how can it be used for elder care?",
)


# -----------------------------------------------------------------------------
# Knowledge base sources
# -----------------------------------------------------------------------------
DATA_DIR = _env("QA_DATA_DIR", "data")

DEFAULT_SOURCE_FILES: Tuple[str, ...] = tuple(
    name.strip()
    for name in _env(
        "QA_SOURCE_FILES",
        "retirement_qa_results.csv,improved_qa_results_database.csv",
    ).split(",")
    if name.strip()
)


# -----------------------------------------------------------------------------
# Sanity checks (tunable)
# -----------------------------------------------------------------------------
if EMBEDDING_DIM <= 0:
    raise RuntimeError("QA_EMBEDDING_DIM must be positive")

if EMBED_BATCH_SIZE <= 0 or EMBED_CONCURRENCY <= 0 or EMBED_MAX_ATTEMPTS <= 0:
    raise RuntimeError("QA_EMBED_BATCH_SIZE, QA_EMBED_CONCURRENCY and QA_EMBED_MAX_ATTEMPTS must be positive")

if VECTOR_WEIGHT < 0 or LEXICAL_WEIGHT < 0:
    raise RuntimeError("QA_VECTOR_WEIGHT and QA_LEXICAL_WEIGHT must not be negative")
