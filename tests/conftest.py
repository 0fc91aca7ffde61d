# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-12
# Updated: 2026-01-27
# Description: conftest.py
# -----------------------------------------------------------------------------

import re
import sys
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

import numpy as np
import pytest

# add project root to sys.path
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from utility.errors import QAProviderError  # noqa: E402

# (topic, trigger words, weight); the ADU topic is weighted so short ADU
# questions land well above the answer similarity floor
TOPICS = (
    ("adu", ("adu", "adus", "dwelling", "accessory"), 3.0),
    ("elder", ("elder", "elderly", "aging", "senior", "seniors", "parent", "parents"), 1.0),
    ("care", ("care", "caregiver", "caregiving", "caring"), 1.0),
    ("finance", ("cost", "costs", "pay", "medicare", "insurance", "money", "budget"), 1.0),
    ("housing", ("home", "house", "housing", "living"), 1.0),
    ("health", ("dementia", "memory", "medication", "doctor", "sleep"), 1.0),
    ("legal", ("will", "trust", "attorney", "power", "estate"), 1.0),
)
BIAS = 0.1
_TOKEN_RE = re.compile(r"[a-z0-9]+")


class TopicEmbedder:
    """Deterministic keyword-topic embedder; no network."""

    def __init__(self, *, fail_on: Sequence[str] = ()):
        self.fail_on = tuple(fail_on)
        self.calls: List[int] = []

    @property
    def dimension(self) -> int:
        return len(TOPICS) + 1

    def _vector(self, text: str) -> List[float]:
        vec = np.zeros(self.dimension, dtype=np.float64)
        vec[-1] = BIAS
        for token in _TOKEN_RE.findall(text.lower()):
            for i, (_, words, weight) in enumerate(TOPICS):
                if token in words:
                    vec[i] += weight
        return (vec / np.linalg.norm(vec)).tolist()

    def embed(self, text: str) -> List[float]:
        return self.embed_batch([text])[0]

    def embed_batch(self, texts: Sequence[str]) -> List[List[float]]:
        texts = list(texts)
        self.calls.append(len(texts))
        for t in texts:
            if any(marker in t for marker in self.fail_on):
                raise QAProviderError("scripted embedding failure", operation="embeddings")
        return [self._vector(t) for t in texts]


class ScriptedChat:
    """CompletionProvider fake returning canned fragments, optionally failing mid-stream."""

    def __init__(
        self,
        fragments: Sequence[str] = ("Here is ", "some ", "guidance."),
        *,
        fail_after: Optional[int] = None,
        fail_complete: bool = False,
    ):
        self.fragments = list(fragments)
        self.fail_after = fail_after
        self.fail_complete = fail_complete
        self.prompts: List[str] = []
        self.pulled = 0
        self.closed = False

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.fail_complete:
            raise QAProviderError("scripted completion failure", operation="chat")
        return "".join(self.fragments)

    def complete_stream(self, prompt: str) -> Iterator[str]:
        self.prompts.append(prompt)
        return self._stream()

    def _stream(self) -> Iterator[str]:
        try:
            for i, fragment in enumerate(self.fragments):
                if self.fail_after is not None and i >= self.fail_after:
                    raise QAProviderError("scripted stream failure", operation="chat_stream")
                self.pulled += 1
                yield fragment
        finally:
            self.closed = True


ADU_RECORD = {"question": "What is an ADU?", "answer": "An ADU is a small secondary dwelling."}

UNRELATED_RECORDS = [
    {"question": "How does Medicare pay for home health care?",
     "answer": "Medicare covers some home health costs when a doctor orders care."},
    {"question": "What is a durable power of attorney?",
     "answer": "It lets a trusted person make financial decisions if you cannot."},
    {"question": "How can I help a parent with dementia sleep better?",
     "answer": "Keep a steady routine, limit naps and reduce evening noise."},
    {"question": "Should I set up a living trust?",
     "answer": "A trust can keep an estate out of probate; ask an estate attorney."},
    {"question": "How do I budget for respite services?",
     "answer": "Compare adult day programs and in-home respite rates in your area."},
]


@pytest.fixture
def embedder() -> TopicEmbedder:
    return TopicEmbedder()


@pytest.fixture
def chat() -> ScriptedChat:
    return ScriptedChat()


@pytest.fixture
def memory_store(embedder):
    from vectorstore.MemoryQAVectorStore import MemoryQAVectorStore

    return MemoryQAVectorStore(embedding_dim=embedder.dimension)


@pytest.fixture
def ingest_service(memory_store, embedder):
    from services.QAIngestService import QAIngestService

    return QAIngestService(store=memory_store, embedder=embedder, batch_size=2, concurrency=2)


@pytest.fixture
def query_service(memory_store, embedder):
    from ranking.QAHybridRanker import QAHybridRanker
    from services.QAQueryService import QAQueryService

    return QAQueryService(embedder=embedder, ranker=QAHybridRanker(memory_store))


@pytest.fixture
def answer_service(query_service, chat):
    from services.QAAnswerService import QAAnswerService

    return QAAnswerService(query_service=query_service, completion=chat)
