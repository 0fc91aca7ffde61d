# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-20
# Description: KnowledgeRecord
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class KnowledgeRecord:
    """One cleaned question/answer pair from the caregiving knowledge base."""

    id: int
    question: str
    answer: str
    source: str
    category: Optional[str] = None

    def combined_text(self) -> str:
        """Question and answer as a single retrievable passage."""
        return f"Question: {self.question}\n\nAnswer: {self.answer}"
