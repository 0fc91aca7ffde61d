# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-27
# Updated: 2026-01-24
# Description: QAAnswerService.py
# -----------------------------------------------------------------------------
import logging
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Sequence

import settings
from chat.CompletionProvider import CompletionProvider
from knowledge.RagTypes import (
    ContentEvent,
    ErrorEvent,
    MetadataEvent,
    RagResponse,
    SearchResult,
    StreamEvent,
)
from services.QAQueryService import QAQueryService
from utility.logging_utils import get_class_logger, preview

SYSTEM_PROMPT = (
    "You are a knowledgeable and empathetic expert on caregiving, including emotional support, medical "
    "resources, daily care strategies, legal and financial considerations, and community options for those "
    "caring for aging or dependent loved ones. Your goal is to provide practical, actionable guidance that "
    "helps users navigate their caregiving queries effectively.\n"
    "When responding to the user's query, always base your answer on the provided context from relevant "
    "community discussions or resources. If the context doesn't fully address the query, note any gaps and "
    "suggest general next steps without fabricating information.\n"
    "Structure your response to directly address common follow-up thoughts like: \"What do I do with this "
    "information? Who can help me? Who is likely to be involved? Where can I find these people or resources?\"\n"
    "Include the following elements in every response:\n"
    "1. Actionable Plan: Break down practical steps the user can take, tailored to the query and context. "
    "Make it step-by-step, realistic, and prioritized.\n"
    "2. Key Professionals and Stakeholders: Identify relevant experts or individuals who could assist, such as "
    "geriatric care managers (also known as Aging Life Care Professionals), elder law attorneys, healthcare "
    "providers, certified senior advisors, senior real estate specialists, or family members. Explain their "
    "roles briefly and who might be involved in the process (e.g., spouses, social workers, or support groups).\n"
    "3. Where to Find Help: Suggest reliable ways to locate these professionals, like through professional "
    "associations, local networks, or online directories. Provide links to helpful, non-commercial association "
    "websites (e.g., alz.org for The Alzheimer's Association, naela.org for the National Academy of Elder Law "
    "Attorneys, whereyoulivematters.org for finding senior living options from the American Seniors Housing "
    "Association, leadingage.org for Continuing Care Retirement Communities and Life Plan Communities, "
    "mylifesite.net as the authoritative consumer site on CCRCs and Life Plan Communities, or 55places.com for "
    "active adult and 55+ communities. For home care questions direct users to "
    "https://allianceforcareathome.org/find-a-provider/). Never mention or link to: caring.com, aplaceformom, "
    "oasissenioradvisors.com, seniorly.com, elderlifefinancial.com, silverassist.com, or familyassets.com.\n"
    "4. Experienced Perspective: Offer a general overview of how someone with real-world experience (e.g., a "
    "seasoned caregiver or caregiving professional) might approach and respond to the situation, drawing from "
    "common best practices in the context.\n"
    "Keep your tone supportive, clear, and encouraging. Be concise yet comprehensive, and cite specific parts of "
    "the context where relevant. Begin your answer with \"Hi there.\" as a greeting and end with a warm, "
    "empathetic closing."
)

NO_CONTEXT = "(no matching sources found)"

STREAM_ERROR_MESSAGE = "Failed to generate answer"


def calculate_confidence(results: Sequence[SearchResult]) -> float:
    """Mean fused score of the sources used, clamped to [0, 1]; 0 with no sources."""
    if not results:
        return 0.0
    avg = sum(r.score for r in results) / len(results)
    return min(max(avg, 0.0), 1.0)


@dataclass
class QAAnswerService:
    """
    Answer synthesis:
        - retrieves ranked chunks through QAQueryService
        - builds the grounded caregiving prompt
        - calls the completion provider, whole or streamed
        - reports a confidence from the fused scores of the sources used
    """

    query_service: QAQueryService
    completion: CompletionProvider
    top_k: int = settings.DEFAULT_TOP_K
    similarity_floor: float = settings.ANSWER_SIMILARITY_FLOOR
    max_context_chars: int = settings.MAX_CONTEXT_CHARS
    logger: logging.Logger | None = None

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)
        self.logger.info(
            "QAAnswerService initialised (top_k=%d floor=%.2f completion=%s)",
            self.top_k,
            self.similarity_floor,
            type(self.completion).__name__,
        )

    # ------------------------------------------------------------------ batch
    def answer(self, query: str) -> RagResponse:
        q = (query or "").strip()
        self.logger.info("answer: query='%s' (start)", preview(q))

        sources = self.fit_context(
            self.query_service.retrieve(q, top_k=self.top_k, similarity_floor=self.similarity_floor)
        )
        prompt = self.build_prompt(q, self.build_context(sources))
        confidence = calculate_confidence(sources)

        text = self.completion.complete(prompt)

        self.logger.info(
            "answer: sources=%d confidence=%.3f answer_chars=%d (done)",
            len(sources), confidence, len(text),
        )
        return RagResponse(answer=text, sources=sources, confidence=confidence, query=q)

    # -------------------------------------------------------------- streaming
    def answer_stream(
        self,
        query: str,
        *,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> Iterator[StreamEvent]:
        """
        Yields MetadataEvent first, then ContentEvents. Any failure becomes a
        single trailing ErrorEvent. Stopping iteration (or should_stop()
        returning True) ends the stream without further provider calls.
        """
        stopped = should_stop or (lambda: False)
        q = (query or "").strip()
        self.logger.info("answer_stream: query='%s' (start)", preview(q))

        if stopped():
            self.logger.info("answer_stream: stopped before retrieval")
            yield MetadataEvent(confidence=0.0, sources=[])
            return

        try:
            sources = self.fit_context(
                self.query_service.retrieve(q, top_k=self.top_k, similarity_floor=self.similarity_floor)
            )
        except Exception as e:
            self.logger.error("answer_stream: retrieval failed: %s", e, exc_info=True)
            # attribution must still arrive before the error
            yield MetadataEvent(confidence=0.0, sources=[])
            yield ErrorEvent(message=STREAM_ERROR_MESSAGE)
            return

        confidence = calculate_confidence(sources)
        yield MetadataEvent(confidence=confidence, sources=list(sources))

        if stopped():
            self.logger.info("answer_stream: cancelled before completion call")
            return

        emitted = 0
        fragments: Optional[Iterator[str]] = None
        try:
            prompt = self.build_prompt(q, self.build_context(sources))
            fragments = self.completion.complete_stream(prompt)
            for fragment in fragments:
                if stopped():
                    self.logger.info("answer_stream: cancelled after %d fragment(s)", emitted)
                    return
                if not fragment:
                    continue
                emitted += 1
                yield ContentEvent(content=fragment)
        except Exception as e:
            self.logger.error("answer_stream: completion failed after %d fragment(s): %s", emitted, e, exc_info=True)
            yield ErrorEvent(message=STREAM_ERROR_MESSAGE)
            return
        finally:
            close = getattr(fragments, "close", None)
            if callable(close):
                close()

        self.logger.info("answer_stream: sources=%d fragments=%d (done)", len(sources), emitted)

    # --------------------------------------------------------------- prompting
    def fit_context(self, results: Sequence[SearchResult]) -> List[SearchResult]:
        """Leading results whose sections fit max_context_chars; the first is always kept."""
        used: List[SearchResult] = []
        total = 0
        for i, result in enumerate(results, start=1):
            size = len(self._section(i, result))
            if used and total + size > self.max_context_chars:
                self.logger.warning(
                    "fit_context: dropping %d source(s) past %d chars (limit=%d)",
                    len(results) - len(used),
                    total,
                    self.max_context_chars,
                )
                break
            used.append(result)
            total += size
        return used

    def build_context(self, results: Sequence[SearchResult]) -> str:
        """Labelled section per ranked result: source label, original question, chunk text."""
        if not results:
            return NO_CONTEXT
        return "\n\n".join(self._section(i, r) for i, r in enumerate(results, start=1))

    @staticmethod
    def _section(index: int, result: SearchResult) -> str:
        return (
            f"Source {index} ({result.source}):\n"
            f"Question: {result.chunk.metadata.question}\n"
            f"Content: {result.chunk.text}\n"
            f"---"
        )

    @staticmethod
    def build_prompt(query: str, context: str) -> str:
        return f"{SYSTEM_PROMPT}\nContext: {context}\nUser Query: {query}\n"
