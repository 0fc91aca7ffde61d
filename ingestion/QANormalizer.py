# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-21
# Description: QANormalizer
# -----------------------------------------------------------------------------
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Set, Union

from ingestion.QARecordLoader import SOURCE_FIELD
from knowledge.KnowledgeRecord import KnowledgeRecord
from utility.logging_utils import get_class_logger

# Header aliases, matched case-insensitively
QUESTION_FIELDS = ("question", "q")
ANSWER_FIELDS = ("answer", "a", "response")
CATEGORY_FIELDS = ("category", "section", "topic")
ID_FIELDS = ("id", "qa_id")
SOURCE_FIELDS = (SOURCE_FIELD, "source")

_WS_RE = re.compile(r"\s+")
_NON_WORD_RE = re.compile(r"[^\w\s]")

RawRecord = Union[Mapping[str, Any], KnowledgeRecord]


def clean_text(value: Any) -> str:
    if value is None:
        return ""
    text = str(value).replace("\r\n", "\n").replace("\r", "\n").replace("\t", " ")
    return _WS_RE.sub(" ", text).strip()


def dedup_key(question: str) -> str:
    key = _NON_WORD_RE.sub("", question.lower())
    return _WS_RE.sub(" ", key).strip()


def _lookup(row: Mapping[str, Any], names: Iterable[str]) -> Any:
    lowered = {str(k).strip().lower(): v for k, v in row.items()}
    for name in names:
        value = lowered.get(name)
        if value not in (None, ""):
            return value
    return None


def _parse_id(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


@dataclass
class NormalizationResult:
    records: List[KnowledgeRecord] = field(default_factory=list)
    skipped_invalid: int = 0
    skipped_duplicate: int = 0


class QANormalizer:
    """
    Cleans raw question/answer rows into KnowledgeRecords.

    - whitespace cleanup on every text field
    - rows missing a question or an answer are skipped and counted
    - duplicates by normalised question are dropped, first occurrence wins

    No I/O and no exceptions for bad rows. Running it over its own output
    returns the same records.
    """

    def __init__(self, *, default_source: str = "Unknown", logger: logging.Logger | None = None):
        self.default_source = default_source
        self.logger = logger or get_class_logger(self.__class__)

    def normalize(self, raw_records: Iterable[RawRecord], *, start_id: int = 1) -> NormalizationResult:
        """
        Validate and de-duplicate raw rows. Rows without a usable id are
        numbered from start_id upwards, skipping ids claimed explicitly.
        """
        result = NormalizationResult()
        seen: Set[str] = set()
        used_ids: Set[int] = set()
        pending: List[tuple] = []

        for raw in raw_records:
            parsed = self._parse(raw)
            if parsed is None:
                result.skipped_invalid += 1
                continue

            record_id, question, answer, category, source = parsed
            key = dedup_key(question)
            if not key:
                result.skipped_invalid += 1
                continue
            if key in seen:
                result.skipped_duplicate += 1
                continue
            seen.add(key)

            if record_id is not None and record_id not in used_ids:
                used_ids.add(record_id)
            else:
                record_id = None
            pending.append((record_id, question, answer, category, source))

        # rows without a usable id are numbered after the explicit ones are known
        next_id = max(1, start_id)
        for record_id, question, answer, category, source in pending:
            if record_id is None:
                while next_id in used_ids:
                    next_id += 1
                record_id = next_id
                used_ids.add(record_id)
            result.records.append(
                KnowledgeRecord(
                    id=record_id,
                    question=question,
                    answer=answer,
                    source=source,
                    category=category,
                )
            )

        self.logger.info(
            "Normalised %d record(s): skipped_invalid=%d skipped_duplicate=%d",
            len(result.records),
            result.skipped_invalid,
            result.skipped_duplicate,
        )
        return result

    def _parse(self, raw: RawRecord) -> Optional[tuple]:
        if isinstance(raw, KnowledgeRecord):
            record_id: Optional[int] = raw.id
            question, answer = clean_text(raw.question), clean_text(raw.answer)
            category, source = clean_text(raw.category), clean_text(raw.source)
        elif isinstance(raw, Mapping):
            record_id = _parse_id(_lookup(raw, ID_FIELDS))
            question = clean_text(_lookup(raw, QUESTION_FIELDS))
            answer = clean_text(_lookup(raw, ANSWER_FIELDS))
            category = clean_text(_lookup(raw, CATEGORY_FIELDS))
            source = clean_text(_lookup(raw, SOURCE_FIELDS))
        else:
            self.logger.debug("Skipping unsupported raw record type %s", type(raw).__name__)
            return None

        if not question or not answer:
            return None
        return record_id, question, answer, category or None, source or self.default_source
