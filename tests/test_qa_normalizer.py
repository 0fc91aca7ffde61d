# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-21
# Description: test_qa_normalizer.py
# -----------------------------------------------------------------------------
from ingestion.QANormalizer import QANormalizer, clean_text, dedup_key
from ingestion.QARecordLoader import SOURCE_FIELD
from knowledge.KnowledgeRecord import KnowledgeRecord


def test_clean_text_collapses_whitespace_and_line_endings():
    assert clean_text("  Caring\r\nfor\tMom \r  today  ") == "Caring for Mom today"
    assert clean_text(None) == ""


def test_dedup_key_ignores_case_and_punctuation():
    assert dedup_key("What is an ADU?") == dedup_key("what  is an adu")
    assert dedup_key("What's an ADU!!") == "whats an adu"


def test_header_aliases_are_case_insensitive():
    rows = [
        {"QUESTION": "How do I find respite care?", "Answer": "Ask your area agency on aging.", "Section": "Respite"},
        {"q": "What is hospice?", "response": "Comfort focused care.", SOURCE_FIELD: "faq.csv"},
    ]
    result = QANormalizer().normalize(rows)

    assert [r.question for r in result.records] == ["How do I find respite care?", "What is hospice?"]
    assert result.records[0].category == "Respite"
    assert result.records[0].source == "Unknown"
    assert result.records[1].source == "faq.csv"
    assert result.records[1].category is None


def test_rows_missing_question_or_answer_are_counted_not_raised():
    rows = [
        {"question": "", "answer": "orphan answer"},
        {"question": "Lonely question", "answer": "   "},
        {"title": "no recognisable fields"},
        {"question": "Valid?", "answer": "Yes."},
    ]
    result = QANormalizer().normalize(rows)

    assert len(result.records) == 1
    assert result.skipped_invalid == 3
    assert result.skipped_duplicate == 0


def test_duplicates_keep_first_occurrence():
    rows = [
        {"question": "What is an ADU?", "answer": "first"},
        {"question": "WHAT IS AN ADU", "answer": "second"},
        {"question": "what is an adu...", "answer": "third"},
    ]
    result = QANormalizer().normalize(rows)

    assert len(result.records) == 1
    assert result.records[0].answer == "first"
    assert result.skipped_duplicate == 2


def test_explicit_ids_are_kept_and_gaps_are_filled():
    rows = [
        {"question": "A?", "answer": "a"},
        {"id": "1", "question": "B?", "answer": "b"},
        {"id": "1", "question": "C?", "answer": "c"},
        {"id": "not-a-number", "question": "D?", "answer": "d"},
    ]
    result = QANormalizer().normalize(rows)
    ids = {r.question: r.id for r in result.records}

    assert ids["B?"] == 1
    assert len(set(ids.values())) == 4
    assert all(i > 0 for i in ids.values())


def test_normalize_is_a_fixed_point():
    rows = [
        {"question": "  How much does  home care cost? ", "answer": "It\tvaries.", "category": "Costs"},
        {"question": "Who pays for\r\nassisted living?", "answer": "Mostly private funds."},
        {"question": "how much does home care cost", "answer": "duplicate"},
    ]
    normalizer = QANormalizer()
    once = normalizer.normalize(rows)
    twice = normalizer.normalize(once.records)

    assert twice.records == once.records
    assert twice.skipped_duplicate == 0
    assert twice.skipped_invalid == 0


def test_knowledge_records_are_accepted_as_input():
    record = KnowledgeRecord(id=7, question=" Spaced  out ", answer="ok", source="manual")
    result = QANormalizer().normalize([record])

    assert result.records == [KnowledgeRecord(id=7, question="Spaced out", answer="ok", source="manual")]


def test_start_id_offsets_auto_assigned_ids_only():
    rows = [
        {"question": "A?", "answer": "a"},
        {"id": "3", "question": "B?", "answer": "b"},
        {"question": "C?", "answer": "c"},
    ]
    result = QANormalizer().normalize(rows, start_id=10)
    ids = {r.question: r.id for r in result.records}

    assert ids == {"A?": 10, "B?": 3, "C?": 11}
