import json
import threading
from collections.abc import Callable
from unittest.mock import MagicMock

import pytest

from compta_preprocessing.classification.exceptions import (
    ClassificationError,
    ClassificationTimeoutError,
)
from compta_preprocessing.classification.models import StatementType
from compta_preprocessing.classification.page_classifier import PageByPageClassifier, dominant_year
from compta_preprocessing.registry.models import SourceDocument

PdfFactory = Callable[[list[str]], bytes]


def _page_answers(*answers: dict[str, object]) -> list[str]:
    return [json.dumps(answer) for answer in answers]


class TestDominantYear:
    def test_most_frequent(self) -> None:
        assert dominant_year([2021, 2022, 2022]) == 2022

    def test_tie_goes_to_most_recent(self) -> None:
        assert dominant_year([2021, 2022]) == 2022

    def test_empty(self) -> None:
        assert dominant_year([]) is None


class TestPageByPageClassifier:
    def test_classifies_each_page(self, make_pdf: PdfFactory) -> None:
        document = SourceDocument(filename="COMPTA.pdf", content=make_pdf(["a", "b", "c"]))
        client = MagicMock()
        client.create_completion.side_effect = _page_answers(
            {"statementType": "other", "year": None, "confidence": 0.9},
            {"statementType": "balance_sheet_assets", "year": 2022, "confidence": 0.9},
            {"statementType": "compte_resultat", "year": 2022, "confidence": 0.8},
        )
        analysis = PageByPageClassifier(client=client, model="m").classify(document)

        assert client.create_completion.call_count == 3
        assert analysis.fiscal_year == 2022
        assert [(p.page_number, p.statement_type) for p in analysis.relevant_pages] == [
            (2, StatementType.BALANCE_SHEET_ASSETS),
            (3, StatementType.INCOME_STATEMENT),
        ]

    def test_sends_single_page_documents(self, make_pdf: PdfFactory) -> None:
        document = SourceDocument(filename="COMPTA.pdf", content=make_pdf(["a", "b"]))
        client = MagicMock()
        client.create_completion.side_effect = _page_answers(
            {"statementType": "other"}, {"statementType": "other"}
        )
        PageByPageClassifier(client=client, model="m").classify(document)
        second = client.create_completion.call_args_list[1].kwargs
        assert second["schema_name"] == "page_classification"
        assert second["document_name"] == "COMPTA.pdf#page2"
        assert second["document"] != document.content

    def test_failed_page_is_skipped(self, make_pdf: PdfFactory) -> None:
        document = SourceDocument(filename="COMPTA.pdf", content=make_pdf(["a", "b"]))
        client = MagicMock()
        client.create_completion.side_effect = [
            "garbage",
            json.dumps({"statementType": "sig", "year": 2021, "confidence": 0.7}),
        ]
        analysis = PageByPageClassifier(client=client, model="m").classify(document)
        assert [p.page_number for p in analysis.relevant_pages] == [2]

    def test_all_pages_failing_raises(self, make_pdf: PdfFactory) -> None:
        document = SourceDocument(filename="COMPTA.pdf", content=make_pdf(["a", "b"]))
        client = MagicMock()
        client.create_completion.return_value = "garbage"
        with pytest.raises(ClassificationError, match="All 2 pages"):
            PageByPageClassifier(client=client, model="m").classify(document)

    def test_timed_out_pages_leave_no_running_calls(self, make_pdf: PdfFactory) -> None:
        document = SourceDocument(filename="COMPTA.pdf", content=make_pdf(["a", "b", "c"]))
        client = MagicMock()
        client.create_completion.side_effect = ClassificationTimeoutError("AI provider timed out")
        threads_before = threading.active_count()

        with pytest.raises(ClassificationError, match="All 3 pages"):
            PageByPageClassifier(client=client, model="m").classify(document)

        assert client.create_completion.call_count == 3
        assert threading.active_count() == threads_before

    def test_unreadable_document_raises(self) -> None:
        document = SourceDocument(filename="COMPTA.pdf", content=b"not a pdf")
        with pytest.raises(ClassificationError, match="Cannot split"):
            PageByPageClassifier(client=MagicMock(), model="m").classify(document)

    def test_low_confidence_pages_dropped(self, make_pdf: PdfFactory) -> None:
        document = SourceDocument(filename="COMPTA.pdf", content=make_pdf(["a"]))
        client = MagicMock()
        client.create_completion.return_value = json.dumps(
            {"statementType": "sig", "year": 2021, "confidence": 0.2}
        )
        analysis = PageByPageClassifier(client=client, model="m", min_confidence=0.5).classify(document)
        assert analysis.relevant_pages == []
        assert analysis.fiscal_year == 2021
