"""Tests for the whole-document StructureClassifier."""

import json
import threading
from unittest.mock import MagicMock

import pytest

from compta_preprocessing.classification.classifier import StructureClassifier
from compta_preprocessing.classification.exceptions import (
    ClassificationError,
    ClassificationTimeoutError,
)
from compta_preprocessing.classification.models import StatementType
from compta_preprocessing.registry.models import SourceDocument

DOCUMENT = SourceDocument(filename="COMPTA 2022.pdf", content=b"%PDF-1.4 fake")


def _make_classifier(client: MagicMock | None = None, **kwargs: object) -> StructureClassifier:
    if client is None:
        client = MagicMock()
    return StructureClassifier(client=client, model="test-model", **kwargs)


def _valid_json_response(pages: list[dict[str, object]] | None = None, year: int | None = 2022) -> str:
    return json.dumps({
        "year": year,
        "relevantPages": pages if pages is not None else [
            {"pageNumber": 2, "statementType": "balance_sheet_assets", "confidence": 0.9},
            {"pageNumber": 4, "statementType": "income_statement", "confidence": 0.9},
            {"pageNumber": 5, "statementType": "income_statement", "confidence": 0.8},
        ],
        "summary": "ok",
    })


class TestClassifySuccess:
    def test_returns_analysis(self) -> None:
        client = MagicMock()
        client.create_completion.return_value = _valid_json_response()
        analysis = _make_classifier(client).classify(DOCUMENT)
        assert analysis.fiscal_year == 2022
        assert [p.page_number for p in analysis.relevant_pages] == [2, 4, 5]
        assert analysis.relevant_pages[2].statement_type is StatementType.INCOME_STATEMENT

    def test_empty_result_is_not_an_error(self) -> None:
        client = MagicMock()
        client.create_completion.return_value = _valid_json_response(pages=[], year=None)
        analysis = _make_classifier(client).classify(DOCUMENT)
        assert analysis.relevant_pages == []

    def test_sends_document_and_filename(self) -> None:
        client = MagicMock()
        client.create_completion.return_value = _valid_json_response()
        _make_classifier(client).classify(DOCUMENT)
        kwargs = client.create_completion.call_args.kwargs
        assert kwargs["document"] == DOCUMENT.content
        assert kwargs["document_name"] == "COMPTA 2022.pdf"
        assert "COMPTA 2022.pdf" in kwargs["user_prompt"]
        assert kwargs["schema_name"] == "document_structure"
        assert kwargs["model"] == "test-model"

    def test_clamps_temperature(self) -> None:
        client = MagicMock()
        client.create_completion.return_value = _valid_json_response()
        _make_classifier(client, temperature=3.0).classify(DOCUMENT)
        assert client.create_completion.call_args.kwargs["temperature"] == 1.0

    def test_applies_min_confidence(self) -> None:
        client = MagicMock()
        client.create_completion.return_value = _valid_json_response()
        analysis = _make_classifier(client, min_confidence=0.85).classify(DOCUMENT)
        assert [p.page_number for p in analysis.relevant_pages] == [2, 4]

    def test_ensure_configured_delegates_to_client(self) -> None:
        client = MagicMock()
        _make_classifier(client).ensure_configured()
        client.ensure_configured.assert_called_once_with()


class TestJsonParsing:
    def test_strips_markdown_code_fences(self) -> None:
        client = MagicMock()
        client.create_completion.return_value = "```json\n" + _valid_json_response() + "\n```"
        analysis = _make_classifier(client).classify(DOCUMENT)
        assert analysis.fiscal_year == 2022

    def test_invalid_json_raises(self) -> None:
        client = MagicMock()
        client.create_completion.return_value = "not json"
        with pytest.raises(ClassificationError, match="Invalid JSON"):
            _make_classifier(client).classify(DOCUMENT)

    def test_non_object_raises(self) -> None:
        client = MagicMock()
        client.create_completion.return_value = "[1, 2]"
        with pytest.raises(ClassificationError, match="must be an object"):
            _make_classifier(client).classify(DOCUMENT)


class TestTimeout:
    def test_client_timeout_propagates(self) -> None:
        client = MagicMock()
        client.create_completion.side_effect = ClassificationTimeoutError("AI provider timed out")
        with pytest.raises(ClassificationTimeoutError, match="timed out"):
            _make_classifier(client).classify(DOCUMENT)

    def test_provider_called_on_caller_thread(self) -> None:
        client = MagicMock()
        callers: list[threading.Thread] = []

        def record(**_: object) -> str:
            callers.append(threading.current_thread())
            return _valid_json_response()

        client.create_completion.side_effect = record
        threads_before = threading.active_count()
        _make_classifier(client).classify(DOCUMENT)
        assert callers == [threading.current_thread()]
        assert threading.active_count() == threads_before
