"""Offline classifier that recognizes statement pages from their text.

Useful for text-based PDFs produced by accounting software, and as a
deterministic classifier for local runs without provider credentials.
"""

import re

from compta_preprocessing.classification.base import BaseStructureClassifier
from compta_preprocessing.classification.exceptions import ClassificationError
from compta_preprocessing.classification.models import (
    DocumentStructureAnalysis,
    PageClassification,
    StatementType,
)
from compta_preprocessing.classification.page_classifier import dominant_year
from compta_preprocessing.classification.validator import parse_year
from compta_preprocessing.logging.logger import Log
from compta_preprocessing.pdf.base import BasePdfExtractor
from compta_preprocessing.pdf.exceptions import PdfExtractionError
from compta_preprocessing.registry.models import SourceDocument

# Checked in order; the first matching pattern wins for a page.
_PATTERNS: list[tuple[StatementType, re.Pattern[str]]] = [
    (
        StatementType.MANAGEMENT_BALANCES,
        re.compile(
            r"soldes\s+interm[ée]diaires\s+de\s+gestion|exc[ée]dent\s+brut\s+d'exploitation",
            re.IGNORECASE,
        ),
    ),
    (
        StatementType.INCOME_STATEMENT,
        re.compile(
            r"compte\s+de\s+r[ée]sultat|produits\s+d'exploitation|charges\s+d'exploitation",
            re.IGNORECASE,
        ),
    ),
    (
        StatementType.BALANCE_SHEET_LIABILITIES,
        re.compile(r"bilan\s+passif|\bpassif\b|capitaux\s+propres", re.IGNORECASE),
    ),
    (
        StatementType.BALANCE_SHEET_ASSETS,
        re.compile(r"bilan\s+actif|\bactif\b|actif\s+immobilis[ée]", re.IGNORECASE),
    ),
]

_CLOSING_DATE = re.compile(
    r"exercice\s+clos\s+le\s+\d{1,2}[/.-]\d{1,2}[/.-]((?:19|20)\d{2})",
    re.IGNORECASE,
)

KEYWORD_CONFIDENCE = 0.6


def detect_statement_type(text: str) -> StatementType | None:
    for statement_type, pattern in _PATTERNS:
        if pattern.search(text):
            return statement_type
    return None


def detect_closing_year(text: str) -> int | None:
    match = _CLOSING_DATE.search(text)
    return parse_year(match.group(1)) if match else None


class KeywordStructureClassifier(BaseStructureClassifier):
    """Classifies pages by French statement headings found in their text layer."""

    def __init__(self, pdf_extractor: BasePdfExtractor) -> None:
        self._pdf_extractor = pdf_extractor

    def classify(self, document: SourceDocument) -> DocumentStructureAnalysis:
        try:
            texts = self._pdf_extractor.extract_pages(document.content)
        except PdfExtractionError as exc:
            raise ClassificationError(f"Cannot read text of {document.filename}: {exc}") from exc

        pages: list[PageClassification] = []
        years: list[int] = []
        for index, text in enumerate(texts, start=1):
            year = detect_closing_year(text)
            if year is not None:
                years.append(year)
            statement_type = detect_statement_type(text)
            if statement_type is None:
                continue
            pages.append(
                PageClassification(
                    page_number=index,
                    statement_type=statement_type,
                    confidence=KEYWORD_CONFIDENCE,
                )
            )

        fiscal_year = dominant_year(years)

        Log.info(
            f"Keyword classification of {document.filename}: year {fiscal_year}, "
            f"{len(pages)}/{len(texts)} relevant pages"
        )
        return DocumentStructureAnalysis(
            fiscal_year=fiscal_year,
            relevant_pages=pages,
            summary=f"Keyword match on {len(pages)} of {len(texts)} pages",
        )
