"""Validates parsed classifier JSON and builds domain objects.

The classification service is a black box: anything it returns is checked
here before the pipeline sees it. Pages with an unrecognized statement type
are dropped, not rejected; only a malformed envelope is an error.
"""

from typing import Any

from compta_preprocessing.classification.exceptions import ClassificationValidationError
from compta_preprocessing.classification.models import (
    DocumentStructureAnalysis,
    PageClassification,
    StatementType,
)
from compta_preprocessing.logging.logger import Log

DEFAULT_CONFIDENCE = 0.8
_MIN_YEAR = 1900
_MAX_YEAR = 2100


def validate_and_build_structure(
    data: dict[str, Any],
    min_confidence: float = 0.0,
) -> DocumentStructureAnalysis:
    """Build a DocumentStructureAnalysis from a whole-document response.

    Raises:
        ClassificationValidationError: if ``relevantPages`` is not a list.
    """
    raw_pages = data.get("relevantPages", [])
    if raw_pages is None:
        raw_pages = []
    if not isinstance(raw_pages, list):
        raise ClassificationValidationError("'relevantPages' must be a list")

    pages: list[PageClassification] = []
    seen: set[int] = set()
    for index, item in enumerate(raw_pages):
        page = _build_page(item, index)
        if page is None or page.page_number in seen:
            continue
        if page.confidence < min_confidence:
            Log.debug(
                f"Dropping page {page.page_number}: confidence {page.confidence} "
                f"below {min_confidence}"
            )
            continue
        seen.add(page.page_number)
        pages.append(page)

    summary = data.get("summary")
    if not isinstance(summary, str) or not summary:
        summary = f"Found {len(pages)} relevant pages"
    return DocumentStructureAnalysis(
        fiscal_year=parse_year(data.get("year", data.get("fiscalYear"))),
        relevant_pages=pages,
        summary=summary,
    )


def validate_and_build_page(
    data: dict[str, Any],
    page_number: int,
) -> tuple[PageClassification | None, int | None]:
    """Build the classification of a single page.

    Returns:
        (classification or None if the page is irrelevant, reported year).
    """
    statement_type = StatementType.parse(data.get("statementType", data.get("pageType")))
    year = parse_year(data.get("year"))
    if statement_type is None:
        return None, year
    confidence = _parse_confidence(data.get("confidence"), default=0.0)
    return (
        PageClassification(
            page_number=page_number,
            statement_type=statement_type,
            confidence=confidence,
        ),
        year,
    )


def parse_year(raw: Any) -> int | None:
    """Return a plausible 4-digit fiscal year, or None."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, str) and raw.strip().isdigit():
        raw = int(raw.strip())
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)
    if isinstance(raw, int) and _MIN_YEAR <= raw <= _MAX_YEAR:
        return raw
    return None


def _build_page(raw: Any, index: int) -> PageClassification | None:
    if not isinstance(raw, dict):
        Log.warning(f"Ignoring relevant page at index {index}: not an object")
        return None
    page_number = raw.get("pageNumber")
    if isinstance(page_number, float) and page_number.is_integer():
        page_number = int(page_number)
    if isinstance(page_number, bool) or not isinstance(page_number, int):
        Log.warning(f"Ignoring relevant page at index {index}: invalid pageNumber {page_number!r}")
        return None
    label = raw.get("statementType", raw.get("pageType"))
    statement_type = StatementType.parse(label)
    if statement_type is None:
        Log.debug(f"Ignoring page {page_number}: unrecognized statement type {label!r}")
        return None
    return PageClassification(
        page_number=page_number,
        statement_type=statement_type,
        confidence=_parse_confidence(raw.get("confidence"), default=DEFAULT_CONFIDENCE),
    )


def _parse_confidence(raw: Any, default: float) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return default
    return max(0.0, min(1.0, float(raw)))
