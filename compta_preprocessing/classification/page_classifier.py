from collections import Counter
from typing import Any

from compta_preprocessing.classification.classifier import ModelClassifier
from compta_preprocessing.classification.exceptions import ClassificationError
from compta_preprocessing.classification.models import (
    DocumentStructureAnalysis,
    PageClassification,
)
from compta_preprocessing.classification.prompt_loader import (
    PAGE_TYPE,
    PromptBundle,
    load_prompt_bundle,
)
from compta_preprocessing.classification.validator import validate_and_build_page
from compta_preprocessing.logging.logger import Log
from compta_preprocessing.pdf.page_extractor import PageExtractor
from compta_preprocessing.preprocessing.exceptions import ExtractionError
from compta_preprocessing.registry.models import SourceDocument


def dominant_year(years: list[int]) -> int | None:
    """Most frequently reported year; ties go to the most recent one."""
    if not years:
        return None
    counts = Counter(years)
    return max(counts, key=lambda year: (counts[year], year))


class PageByPageClassifier(ModelClassifier):
    """Classifies each page separately, sending single-page PDFs to the provider.

    Slower than whole-document classification but robust for long bundles
    that exceed the provider's document limits.
    """

    def __init__(
        self,
        *,
        page_extractor: PageExtractor | None = None,
        prompt: PromptBundle | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._page_extractor = page_extractor or PageExtractor()
        self._prompt = prompt or load_prompt_bundle(PAGE_TYPE)

    def classify(self, document: SourceDocument) -> DocumentStructureAnalysis:
        try:
            extraction = self._page_extractor.extract(document.content)
        except ExtractionError as exc:
            raise ClassificationError(f"Cannot split {document.filename}: {exc}") from exc

        relevant: list[PageClassification] = []
        years: list[int] = []
        failed: list[str] = []
        for page in extraction.pages:
            try:
                classification, year = self._classify_page(document.filename, page.page_number, page.content)
            except ClassificationError as exc:
                Log.warning(f"Page classification failed: {exc}", document=document.filename, page=page.page_number)
                failed.append(str(exc))
                continue
            if year is not None:
                years.append(year)
            if classification is None:
                continue
            if classification.confidence < self._min_confidence:
                Log.debug(f"Dropping page {page.page_number}: low confidence {classification.confidence}")
                continue
            relevant.append(classification)

        if extraction.pages and len(failed) == len(extraction.pages):
            raise ClassificationError(
                f"All {len(failed)} pages of {document.filename} failed: {failed[-1]}"
            )
        if not extraction.pages:
            raise ClassificationError(f"No page of {document.filename} could be extracted")

        fiscal_year = dominant_year(years)
        Log.info(
            f"Classified {document.filename} page by page: year {fiscal_year}, "
            f"{len(relevant)}/{extraction.total_pages} relevant pages"
        )
        return DocumentStructureAnalysis(
            fiscal_year=fiscal_year,
            relevant_pages=relevant,
            summary=(
                f"Document of {extraction.total_pages} pages, {len(relevant)} relevant, "
                f"{len(failed)} failed"
            ),
        )

    def _classify_page(
        self, filename: str, page_number: int, content: bytes
    ) -> tuple[PageClassification | None, int | None]:
        user_prompt = self._prompt.render(filename=filename, page_number=page_number)
        raw_response = self._call_ai(
            prompt=self._prompt,
            user_prompt=user_prompt,
            schema_name="page_classification",
            document=content,
            document_name=f"{filename}#page{page_number}",
        )
        Log.debug(f"AI raw response for page {page_number}:\n{raw_response}")
        return validate_and_build_page(self._parse_json(raw_response), page_number)
