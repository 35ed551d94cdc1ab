from collections.abc import Sequence

import pymupdf

from compta_preprocessing.classification.models import PageClassification, StatementType
from compta_preprocessing.consolidation.models import ConsolidatedArtifact
from compta_preprocessing.logging.logger import Log
from compta_preprocessing.pdf.page_extractor import PageExtractor
from compta_preprocessing.preprocessing.exceptions import ConsolidationError, ExtractionError

DEFAULT_CREATOR = "compta-preprocessing"


def artifact_filename(fiscal_year: int, prefix: str = "COMPTA") -> str:
    """Canonical artifact name: ``COMPTA2023.pdf``."""
    return f"{prefix}{fiscal_year:04d}.pdf"


def canonical_order(pages: Sequence[PageClassification]) -> list[PageClassification]:
    """Keep recognized pages once each, ordered by statement precedence then page number."""
    seen: set[int] = set()
    kept: list[PageClassification] = []
    for page in pages:
        statement_type = StatementType.parse(page.statement_type)
        if statement_type is None:
            Log.warning(
                f"Dropping page {page.page_number}: invalid statement type "
                f"{page.statement_type!r}"
            )
            continue
        if page.page_number in seen:
            continue
        seen.add(page.page_number)
        kept.append(
            PageClassification(
                page_number=page.page_number,
                statement_type=statement_type,
                confidence=page.confidence,
            )
        )
    return sorted(kept, key=lambda p: (p.statement_type.precedence, p.page_number))


class Consolidator:
    """Builds one PDF containing exactly the selected pages of a source document."""

    def __init__(
        self,
        page_extractor: PageExtractor | None = None,
        creator: str = DEFAULT_CREATOR,
    ) -> None:
        self._page_extractor = page_extractor or PageExtractor()
        self._creator = creator

    def consolidate(
        self,
        source_bytes: bytes,
        selections: Sequence[PageClassification],
        fiscal_year: int,
        output_filename: str,
        source_filename: str = "",
    ) -> ConsolidatedArtifact:
        """Copy the selected pages into a new PDF in canonical order.

        Out-of-range pages are dropped with a warning and recorded on the
        artifact's ``dropped_pages``.

        Raises:
            ConsolidationError: if the selection is empty, the source cannot be
                opened, or no selected page survives.
        """
        if not selections:
            raise ConsolidationError("No pages to consolidate")

        ordered = canonical_order(selections)
        if not ordered:
            raise ConsolidationError("No selected page has a valid statement type")

        try:
            source = self._page_extractor.open(source_bytes)
        except ExtractionError as exc:
            raise ConsolidationError(str(exc)) from exc

        Log.info(
            f"Creating {output_filename} from {source_filename or 'source'}: "
            + ", ".join(f"{p.page_number}({p.statement_type.value})" for p in ordered)
        )

        copied: list[PageClassification] = []
        dropped: list[int] = []
        with source, pymupdf.open() as target:  # type: ignore[no-untyped-call]
            for page in ordered:
                try:
                    self._page_extractor.copy_page(source, target, page.page_number)
                except ExtractionError as exc:
                    Log.warning(f"Skipping page: {exc}", document=source_filename)
                    dropped.append(page.page_number)
                    continue
                copied.append(page)

            if not copied:
                raise ConsolidationError(
                    f"No pages could be copied to {output_filename} "
                    f"(source has {source.page_count} pages)"
                )

            target.set_metadata(self._metadata(fiscal_year))
            content = target.tobytes(garbage=3, deflate=True)

        Log.info(f"Created {output_filename} with {len(copied)} pages ({len(content)} bytes)")
        return ConsolidatedArtifact(
            fiscal_year=fiscal_year,
            source_filename=source_filename,
            output_filename=output_filename,
            pages=copied,
            content=content,
            dropped_pages=dropped,
        )

    def _metadata(self, fiscal_year: int) -> dict[str, str]:
        now = pymupdf.get_pdf_now()
        return {
            "title": f"Analyse Comptable {fiscal_year}",
            "subject": f"Documents comptables consolides - Exercice {fiscal_year}",
            "creator": self._creator,
            "producer": f"PyMuPDF {pymupdf.VersionBind}",
            "creationDate": now,
            "modDate": now,
        }
