from collections.abc import Sequence

import pymupdf

from compta_preprocessing.logging.logger import Log
from compta_preprocessing.pdf.models import ExtractedPage, PageExtractionResult, PageFailure
from compta_preprocessing.preprocessing.exceptions import ExtractionError


class PageExtractor:
    """Splits a PDF into independent single-page PDFs.

    Also exposes the page copy primitive the Consolidator builds on, so both
    stages copy page objects the same way.
    """

    def open(self, pdf_bytes: bytes) -> pymupdf.Document:
        """Open PDF bytes.

        Raises:
            ExtractionError: if the bytes are not a readable PDF.
        """
        try:
            doc = pymupdf.open(stream=pdf_bytes, filetype="pdf")  # type: ignore[no-untyped-call]
        except Exception as exc:
            raise ExtractionError(f"Cannot open PDF: {exc}") from exc
        if doc.page_count == 0:
            doc.close()
            raise ExtractionError("PDF has no pages")
        return doc

    def page_count(self, pdf_bytes: bytes) -> int:
        with self.open(pdf_bytes) as doc:
            return doc.page_count

    def copy_page(
        self,
        source: pymupdf.Document,
        target: pymupdf.Document,
        page_number: int,
    ) -> None:
        """Append source page ``page_number`` (1-indexed) to ``target``.

        Raises:
            ExtractionError: if the page is out of range or cannot be copied.
        """
        if not 1 <= page_number <= source.page_count:
            raise ExtractionError(
                f"Page {page_number} out of range (1-{source.page_count})"
            )
        before = target.page_count
        try:
            target.insert_pdf(source, from_page=page_number - 1, to_page=page_number - 1)
        except Exception as exc:
            raise ExtractionError(f"Cannot copy page {page_number}: {exc}") from exc
        if target.page_count != before + 1:
            raise ExtractionError(f"Page {page_number} was not copied")

    def extract(
        self,
        pdf_bytes: bytes,
        page_numbers: Sequence[int] | None = None,
    ) -> PageExtractionResult:
        """Cut one standalone PDF per requested page.

        Args:
            pdf_bytes: Source document.
            page_numbers: 1-indexed pages in the wanted order; all pages when None.

        Returns:
            PageExtractionResult; out-of-range requests and per-page failures are
            recorded on it rather than raised.

        Raises:
            ExtractionError: only if the source document cannot be opened at all.
        """
        with self.open(pdf_bytes) as source:
            total = source.page_count
            requested = (
                list(page_numbers) if page_numbers is not None else list(range(1, total + 1))
            )
            result = PageExtractionResult(total_pages=total)

            for page_number in requested:
                if not 1 <= page_number <= total:
                    result.out_of_range.append(page_number)
                    continue
                try:
                    result.pages.append(
                        ExtractedPage(
                            page_number=page_number,
                            content=self._single_page(source, page_number),
                        )
                    )
                except ExtractionError as exc:
                    Log.warning(f"Page extraction failed: {exc}", page=page_number)
                    result.failures.append(PageFailure(page_number=page_number, reason=str(exc)))

        if result.out_of_range:
            Log.warning(
                f"Skipped {len(result.out_of_range)} out-of-range page request(s) "
                f"(1-{total}): {result.out_of_range}"
            )
        Log.info(f"Extracted {len(result.pages)}/{len(requested)} pages")
        return result

    def _single_page(self, source: pymupdf.Document, page_number: int) -> bytes:
        with pymupdf.open() as target:  # type: ignore[no-untyped-call]
            self.copy_page(source, target, page_number)
            try:
                return target.tobytes(garbage=3, deflate=True)
            except Exception as exc:
                raise ExtractionError(f"Cannot save page {page_number}: {exc}") from exc
