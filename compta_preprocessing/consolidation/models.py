from dataclasses import dataclass, field

from compta_preprocessing.classification.models import PageClassification, StatementType


@dataclass(frozen=True)
class ConsolidatedArtifact:
    """One per-fiscal-year PDF holding only the relevant pages, canonically ordered."""

    fiscal_year: int
    source_filename: str
    output_filename: str
    pages: list[PageClassification]
    content: bytes
    dropped_pages: list[int] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def statement_types(self) -> list[StatementType]:
        return [page.statement_type for page in self.pages]
