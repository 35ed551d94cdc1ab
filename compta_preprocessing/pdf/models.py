from dataclasses import dataclass, field


@dataclass(frozen=True)
class ExtractedPage:
    """A standalone single-page PDF cut from a source document."""

    page_number: int
    content: bytes


@dataclass(frozen=True)
class PageFailure:
    """A requested page that could not be extracted."""

    page_number: int
    reason: str


@dataclass
class PageExtractionResult:
    """Outcome of splitting a document: pages produced, skipped and failed."""

    total_pages: int
    pages: list[ExtractedPage] = field(default_factory=list)
    out_of_range: list[int] = field(default_factory=list)
    failures: list[PageFailure] = field(default_factory=list)
