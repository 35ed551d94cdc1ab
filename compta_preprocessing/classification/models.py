from dataclasses import dataclass, field
from enum import Enum


class StatementType(str, Enum):
    """The four accounting sections kept in a consolidated artifact."""

    BALANCE_SHEET_ASSETS = "balance_sheet_assets"
    BALANCE_SHEET_LIABILITIES = "balance_sheet_liabilities"
    INCOME_STATEMENT = "income_statement"
    MANAGEMENT_BALANCES = "management_balances"

    @property
    def precedence(self) -> int:
        """Position of the section in a consolidated artifact (1-based)."""
        return _PRECEDENCE[self]

    @classmethod
    def parse(cls, raw: object) -> "StatementType | None":
        """Map a classifier label onto a canonical type, or None if unrecognized."""
        if isinstance(raw, StatementType):
            return raw
        if not isinstance(raw, str):
            return None
        key = raw.strip().lower()
        try:
            return cls(key)
        except ValueError:
            return _FRENCH_ALIASES.get(key)


_PRECEDENCE: dict[StatementType, int] = {
    StatementType.BALANCE_SHEET_ASSETS: 1,
    StatementType.BALANCE_SHEET_LIABILITIES: 2,
    StatementType.INCOME_STATEMENT: 3,
    StatementType.MANAGEMENT_BALANCES: 4,
}

_FRENCH_ALIASES: dict[str, StatementType] = {
    "bilan_actif": StatementType.BALANCE_SHEET_ASSETS,
    "bilan_passif": StatementType.BALANCE_SHEET_LIABILITIES,
    "compte_resultat": StatementType.INCOME_STATEMENT,
    "sig": StatementType.MANAGEMENT_BALANCES,
}


@dataclass(frozen=True)
class PageClassification:
    """One relevant page of a source document (page_number is 1-indexed)."""

    page_number: int
    statement_type: StatementType
    confidence: float = 0.8


@dataclass(frozen=True)
class DocumentStructureAnalysis:
    """Classifier output for one source document.

    An empty ``relevant_pages`` list is a valid result, not an error.
    """

    fiscal_year: int | None = None
    relevant_pages: list[PageClassification] = field(default_factory=list)
    summary: str = ""
