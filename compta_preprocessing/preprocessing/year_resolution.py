"""Fiscal year resolution as an ordered list of named strategies.

The first strategy that yields a year wins. The default order is
filename > classifier > current calendar year.
"""

import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date

from compta_preprocessing.classification.models import DocumentStructureAnalysis
from compta_preprocessing.logging.logger import Log

FILENAME_YEAR_PATTERN = re.compile(r"20[12][0-9]")


@dataclass(frozen=True)
class YearResolution:
    year: int
    source: str


class YearStrategy(ABC):
    name: str = ""

    @abstractmethod
    def resolve(self, filename: str, analysis: DocumentStructureAnalysis) -> int | None:
        """Return a year, or None when the strategy's precondition does not hold."""


class FilenameYearStrategy(YearStrategy):
    """Applies when the filename contains a year between 2010 and 2029."""

    name = "filename"

    def __init__(self, pattern: re.Pattern[str] = FILENAME_YEAR_PATTERN) -> None:
        self._pattern = pattern

    def resolve(self, filename: str, analysis: DocumentStructureAnalysis) -> int | None:
        match = self._pattern.search(filename)
        return int(match.group(0)) if match else None


class ClassifierYearStrategy(YearStrategy):
    """Applies when the classifier reported a fiscal year."""

    name = "classifier"

    def resolve(self, filename: str, analysis: DocumentStructureAnalysis) -> int | None:
        return analysis.fiscal_year


class CurrentYearStrategy(YearStrategy):
    """Always applies."""

    name = "current_year"

    def __init__(self, today: Callable[[], date] = date.today) -> None:
        self._today = today

    def resolve(self, filename: str, analysis: DocumentStructureAnalysis) -> int | None:
        return self._today().year


def default_strategies() -> list[YearStrategy]:
    return [FilenameYearStrategy(), ClassifierYearStrategy(), CurrentYearStrategy()]


def resolve_fiscal_year(
    filename: str,
    analysis: DocumentStructureAnalysis,
    strategies: Sequence[YearStrategy] | None = None,
) -> YearResolution:
    """Resolve the fiscal year of one source document.

    Raises:
        ValueError: if no strategy yields a year.
    """
    for strategy in strategies if strategies is not None else default_strategies():
        year = strategy.resolve(filename, analysis)
        if year is None:
            continue
        if analysis.fiscal_year is not None and analysis.fiscal_year != year:
            Log.warning(
                f"Year mismatch for {filename}: using {year} from {strategy.name}, "
                f"classifier reported {analysis.fiscal_year}"
            )
        return YearResolution(year=year, source=strategy.name)
    raise ValueError(f"No fiscal year could be resolved for {filename}")
