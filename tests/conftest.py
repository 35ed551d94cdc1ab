import io
from collections.abc import Callable

import pytest
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

PdfFactory = Callable[[list[str]], bytes]

STATEMENT_PAGES = [
    "Liasse fiscale - Page de garde",
    "BILAN ACTIF\nImmobilisations incorporelles\nExercice clos le 31/12/2022",
    "BILAN PASSIF\nCapitaux propres\nExercice clos le 31/12/2022",
    "COMPTE DE RESULTAT\nProduits d'exploitation\nExercice clos le 31/12/2022",
    "COMPTE DE RESULTAT (suite)\nCharges d'exploitation",
    "SOLDES INTERMEDIAIRES DE GESTION\nExcedent brut d'exploitation",
    "Annexe - Regles et methodes comptables",
]


def build_pdf(pages: list[str]) -> bytes:
    """Render one PDF page per string; newlines start new lines of text."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    for text in pages:
        y = 780
        for line in text.splitlines():
            c.drawString(72, y, line)
            y -= 18
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def make_pdf() -> PdfFactory:
    return build_pdf


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    return build_pdf(["Hello PDF World"])


@pytest.fixture()
def statement_pdf_bytes() -> bytes:
    """Seven-page bundle: cover, assets, liabilities, two income pages, SIG, annex."""
    return build_pdf(STATEMENT_PAGES)


@pytest.fixture()
def ten_page_pdf_bytes() -> bytes:
    return build_pdf([f"Page {n} content" for n in range(1, 11)])


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.showPage()
    c.save()
    return buf.getvalue()
