"""
Token Loader

Produces TokenPage sequences for the parser, either from a pdf2json
export or directly from a PDF via pdfplumber.
"""
import json
from pathlib import Path
from typing import Any, Dict, List, Union
from urllib.parse import unquote

import pdfplumber

from config.settings import settings
from src.sheriffsale.models.tokens import TextToken, TokenPage
from src.sheriffsale.utils.logger import get_logger

logger = get_logger(__name__)


def load_pdf2json(source: Union[str, Path, Dict[str, Any]]) -> List[TokenPage]:
    """
    Load pages from a pdf2json document.

    Text runs are URI-encoded in pdf2json output; they are decoded here.
    Both the legacy ``formImage.Pages`` and the flat ``Pages`` shapes are
    accepted.

    Args:
        source: Path to the JSON file, or the already decoded document

    Returns:
        List of token pages in document order
    """
    if isinstance(source, dict):
        document = source
    else:
        with open(source, "r", encoding="utf-8") as f:
            document = json.load(f)

    raw_pages = document.get("formImage", document).get("Pages", [])
    pages = []

    for raw_page in raw_pages:
        tokens = []
        for text in raw_page.get("Texts", []):
            runs = text.get("R") or [{}]
            tokens.append(TextToken(
                text=unquote(runs[0].get("T", "")),
                x=text.get("x", 0.0),
                y=text.get("y", 0.0),
            ))
        pages.append(TokenPage(tokens=tokens))

    logger.info("pdf2json_loaded", pages=len(pages), tokens=sum(len(p) for p in pages))
    return pages


def extract_pdf_tokens(pdf_path: Union[str, Path], points_per_unit: float = None) -> List[TokenPage]:
    """
    Extract positional tokens from a PDF.

    Word boxes are grouped by pdfplumber and their coordinates converted
    from PDF points into the layout units the parser expects.

    Args:
        pdf_path: Path to the PDF document
        points_per_unit: PDF points per layout unit (defaults to settings)

    Returns:
        List of token pages in document order
    """
    scale = points_per_unit or settings.layout_points_per_unit
    pages = []

    with pdfplumber.open(str(pdf_path)) as pdf:
        for page in pdf.pages:
            words = page.extract_words(keep_blank_chars=True, use_text_flow=True)
            pages.append(TokenPage(tokens=[
                TextToken(
                    text=word["text"],
                    x=round(word["x0"] / scale, 3),
                    y=round(word["top"] / scale, 3),
                )
                for word in words
            ]))

    logger.info("pdf_tokens_extracted", pdf_path=str(pdf_path), pages=len(pages))
    return pages
