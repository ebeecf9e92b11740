"""PDF adapter producing text blocks in page reading order."""

from __future__ import annotations

from pathlib import Path

import pymupdf

from sourcetext.extraction.models import OfficeOptions
from sourcetext.extraction.normalization import normalize_whitespace

_PDF_MAGIC = b"%PDF-"
_TEXT_BLOCK_TYPE = 0


class PdfAdapter:
    """Extract paragraph-like blocks from PDF pages in stable order."""

    def supports(self, path: Path, sniffed_bytes: bytes | None = None) -> bool:
        if path.suffix.lower() == ".pdf":
            return True
        if sniffed_bytes is None:
            return False
        return sniffed_bytes.startswith(_PDF_MAGIC)

    def extract(self, path: Path, options: OfficeOptions) -> list[str]:
        blocks: list[str] = []

        with pymupdf.open(path) as doc:
            for page in doc:
                blocks.extend(self._page_blocks(page))
                if options.include_annotations:
                    blocks.extend(self._annotation_blocks(page))

        return blocks

    def _page_blocks(self, page: pymupdf.Page) -> list[str]:
        page_blocks = page.get_text("blocks")
        ordered = sorted(page_blocks, key=lambda row: (row[1], row[0], row[5]))
        texts: list[str] = []
        for block in ordered:
            if block[6] != _TEXT_BLOCK_TYPE:
                continue
            text = normalize_whitespace(block[4])
            if text:
                texts.append(text)
        return texts

    def _annotation_blocks(self, page: pymupdf.Page) -> list[str]:
        texts: list[str] = []
        for annot in page.annots() or ():
            content = normalize_whitespace((annot.info or {}).get("content", ""))
            if content:
                texts.append(content)
        return texts
