"""DOCX adapter emitting body paragraphs, table cells and annotations."""

from __future__ import annotations

from pathlib import Path

import docx
from docx.document import Document as WordDocument
from docx.table import Table
from lxml import etree

from sourcetext.extraction.adapters.base import ZIP_MAGIC, zip_contains
from sourcetext.extraction.models import OfficeOptions
from sourcetext.extraction.normalization import normalize_whitespace

_W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
_ANNOTATION_PARTS = ("/word/comments.xml", "/word/footnotes.xml", "/word/endnotes.xml")


def _table_blocks(table: Table) -> list[str]:
    blocks: list[str] = []
    for row in table.rows:
        for cell in row.cells:
            text = normalize_whitespace(cell.text)
            if text:
                blocks.append(text)
    return blocks


def _part_paragraphs(blob: bytes) -> list[str]:
    root = etree.fromstring(blob)
    paragraphs: list[str] = []
    for paragraph in root.iter(f"{{{_W_NS}}}p"):
        # Only w:t runs: w:delText and w:instrText are not visible text.
        text = normalize_whitespace("".join(node.text or "" for node in paragraph.iter(f"{{{_W_NS}}}t")))
        if text:
            paragraphs.append(text)
    return paragraphs


class DocxAdapter:
    """Extract Word documents in body order."""

    def supports(self, path: Path, sniffed_bytes: bytes | None = None) -> bool:
        if path.suffix.lower() == ".docx":
            return True
        if sniffed_bytes is None or not sniffed_bytes.startswith(ZIP_MAGIC):
            return False
        return zip_contains(path, "word/document.xml")

    def extract(self, path: Path, options: OfficeOptions) -> list[str]:
        document = docx.Document(str(path))
        blocks: list[str] = []

        for item in document.iter_inner_content():
            if isinstance(item, Table):
                blocks.extend(_table_blocks(item))
                continue
            text = normalize_whitespace(item.text)
            if text:
                blocks.append(text)

        if options.include_annotations:
            blocks.extend(self._annotation_blocks(document))
        return blocks

    def _annotation_blocks(self, document: WordDocument) -> list[str]:
        parts = {str(part.partname): part for part in document.part.package.iter_parts()}
        blocks: list[str] = []
        for partname in _ANNOTATION_PARTS:
            part = parts.get(partname)
            if part is not None:
                blocks.extend(_part_paragraphs(part.blob))
        return blocks
