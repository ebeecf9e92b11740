"""PPTX adapter emitting slide text in slide order, with speaker notes."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator

from pptx import Presentation

from sourcetext.extraction.adapters.base import ZIP_MAGIC, zip_contains
from sourcetext.extraction.models import OfficeOptions
from sourcetext.extraction.normalization import normalize_whitespace


def _shape_texts(shape: Any) -> Iterator[str]:
    if getattr(shape, "has_text_frame", False):
        for paragraph in shape.text_frame.paragraphs:
            yield paragraph.text
    if getattr(shape, "has_table", False):
        for row in shape.table.rows:
            for cell in row.cells:
                yield cell.text
    # Group shapes nest their children instead of carrying text themselves.
    for child in getattr(shape, "shapes", ()):
        yield from _shape_texts(child)


class PptxAdapter:
    """Extract PowerPoint presentations slide by slide."""

    def supports(self, path: Path, sniffed_bytes: bytes | None = None) -> bool:
        if path.suffix.lower() == ".pptx":
            return True
        if sniffed_bytes is None or not sniffed_bytes.startswith(ZIP_MAGIC):
            return False
        return zip_contains(path, "ppt/presentation.xml")

    def extract(self, path: Path, options: OfficeOptions) -> list[str]:
        presentation = Presentation(str(path))
        blocks: list[str] = []

        for slide in presentation.slides:
            for shape in slide.shapes:
                for raw in _shape_texts(shape):
                    text = normalize_whitespace(raw)
                    if text:
                        blocks.append(text)

            if options.include_annotations and slide.has_notes_slide:
                notes_frame = slide.notes_slide.notes_text_frame
                notes = normalize_whitespace(notes_frame.text) if notes_frame is not None else ""
                if notes:
                    blocks.append(notes)

        return blocks
