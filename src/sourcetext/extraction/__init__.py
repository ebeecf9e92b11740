"""Extraction package interfaces."""

from .browser import BrowserAvailable, BrowserCapability, BrowserContextManager, BrowserUnavailable
from .config import ExtractionSettings
from .errors import ExtractionError, ExtractionFailure
from .extractor import SourceExtractor
from .ingestor import IngestionResult, SourceIngestor
from .models import ContentSource, OfficeOptions, SourceKind
from .normalization import normalize_extracted_text

__all__ = [
    "BrowserAvailable",
    "BrowserCapability",
    "BrowserContextManager",
    "BrowserUnavailable",
    "ContentSource",
    "ExtractionError",
    "ExtractionFailure",
    "ExtractionSettings",
    "IngestionResult",
    "OfficeOptions",
    "SourceExtractor",
    "SourceIngestor",
    "SourceKind",
    "normalize_extracted_text",
]
