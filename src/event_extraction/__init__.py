"""
Field and time extraction for forum event posts.

Components:
- ExtractionConfig: Default timezone and event duration
- ExtractedFields: Labeled values found in a post
- FieldExtractor: Label matcher ("**Label:** value" / "Label: value")
- TemporalWindow: Resolved start/end/timezone
- TemporalResolver: Date tag parser with creation-time fallback
"""

from src.event_extraction.config import ExtractionConfig
from src.event_extraction.fields import FieldExtractor, extract_field, extract_title
from src.event_extraction.schemas import ExtractedFields, TemporalWindow
from src.event_extraction.temporal import TemporalResolver

__all__ = [
    "ExtractedFields",
    "ExtractionConfig",
    "FieldExtractor",
    "TemporalResolver",
    "TemporalWindow",
    "extract_field",
    "extract_title",
]
