"""Service layer for the webform migration."""

from .field_mapper import FieldTypeMapper
from .hierarchy import HierarchyBuilder
from .submissions import SubmissionNormalizer
from .settings import map_form_settings
from .validator import FormValidator, ValidationIssue
from .assembler import FormAssembler
from .watermark import WatermarkStore

__all__ = [
    "FieldTypeMapper",
    "HierarchyBuilder",
    "SubmissionNormalizer",
    "map_form_settings",
    "FormValidator",
    "ValidationIssue",
    "FormAssembler",
    "WatermarkStore",
]
