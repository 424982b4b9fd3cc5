"""Legacy data source extractors."""

from .base import BaseExtractor
from .sql_extractor import SQLExtractor
from .json_extractor import JSONExtractor

__all__ = [
    "BaseExtractor",
    "SQLExtractor",
    "JSONExtractor",
]
