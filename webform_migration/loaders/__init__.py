"""Loaders for target form stores."""

from .base import BaseLoader, LoadResult, SubmissionResult
from .api_loader import APILoader
from .file_loader import FileLoader

__all__ = [
    "BaseLoader",
    "LoadResult",
    "SubmissionResult",
    "APILoader",
    "FileLoader",
]
