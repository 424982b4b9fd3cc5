"""Data models for the webform migration."""

from .legacy import (
    LegacyForm,
    LegacyFieldRecord,
    RawSubmissionRow,
)
from .form import (
    TargetType,
    TargetFieldDefinition,
    SubmissionRecord,
    AssembledForm,
    render_elements,
)
from .migration import (
    MigrationConfig,
    MigrationRun,
    FormMigrationStep,
    MigrationStatus,
    TargetKind,
)
from .errors import (
    MigrationError,
    DecodeError,
    MissingDataError,
    ConnectivityError,
    ValidationError,
    ErrorLog,
)

__all__ = [
    "LegacyForm",
    "LegacyFieldRecord",
    "RawSubmissionRow",
    "TargetType",
    "TargetFieldDefinition",
    "SubmissionRecord",
    "AssembledForm",
    "render_elements",
    "MigrationConfig",
    "MigrationRun",
    "FormMigrationStep",
    "MigrationStatus",
    "TargetKind",
    "MigrationError",
    "DecodeError",
    "MissingDataError",
    "ConnectivityError",
    "ValidationError",
    "ErrorLog",
]
