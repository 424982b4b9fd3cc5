"""Migration execution models."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum
from datetime import datetime, timezone
import json
import os
import uuid


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MigrationStatus(str, Enum):
    """Status of a migration run or of one form within it."""
    PENDING = "pending"
    EXTRACTING = "extracting"
    ASSEMBLING = "assembling"
    LOADING = "loading"
    SIMULATED = "simulated"
    COMPLETED = "completed"
    FAILED = "failed"


class TargetKind(str, Enum):
    """Persistence collaborators a run can hand off to."""
    API = "api"
    FILE = "file"


@dataclass
class FormMigrationStep:
    """The migration of a single legacy form."""
    form_id: int
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    title: str = ""
    status: MigrationStatus = MigrationStatus.PENDING
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    elements_migrated: int = 0
    submissions_processed: int = 0
    submissions_succeeded: int = 0
    submissions_failed: int = 0
    submissions_skipped: int = 0
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "form_id": self.form_id,
            "title": self.title,
            "status": self.status.value,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "elements_migrated": self.elements_migrated,
            "submissions_processed": self.submissions_processed,
            "submissions_succeeded": self.submissions_succeeded,
            "submissions_failed": self.submissions_failed,
            "submissions_skipped": self.submissions_skipped,
            "errors": self.errors,
            "warnings": self.warnings,
        }

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None


@dataclass
class MigrationRun:
    """A complete migration run over one or more legacy forms."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = ""
    status: MigrationStatus = MigrationStatus.PENDING
    simulate: bool = False

    # Timing
    created_at: datetime = field(default_factory=utcnow)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    # Progress
    steps: List[FormMigrationStep] = field(default_factory=list)

    # Watermark
    watermark_before: int = 0
    watermark_after: Optional[int] = None

    # Statistics
    total_forms: int = 0
    total_forms_failed: int = 0
    total_submissions_processed: int = 0
    total_submissions_succeeded: int = 0
    total_submissions_failed: int = 0

    # Deduplicated error messages, surfaced at the end of the run
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "simulate": self.simulate,
            "created_at": self.created_at.isoformat(),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "steps": [s.to_dict() for s in self.steps],
            "watermark_before": self.watermark_before,
            "watermark_after": self.watermark_after,
            "total_forms": self.total_forms,
            "total_forms_failed": self.total_forms_failed,
            "total_submissions_processed": self.total_submissions_processed,
            "total_submissions_succeeded": self.total_submissions_succeeded,
            "total_submissions_failed": self.total_submissions_failed,
            "errors": self.errors,
        }

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def add_step(self, form_id: int, title: str = "") -> FormMigrationStep:
        """Add a new form step to the run."""
        step = FormMigrationStep(form_id=form_id, title=title)
        self.steps.append(step)
        return step

    def update_totals(self) -> None:
        """Update total statistics from steps."""
        self.total_forms = len(self.steps)
        self.total_forms_failed = sum(1 for s in self.steps if s.status == MigrationStatus.FAILED)
        self.total_submissions_processed = sum(s.submissions_processed for s in self.steps)
        self.total_submissions_succeeded = sum(s.submissions_succeeded for s in self.steps)
        self.total_submissions_failed = sum(s.submissions_failed for s in self.steps)


@dataclass
class MigrationConfig:
    """Configuration for a migration run."""
    name: str = "webform-migration"

    # Legacy source
    database_url: Optional[str] = None
    source_file: Optional[str] = None

    # Selection
    form_identifier: Optional[int] = None
    max_submissions: Optional[int] = None  # 0 disables submissions, None is unlimited

    # Target
    target: TargetKind = TargetKind.FILE
    target_url: Optional[str] = None
    target_api_key: Optional[str] = None

    # Execution options
    simulate: bool = False
    parallel_workers: int = 1
    batch_size: int = 100
    purge_submissions: bool = False
    delete_chunk_size: int = 500

    # Mapping
    token_rewrites: Dict[str, str] = field(default_factory=dict)

    # Output and state
    output_dir: str = "./data"
    state_file: str = "./data/state.json"
    save_report: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation (secrets omitted)."""
        return {
            "name": self.name,
            "database_url": self.database_url,
            "source_file": self.source_file,
            "form_identifier": self.form_identifier,
            "max_submissions": self.max_submissions,
            "target": self.target.value,
            "target_url": self.target_url,
            "simulate": self.simulate,
            "parallel_workers": self.parallel_workers,
            "batch_size": self.batch_size,
            "purge_submissions": self.purge_submissions,
            "delete_chunk_size": self.delete_chunk_size,
            "token_rewrites": self.token_rewrites,
            "output_dir": self.output_dir,
            "state_file": self.state_file,
            "save_report": self.save_report,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MigrationConfig":
        """Create from dictionary representation."""
        form_identifier = data.get("form_identifier")
        max_submissions = data.get("max_submissions")

        return cls(
            name=data.get("name", "webform-migration"),
            database_url=data.get("database_url"),
            source_file=data.get("source_file"),
            form_identifier=int(form_identifier) if form_identifier is not None else None,
            max_submissions=int(max_submissions) if max_submissions is not None else None,
            target=TargetKind(data.get("target", "file")),
            target_url=data.get("target_url"),
            target_api_key=data.get("target_api_key") or os.environ.get("WEBFORM_TARGET_API_KEY"),
            simulate=data.get("simulate", False),
            parallel_workers=data.get("parallel_workers", 1),
            batch_size=data.get("batch_size", 100),
            purge_submissions=data.get("purge_submissions", False),
            delete_chunk_size=data.get("delete_chunk_size", 500),
            token_rewrites=data.get("token_rewrites", {}),
            output_dir=data.get("output_dir", "./data"),
            state_file=data.get("state_file", "./data/state.json"),
            save_report=data.get("save_report", True),
        )

    @classmethod
    def from_json_file(cls, file_path: str) -> "MigrationConfig":
        """Load configuration from a JSON file."""
        with open(file_path, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)
