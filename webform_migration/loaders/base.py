"""Base loader interface for target form stores."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
import logging

from ..models.form import AssembledForm, SubmissionRecord, render_elements
from ..models.errors import ConnectivityError
from ..services.validator import FormValidator

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def submission_payload(form_identifier: str, submission: SubmissionRecord) -> Dict[str, Any]:
    """Build the target document of a submission."""
    return {
        "webform_id": form_identifier,
        "legacy_submission_id": submission.legacy_submission_id,
        "data": submission.values,
        "uid": submission.user_id,
        "remote_addr": submission.remote_addr,
        "created": submission.submitted.isoformat() if submission.submitted else None,
    }


@dataclass
class SubmissionResult:
    """Result of attempting to create one submission on the target."""
    legacy_submission_id: int
    target_id: Optional[str] = None
    success: bool = False
    error: Optional[str] = None
    error_code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "legacy_submission_id": self.legacy_submission_id,
            "target_id": self.target_id,
            "success": self.success,
            "error": self.error,
            "error_code": self.error_code,
        }


@dataclass
class LoadResult:
    """Result of loading the submissions of one form."""
    form_identifier: str
    total_attempted: int = 0
    total_succeeded: int = 0
    total_failed: int = 0
    total_skipped: int = 0
    results: List[SubmissionResult] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_ids: List[str] = field(default_factory=list)

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    @property
    def success_rate(self) -> float:
        if self.total_attempted == 0:
            return 0.0
        return self.total_succeeded / self.total_attempted

    def add(self, result: SubmissionResult) -> None:
        """Count a single submission result."""
        self.results.append(result)
        self.total_attempted += 1
        if result.success:
            self.total_succeeded += 1
            if result.target_id:
                self.created_ids.append(result.target_id)
        else:
            self.total_failed += 1
            self.errors.append({
                "legacy_submission_id": result.legacy_submission_id,
                "error": result.error,
                "error_code": result.error_code,
            })

    def to_dict(self) -> Dict[str, Any]:
        return {
            "form_identifier": self.form_identifier,
            "total_attempted": self.total_attempted,
            "total_succeeded": self.total_succeeded,
            "total_failed": self.total_failed,
            "total_skipped": self.total_skipped,
            "success_rate": self.success_rate,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "created_ids": self.created_ids,
            "errors": self.errors,
        }


class BaseLoader(ABC):
    """
    Base class for target form stores.

    Loaders create-or-update a target form from an assembled tree and
    create its submissions. Saving the same form identifier twice updates
    the form instead of failing, so a run can be repeated.
    """

    def __init__(
        self,
        dry_run: bool = False,
        batch_size: int = 100,
        validator: Optional[FormValidator] = None
    ):
        """
        Initialize the loader.

        Args:
            dry_run: If True, report what would be written without writing
            batch_size: Number of submissions per batch
            validator: Validator run before a form is saved
        """
        self.dry_run = dry_run
        self.batch_size = batch_size
        self.validator = validator or FormValidator()

    def save_form(self, assembled: AssembledForm) -> str:
        """
        Create or update the target form.

        Args:
            assembled: The assembled form

        Returns:
            The target form identifier

        Raises:
            ValidationError: if the form cannot be persisted (e.g. empty title)
            ConnectivityError: if the target cannot be reached
        """
        self.validator.check(assembled)

        if self.dry_run:
            logger.info(f"[dry run] Would save form {assembled.form_identifier}")
            return assembled.form_identifier

        return self.write_form(
            assembled.form_identifier,
            assembled.title,
            render_elements(assembled.elements),
            assembled.settings,
        )

    @abstractmethod
    def write_form(
        self,
        form_identifier: str,
        title: str,
        elements: Dict[str, Any],
        settings: Dict[str, Any]
    ) -> str:
        """
        Write a rendered form to the target, creating or updating it.

        Args:
            form_identifier: Target form identifier
            title: Form title
            elements: Rendered element tree
            settings: Form settings

        Returns:
            The target form identifier
        """
        pass

    @abstractmethod
    def load_submission(self, form_identifier: str, submission: SubmissionRecord) -> SubmissionResult:
        """
        Create a single submission on the target.

        Args:
            form_identifier: Target form identifier
            submission: The normalized submission

        Returns:
            SubmissionResult indicating success/failure
        """
        pass

    def save_submissions(
        self,
        form_identifier: str,
        submissions: List[SubmissionRecord]
    ) -> LoadResult:
        """
        Create submissions in batches, in the order given.

        A failing submission is recorded and the rest continue; only a
        ConnectivityError stops the form.

        Args:
            form_identifier: Target form identifier
            submissions: Submissions in ascending legacy id order

        Returns:
            LoadResult with statistics
        """
        result = LoadResult(form_identifier=form_identifier)
        result.started_at = utcnow()

        for start in range(0, len(submissions), self.batch_size):
            batch = submissions[start:start + self.batch_size]
            if self.dry_run:
                for submission in batch:
                    result.add(SubmissionResult(
                        legacy_submission_id=submission.legacy_submission_id,
                        success=True,
                    ))
                continue

            for submission_result in self.load_batch(form_identifier, batch):
                result.add(submission_result)

            logger.debug(f"{form_identifier}: loaded {result.total_attempted}/{len(submissions)} submissions")

        result.completed_at = utcnow()
        logger.info(
            f"Loaded {form_identifier}: {result.total_succeeded}/{result.total_attempted} submissions succeeded"
        )
        return result

    def load_batch(self, form_identifier: str, batch: List[SubmissionRecord]) -> List[SubmissionResult]:
        """
        Create one batch of submissions.

        The default creates them one by one; loaders that can write a whole
        batch at once override this.

        Returns:
            One SubmissionResult per submission, in batch order
        """
        results = []
        for submission in batch:
            try:
                results.append(self.load_submission(form_identifier, submission))
            except ConnectivityError:
                raise
            except Exception as e:
                results.append(SubmissionResult(
                    legacy_submission_id=submission.legacy_submission_id,
                    success=False,
                    error=str(e),
                ))
                logger.error(f"Failed to load submission {submission.legacy_submission_id}: {e}")
        return results

    def delete_submissions(self, form_identifier: str, chunk_size: int = 500) -> int:
        """
        Delete every existing submission of a target form, chunk by chunk.

        Args:
            form_identifier: Target form identifier
            chunk_size: Submissions deleted per request

        Returns:
            Number of submissions deleted
        """
        target_ids = self.list_submission_ids(form_identifier)
        if self.dry_run:
            logger.info(f"[dry run] Would delete {len(target_ids)} submissions of {form_identifier}")
            return 0

        deleted = 0
        for start in range(0, len(target_ids), chunk_size):
            chunk = target_ids[start:start + chunk_size]
            self.delete_submission_chunk(form_identifier, chunk)
            deleted += len(chunk)

        logger.info(f"Deleted {deleted} existing submissions of {form_identifier}")
        return deleted

    @abstractmethod
    def list_submission_ids(self, form_identifier: str) -> List[str]:
        """List target ids of the submissions a form currently holds."""
        pass

    @abstractmethod
    def delete_submission_chunk(self, form_identifier: str, target_ids: List[str]) -> None:
        """Delete a chunk of submissions."""
        pass

    def validate_connection(self) -> bool:
        """Validate the connection to the target."""
        return True
