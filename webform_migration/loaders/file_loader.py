"""Loader writing target forms and submissions as JSON documents."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from .base import BaseLoader, SubmissionResult, submission_payload
from ..models.form import SubmissionRecord

logger = logging.getLogger(__name__)


class FileLoader(BaseLoader):
    """
    Writes each form to ``<output_dir>/forms/<id>.json`` and its
    submissions to ``<output_dir>/submissions/<id>.json``.

    Form documents are overwritten on every save. Submissions are keyed by
    legacy submission id, so loading a submission twice replaces it.
    """

    def __init__(self, output_dir: str, **kwargs):
        super().__init__(**kwargs)
        self.output_dir = Path(output_dir)
        self.forms_dir = self.output_dir / "forms"
        self.submissions_dir = self.output_dir / "submissions"

    def _form_path(self, form_identifier: str) -> Path:
        return self.forms_dir / f"{form_identifier}.json"

    def _submissions_path(self, form_identifier: str) -> Path:
        return self.submissions_dir / f"{form_identifier}.json"

    def _read_submissions(self, form_identifier: str) -> Dict[str, Any]:
        path = self._submissions_path(form_identifier)
        if not path.exists():
            return {}
        with open(path, 'r') as f:
            return json.load(f)

    def _write_json(self, path: Path, data: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(data, f, indent=2, default=str)

    def write_form(
        self,
        form_identifier: str,
        title: str,
        elements: Dict[str, Any],
        settings: Dict[str, Any]
    ) -> str:
        path = self._form_path(form_identifier)
        existed = path.exists()
        self._write_json(path, {
            "id": form_identifier,
            "title": title,
            "settings": settings,
            "elements": elements,
        })
        logger.info(f"{'Updated' if existed else 'Created'} form {form_identifier} at {path}")
        return form_identifier

    def load_submission(self, form_identifier: str, submission: SubmissionRecord) -> SubmissionResult:
        return self.load_batch(form_identifier, [submission])[0]

    def load_batch(self, form_identifier: str, batch: List[SubmissionRecord]) -> List[SubmissionResult]:
        """Add a batch to the form's submissions document with one read and one write."""
        stored = self._read_submissions(form_identifier)

        results = []
        for submission in batch:
            target_id = f"{form_identifier}:{submission.legacy_submission_id}"
            stored[target_id] = submission_payload(form_identifier, submission)
            results.append(SubmissionResult(
                legacy_submission_id=submission.legacy_submission_id,
                target_id=target_id,
                success=True,
            ))

        self._write_json(self._submissions_path(form_identifier), stored)
        return results

    def list_submission_ids(self, form_identifier: str) -> List[str]:
        return list(self._read_submissions(form_identifier))

    def delete_submission_chunk(self, form_identifier: str, target_ids: List[str]) -> None:
        stored = self._read_submissions(form_identifier)
        for target_id in target_ids:
            stored.pop(target_id, None)
        self._write_json(self._submissions_path(form_identifier), stored)
