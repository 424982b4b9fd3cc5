"""REST loader for a target form service."""

import base64
import time
import logging
import requests
from typing import Any, Dict, List, Optional

from .base import BaseLoader, SubmissionResult, submission_payload
from ..models.form import SubmissionRecord
from ..models.errors import ConnectivityError

logger = logging.getLogger(__name__)


class APILoader(BaseLoader):
    """
    Loader for a REST form service.

    Endpoints, relative to ``base_url``:

    - ``POST /forms`` creates a form; on 409 the form exists and is
      replaced with ``PUT /forms/{id}``
    - ``POST /forms/{id}/submissions`` creates a submission
    - ``GET /forms/{id}/submissions`` lists submission ids
    - ``DELETE /forms/{id}/submissions`` deletes the ids in the body
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        auth_type: str = "bearer",  # bearer, basic, header
        auth_header: str = "Authorization",
        dry_run: bool = False,
        batch_size: int = 100,
        rate_limit: float = 10.0,
        timeout: float = 30.0,
        **kwargs
    ):
        """
        Initialize the API loader.

        Args:
            base_url: Base URL for the API
            api_key: API key for authentication
            auth_type: Type of authentication
            auth_header: Header name for authentication
            dry_run: If True, simulate without making changes
            batch_size: Number of submissions per batch
            rate_limit: Max requests per second
            timeout: Request timeout in seconds
        """
        super().__init__(dry_run=dry_run, batch_size=batch_size, **kwargs)
        if not base_url:
            raise ValueError("APILoader needs a base_url")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.auth_type = auth_type
        self.auth_header = auth_header
        self.rate_limit = rate_limit
        self.timeout = timeout
        self._last_request_time = 0.0
        self._session = self._create_session()

    def _create_session(self) -> requests.Session:
        """Create a requests session with authentication."""
        session = requests.Session()

        if self.api_key:
            if self.auth_type == "bearer":
                session.headers["Authorization"] = f"Bearer {self.api_key}"
            elif self.auth_type == "basic":
                credentials = base64.b64encode(f"{self.api_key}:".encode()).decode()
                session.headers["Authorization"] = f"Basic {credentials}"
            elif self.auth_type == "header":
                session.headers[self.auth_header] = self.api_key

        session.headers["Content-Type"] = "application/json"

        return session

    def _rate_limit_wait(self):
        """Wait to respect rate limits."""
        if self.rate_limit > 0:
            elapsed = time.time() - self._last_request_time
            wait_time = (1.0 / self.rate_limit) - elapsed
            if wait_time > 0:
                time.sleep(wait_time)
        self._last_request_time = time.time()

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        """Send a request, turning transport failures into ConnectivityError."""
        self._rate_limit_wait()
        url = f"{self.base_url}{path}"
        try:
            return self._session.request(method, url, timeout=self.timeout, **kwargs)
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            raise ConnectivityError(f"Target API unreachable ({method} {url}): {e}") from e

    def write_form(
        self,
        form_identifier: str,
        title: str,
        elements: Dict[str, Any],
        settings: Dict[str, Any]
    ) -> str:
        document = {
            "id": form_identifier,
            "title": title,
            "elements": elements,
            "settings": settings,
        }

        # Try POST first (create)
        response = self._request("POST", "/forms", json=document)
        if response.status_code == 409:
            # Conflict - the form exists, update it
            response = self._request("PUT", f"/forms/{form_identifier}", json=document)
            logger.info(f"Updated form {form_identifier}")
        else:
            logger.info(f"Created form {form_identifier}")

        response.raise_for_status()
        return form_identifier

    def load_submission(self, form_identifier: str, submission: SubmissionRecord) -> SubmissionResult:
        """Create a single submission through the API."""
        response = self._request(
            "POST",
            f"/forms/{form_identifier}/submissions",
            json=submission_payload(form_identifier, submission),
        )

        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            error_msg = str(e)
            try:
                error_data = e.response.json()
                error_msg = error_data.get("message") or error_data.get("error") or str(error_data)
            except ValueError:
                pass

            return SubmissionResult(
                legacy_submission_id=submission.legacy_submission_id,
                success=False,
                error=error_msg,
                error_code=str(e.response.status_code),
            )

        response_data = response.json() if response.text else {}
        target_id = (
            response_data.get("id") or
            response_data.get("data", {}).get("id") or
            submission.legacy_submission_id
        )

        return SubmissionResult(
            legacy_submission_id=submission.legacy_submission_id,
            target_id=str(target_id),
            success=True,
        )

    def list_submission_ids(self, form_identifier: str) -> List[str]:
        response = self._request("GET", f"/forms/{form_identifier}/submissions")
        if response.status_code == 404:
            return []
        response.raise_for_status()

        data = response.json() if response.text else []
        if isinstance(data, dict):
            data = data.get("data", [])
        return [str(item["id"]) if isinstance(item, dict) else str(item) for item in data]

    def delete_submission_chunk(self, form_identifier: str, target_ids: List[str]) -> None:
        response = self._request(
            "DELETE",
            f"/forms/{form_identifier}/submissions",
            json={"ids": target_ids},
        )
        response.raise_for_status()

    def validate_connection(self) -> bool:
        """Validate connection to the API."""
        try:
            response = self._request("GET", "")
            return response.status_code < 500
        except ConnectivityError as e:
            logger.error(f"API connection validation failed: {e}")
            return False
