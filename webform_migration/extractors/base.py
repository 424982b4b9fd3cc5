"""Base extractor interface for legacy data sources."""

from abc import ABC, abstractmethod
from typing import List, Optional
import logging

from ..models.legacy import LegacyForm, LegacyFieldRecord, RawSubmissionRow
from ..models.errors import MissingDataError

logger = logging.getLogger(__name__)


class BaseExtractor(ABC):
    """
    Base class for legacy data sources.

    Extractors only read: they list forms, fetch a form's components in
    declared weight order, and fetch raw submitted-value rows above the
    watermark. All reshaping happens in the services.
    """

    @abstractmethod
    def list_forms(self, form_id: Optional[int] = None) -> List[LegacyForm]:
        """
        List legacy forms.

        Args:
            form_id: Restrict to a single form

        Returns:
            Forms in ascending form id order
        """
        pass

    @abstractmethod
    def fetch_fields(self, form_id: int) -> List[LegacyFieldRecord]:
        """
        Fetch a form's components ordered by weight, then legacy id.

        Args:
            form_id: Legacy form id

        Returns:
            List of component rows
        """
        pass

    @abstractmethod
    def fetch_submission_rows(
        self,
        form_id: int,
        after_id: int = 0,
        limit: Optional[int] = None
    ) -> List[RawSubmissionRow]:
        """
        Fetch submitted-value rows of submissions with id above ``after_id``.

        Args:
            form_id: Legacy form id
            after_id: Watermark; only submissions with a greater id are returned
            limit: Maximum number of submissions (not rows), None for all

        Returns:
            Rows ordered by submission id. A submission without any submitted
            value yields one row with ``field_key`` None.
        """
        pass

    def test_connection(self) -> List[LegacyForm]:
        """
        Check the source is reachable and holds at least one form.

        Returns:
            The legacy forms

        Raises:
            ConnectivityError: if the source cannot be reached
            MissingDataError: if no form exists
        """
        forms = self.list_forms()
        if not forms:
            raise MissingDataError("Could not find any webform in the legacy system")
        logger.info(f"Connected to legacy source, found {len(forms)} webform(s)")
        return forms

    def close(self) -> None:
        """Release any held resources."""
