"""Assembly of one legacy form into its target structure."""

import logging
from typing import List, Optional

from ..extractors.base import BaseExtractor
from ..models.legacy import LegacyForm, RawSubmissionRow
from ..models.form import AssembledForm
from ..models.errors import ErrorLog, MissingDataError
from .field_mapper import FieldTypeMapper
from .hierarchy import HierarchyBuilder
from .settings import map_form_settings
from .submissions import SubmissionNormalizer

logger = logging.getLogger(__name__)


class FormAssembler:
    """
    Builds the element tree, settings and submissions of one legacy form.

    Reads from the extractor, never writes anywhere: persisting the
    result (or only reporting it, in simulate mode) is up to the caller.
    Each call is independent, so forms may be assembled in parallel.
    """

    def __init__(
        self,
        extractor: BaseExtractor,
        mapper: Optional[FieldTypeMapper] = None,
        builder: Optional[HierarchyBuilder] = None,
        normalizer: Optional[SubmissionNormalizer] = None
    ):
        """
        Initialize the assembler.

        Args:
            extractor: Legacy data source
            mapper: Component mapper (default token rewrites when omitted)
            builder: Element tree builder
            normalizer: Submission normalizer
        """
        self.extractor = extractor
        self.mapper = mapper or FieldTypeMapper()
        self.builder = builder or HierarchyBuilder()
        self.normalizer = normalizer or SubmissionNormalizer()

    def assemble(
        self,
        form: LegacyForm,
        watermark: int = 0,
        max_submissions: Optional[int] = None
    ) -> AssembledForm:
        """
        Assemble a legacy form.

        Args:
            form: The legacy form
            watermark: Last migrated submission id; older submissions are not read
            max_submissions: 0 disables submissions, N takes the first N
                after the watermark, None takes all

        Returns:
            The assembled form with its notices

        Raises:
            DecodeError: if a component's extra payload is unreadable
            ConnectivityError: if the legacy source fails
        """
        notices = ErrorLog()

        records = self.extractor.fetch_fields(form.form_id)
        definitions = [
            (record.legacy_id, record.parent_legacy_id, self.mapper.map(record))
            for record in records
        ]
        elements = self.builder.build(definitions)
        logger.info(f"Mapped {len(records)} components of {form.form_identifier} ({len(elements)} at the root)")

        assembled = AssembledForm(
            form=form,
            elements=elements,
            settings=map_form_settings(form),
        )

        if max_submissions == 0:
            logger.info(f"Submission import disabled, skipping submissions of {form.form_identifier}")
        else:
            raw_rows = self.extractor.fetch_submission_rows(
                form.form_id,
                after_id=watermark,
                limit=max_submissions,
            )
            if raw_rows:
                assembled.max_submission_id = max(row.submission_id for row in raw_rows)

            if not records:
                self._skip_orphaned(form, raw_rows, notices)
            else:
                assembled.submissions = self.normalizer.normalize(raw_rows, notices)
            logger.info(f"Normalized {len(assembled.submissions)} submissions of {form.form_identifier}")

        assembled.notices = notices.messages
        return assembled

    def _skip_orphaned(
        self,
        form: LegacyForm,
        raw_rows: List[RawSubmissionRow],
        notices: ErrorLog
    ) -> None:
        """Report every submission of a form without components as skipped."""
        for submission_id in sorted({row.submission_id for row in raw_rows}):
            error = MissingDataError(
                f"Submission {submission_id} belongs to {form.form_identifier}, which has no components; skipping it"
            )
            logger.warning(str(error))
            notices.add(str(error))
