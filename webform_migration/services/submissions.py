"""Reshaping of flat submitted-value rows into per-submission records."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from dateutil import parser as date_parser

from ..models.legacy import RawSubmissionRow
from ..models.form import SubmissionRecord
from ..models.errors import ErrorLog

logger = logging.getLogger(__name__)


class SubmissionNormalizer:
    """
    Groups raw submitted-value rows by submission id.

    Rows are assumed to be already filtered by the source (form, watermark,
    row limit). Submitter metadata is repeated on every row of a submission;
    the first instance is kept.
    """

    def normalize(
        self,
        raw_rows: Iterable[RawSubmissionRow],
        notices: Optional[ErrorLog] = None
    ) -> List[SubmissionRecord]:
        """
        Normalize raw rows into submission records.

        Args:
            raw_rows: Submitted-value rows; header-only rows have field_key None
            notices: Log receiving a notice for every dropped submission

        Returns:
            Submission records in ascending legacy submission id order.
            Submissions without any submitted value are dropped.
        """
        records: Dict[int, SubmissionRecord] = {}

        for row in raw_rows:
            record = records.get(row.submission_id)
            if record is None:
                record = SubmissionRecord(
                    legacy_submission_id=row.submission_id,
                    user_id=row.user_id,
                    remote_addr=row.remote_addr,
                    submitted=parse_timestamp(row.submitted),
                )
                records[row.submission_id] = record

            if row.field_key is None:
                continue
            if row.field_key in record.values:
                logger.debug(
                    f"Submission {row.submission_id}: several values for '{row.field_key}', keeping the last"
                )
            record.values[row.field_key] = row.value

        result = []
        for submission_id in sorted(records):
            record = records[submission_id]
            if not record.values:
                message = (
                    f"Submission {submission_id} has no associated data in the legacy system; ignoring it"
                )
                logger.warning(message)
                if notices is not None:
                    notices.add(message)
                continue
            result.append(record)

        return result


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Convert a legacy submission timestamp (unix epoch, ISO string or datetime) to UTC."""
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    if isinstance(value, (int, float)) or (isinstance(value, str) and value.strip().isdigit()):
        return datetime.fromtimestamp(int(value), tz=timezone.utc)

    try:
        parsed = date_parser.parse(str(value))
    except (ValueError, OverflowError) as e:
        logger.warning(f"Unparseable submission timestamp {value!r}: {e}")
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
