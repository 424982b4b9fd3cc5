"""Extractor reading the legacy webform tables through SQLAlchemy."""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError

from .base import BaseExtractor
from .schema import (
    node_table,
    webform_table,
    component_table,
    submissions_table,
    submitted_data_table,
)
from ..models.legacy import LegacyForm, LegacyFieldRecord, RawSubmissionRow
from ..models.errors import ConnectivityError

logger = logging.getLogger(__name__)


class SQLExtractor(BaseExtractor):
    """
    Reads forms, components and submissions from the legacy database.

    Supports any database SQLAlchemy can reach (MySQL, PostgreSQL, SQLite).
    Driver-level failures surface as ConnectivityError and are not retried.
    """

    def __init__(self, database_url: Optional[str] = None, engine: Optional[Engine] = None):
        """
        Initialize the extractor.

        Args:
            database_url: SQLAlchemy URL of the legacy database
            engine: Existing engine to use instead of creating one
        """
        if engine is None and not database_url:
            raise ValueError("SQLExtractor needs a database_url or an engine")
        self.engine = engine or create_engine(database_url)
        self._owns_engine = engine is None

    def _fetch(self, query) -> List[Dict[str, Any]]:
        """Run a query and return its rows as dictionaries."""
        try:
            with self.engine.connect() as conn:
                return [dict(row) for row in conn.execute(query).mappings()]
        except DBAPIError as e:
            raise ConnectivityError(f"Legacy database query failed: {e.orig or e}") from e

    def list_forms(self, form_id: Optional[int] = None) -> List[LegacyForm]:
        query = (
            select(
                webform_table.c.nid,
                node_table.c.title,
                webform_table.c.status,
                webform_table.c.confirmation,
                webform_table.c.redirect_url,
            )
            .select_from(webform_table.outerjoin(node_table, node_table.c.nid == webform_table.c.nid))
            .order_by(webform_table.c.nid)
        )
        if form_id is not None:
            query = query.where(webform_table.c.nid == form_id)

        return [LegacyForm.from_dict(row) for row in self._fetch(query)]

    def fetch_fields(self, form_id: int) -> List[LegacyFieldRecord]:
        query = (
            select(component_table)
            .where(component_table.c.nid == form_id)
            .order_by(component_table.c.weight, component_table.c.cid)
        )
        return [LegacyFieldRecord.from_dict(row) for row in self._fetch(query)]

    def fetch_submission_rows(
        self,
        form_id: int,
        after_id: int = 0,
        limit: Optional[int] = None
    ) -> List[RawSubmissionRow]:
        # Submission ids first so the limit counts submissions, not values
        id_query = (
            select(submissions_table.c.sid)
            .where(submissions_table.c.nid == form_id)
            .where(submissions_table.c.sid > after_id)
            .order_by(submissions_table.c.sid)
        )
        if limit is not None:
            id_query = id_query.limit(limit)

        submission_ids = [row["sid"] for row in self._fetch(id_query)]
        if not submission_ids:
            return []

        s = submissions_table
        d = submitted_data_table
        c = component_table
        query = (
            select(
                s.c.sid,
                s.c.uid,
                s.c.remote_addr,
                s.c.submitted,
                c.c.form_key,
                d.c.data,
            )
            .select_from(
                s.outerjoin(d, d.c.sid == s.c.sid)
                .outerjoin(c, and_(c.c.nid == d.c.nid, c.c.cid == d.c.cid))
            )
            .where(s.c.sid.in_(submission_ids))
            .order_by(s.c.sid, d.c.cid, d.c.no)
        )

        rows = [RawSubmissionRow.from_dict(row) for row in self._fetch(query)]
        logger.debug(f"Fetched {len(rows)} submitted-value rows for {len(submission_ids)} submissions of form {form_id}")
        return rows

    def close(self) -> None:
        if self._owns_engine:
            self.engine.dispose()
