"""Extractor reading a JSON dump of the legacy webform tables."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .base import BaseExtractor
from ..models.legacy import LegacyForm, LegacyFieldRecord, RawSubmissionRow
from ..models.errors import ConnectivityError

logger = logging.getLogger(__name__)

TABLES = (
    "node",
    "webform",
    "webform_component",
    "webform_submissions",
    "webform_submitted_data",
)


class JSONExtractor(BaseExtractor):
    """
    Extractor for JSON exports of the legacy tables.

    The dump is an object keyed by table name, each holding a list of rows
    with the legacy column names:

        {"node": [{"nid": 1, "title": "Contact"}],
         "webform": [{"nid": 1, "status": 1, ...}],
         "webform_component": [...],
         "webform_submissions": [...],
         "webform_submitted_data": [...]}

    A ``title`` on a webform row is used when there is no node table.
    """

    def __init__(self, source: Union[str, Path, Dict[str, Any]], encoding: str = "utf-8"):
        """
        Initialize the JSON extractor.

        Args:
            source: Path of the dump file, or the already-loaded dump
            encoding: File encoding
        """
        self.source = source
        self.encoding = encoding
        self._tables: Optional[Dict[str, List[Dict[str, Any]]]] = None

    @property
    def tables(self) -> Dict[str, List[Dict[str, Any]]]:
        """Get the dump tables, loading the file on first use."""
        if self._tables is None:
            self._tables = self._load()
        return self._tables

    def _load(self) -> Dict[str, List[Dict[str, Any]]]:
        if isinstance(self.source, dict):
            data = self.source
        else:
            path = Path(self.source)
            if not path.exists():
                raise ConnectivityError(f"Legacy dump not found: {path}")
            logger.info(f"Processing file: {path}")
            with open(path, 'r', encoding=self.encoding) as f:
                data = json.load(f)

        return {table: list(data.get(table, [])) for table in TABLES}

    def list_forms(self, form_id: Optional[int] = None) -> List[LegacyForm]:
        titles = {int(row["nid"]): row.get("title", "") for row in self.tables["node"]}

        forms = []
        for row in self.tables["webform"]:
            nid = int(row["nid"])
            if form_id is not None and nid != form_id:
                continue
            data = dict(row)
            data["title"] = titles.get(nid, row.get("title", ""))
            forms.append(LegacyForm.from_dict(data))

        return sorted(forms, key=lambda form: form.form_id)

    def fetch_fields(self, form_id: int) -> List[LegacyFieldRecord]:
        records = [
            LegacyFieldRecord.from_dict(row)
            for row in self.tables["webform_component"]
            if int(row["nid"]) == form_id
        ]
        return sorted(records, key=lambda record: (record.weight, record.legacy_id))

    def fetch_submission_rows(
        self,
        form_id: int,
        after_id: int = 0,
        limit: Optional[int] = None
    ) -> List[RawSubmissionRow]:
        headers = sorted(
            (
                row for row in self.tables["webform_submissions"]
                if int(row["nid"]) == form_id and int(row["sid"]) > after_id
            ),
            key=lambda row: int(row["sid"]),
        )
        if limit is not None:
            headers = headers[:limit]

        form_keys = {
            int(row["cid"]): row.get("form_key")
            for row in self.tables["webform_component"]
            if int(row["nid"]) == form_id
        }

        values_by_sid: Dict[int, List[Dict[str, Any]]] = {}
        for row in self.tables["webform_submitted_data"]:
            values_by_sid.setdefault(int(row["sid"]), []).append(row)

        rows = []
        for header in headers:
            sid = int(header["sid"])
            data_rows = sorted(
                values_by_sid.get(sid, []),
                key=lambda row: (int(row["cid"]), str(row.get("no", "0"))),
            )
            if not data_rows:
                rows.append(RawSubmissionRow.from_dict(header))
                continue
            for data_row in data_rows:
                rows.append(RawSubmissionRow.from_dict({
                    **header,
                    "form_key": form_keys.get(int(data_row["cid"])),
                    "data": data_row.get("data"),
                }))

        return rows
