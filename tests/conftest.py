"""Shared pytest fixtures for the webform migration tests."""

from typing import Any, Dict, List

import phpserialize
import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from webform_migration.extractors.schema import (
    metadata,
    node_table,
    webform_table,
    component_table,
    submissions_table,
    submitted_data_table,
)
from webform_migration.models.legacy import LegacyFieldRecord


def php(data: Dict[str, Any]) -> str:
    """Serialize a mapping the way the legacy system stores component extras."""
    return phpserialize.dumps(data).decode("utf-8")


def component(cid: int, form_key: str, type: str = "textfield", pid: int = 0, **kwargs) -> Dict[str, Any]:
    """A legacy component row."""
    row = {
        "nid": kwargs.pop("nid", 1),
        "cid": cid,
        "pid": pid,
        "form_key": form_key,
        "name": kwargs.pop("name", form_key.replace("_", " ").title()),
        "type": type,
        "value": kwargs.pop("value", ""),
        "extra": kwargs.pop("extra", php({})),
        "mandatory": kwargs.pop("mandatory", 0),
        "weight": kwargs.pop("weight", 0),
    }
    row.update(kwargs)
    return row


def record(cid: int, form_key: str, type: str = "textfield", pid: int = 0, **kwargs) -> LegacyFieldRecord:
    """A LegacyFieldRecord built from a component row."""
    return LegacyFieldRecord.from_dict(component(cid, form_key, type, pid, **kwargs))


# ---------------------------------------------------------------------------
# Legacy data
# ---------------------------------------------------------------------------
@pytest.fixture
def legacy_dump() -> Dict[str, List[Dict[str, Any]]]:
    """Two webforms: a contact form with a fieldset, and an empty survey."""
    return {
        "node": [
            {"nid": 1, "title": "Contact us"},
            {"nid": 2, "title": "Survey"},
        ],
        "webform": [
            {"nid": 1, "status": 1, "confirmation": "Thanks!", "redirect_url": "<confirmation>"},
            {"nid": 2, "status": 0, "confirmation": "", "redirect_url": "<none>"},
        ],
        "webform_component": [
            component(1, "name", weight=0, mandatory=1, value="%username"),
            component(2, "details", type="fieldset", weight=1),
            component(3, "email", type="email", pid=2, weight=0),
            component(
                4, "topic", type="select", weight=2,
                extra=php({"items": "sales|Sales\nsupport|Support", "multiple": 0, "aslist": 1}),
            ),
        ],
        "webform_submissions": [
            {"nid": 1, "sid": 10, "uid": 5, "submitted": 1500000000, "remote_addr": "10.0.0.1"},
            {"nid": 1, "sid": 11, "uid": 0, "submitted": 1500000100, "remote_addr": "10.0.0.2"},
            {"nid": 1, "sid": 12, "uid": 0, "submitted": 1500000200, "remote_addr": "10.0.0.3"},
            {"nid": 2, "sid": 13, "uid": 0, "submitted": 1500000300, "remote_addr": "10.0.0.4"},
        ],
        "webform_submitted_data": [
            {"nid": 1, "sid": 10, "cid": 1, "no": "0", "data": "Ada"},
            {"nid": 1, "sid": 10, "cid": 3, "no": "0", "data": "ada@example.com"},
            {"nid": 1, "sid": 10, "cid": 4, "no": "0", "data": "sales"},
            {"nid": 1, "sid": 11, "cid": 1, "no": "0", "data": "Grace"},
            {"nid": 2, "sid": 13, "cid": 1, "no": "0", "data": "orphan"},
        ],
    }


@pytest.fixture
def legacy_engine(legacy_dump):
    """In-memory SQLite copy of the legacy tables, filled from legacy_dump."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    metadata.create_all(engine)

    tables = {
        "node": node_table,
        "webform": webform_table,
        "webform_component": component_table,
        "webform_submissions": submissions_table,
        "webform_submitted_data": submitted_data_table,
    }
    with engine.begin() as conn:
        for name, table in tables.items():
            if legacy_dump[name]:
                conn.execute(table.insert(), legacy_dump[name])

    yield engine
    engine.dispose()
