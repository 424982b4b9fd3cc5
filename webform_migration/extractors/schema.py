"""SQLAlchemy table definitions for the legacy webform tables.

Only the columns the migration reads are declared. Uses SQLAlchemy Core
so the same queries run against MySQL, PostgreSQL and SQLite copies of
the legacy database.
"""

from sqlalchemy import (
    Column,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
    Text,
)

metadata = MetaData()

# === Content nodes carrying a webform ===

node_table = Table(
    "node",
    metadata,
    Column("nid", Integer, primary_key=True),
    Column("title", String(255), nullable=False, default=""),
)

webform_table = Table(
    "webform",
    metadata,
    Column("nid", Integer, primary_key=True),
    Column("confirmation", Text),
    Column("redirect_url", String(255), default="<confirmation>"),
    Column("status", Integer, nullable=False, default=1),
)

# === Components ===

component_table = Table(
    "webform_component",
    metadata,
    Column("nid", Integer, nullable=False),
    Column("cid", Integer, nullable=False),
    Column("pid", Integer, nullable=False, default=0),
    Column("form_key", String(128)),
    Column("name", String(255)),
    Column("type", String(16)),
    Column("value", Text),
    Column("extra", Text),
    Column("mandatory", Integer, nullable=False, default=0),
    Column("weight", Integer, nullable=False, default=0),
    PrimaryKeyConstraint("nid", "cid"),
)

# === Submissions ===

submissions_table = Table(
    "webform_submissions",
    metadata,
    Column("sid", Integer, primary_key=True),
    Column("nid", Integer, nullable=False),
    Column("uid", Integer, nullable=False, default=0),
    Column("submitted", Integer, nullable=False, default=0),
    Column("remote_addr", String(128)),
)

submitted_data_table = Table(
    "webform_submitted_data",
    metadata,
    Column("nid", Integer, nullable=False),
    Column("sid", Integer, nullable=False),
    Column("cid", Integer, nullable=False),
    Column("no", String(128), nullable=False, default="0"),
    Column("data", Text),
    PrimaryKeyConstraint("nid", "sid", "cid", "no"),
)
