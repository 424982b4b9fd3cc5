"""
Webform Migration

A bulk, offline migration toolkit for moving legacy webforms and their
submitted data from a flat relational schema (one row per component, one
row per submitted value) into a hierarchical, typed form schema.

Supports:
- Legacy sources: relational database (SQLAlchemy) or JSON table dumps
- Per-type component mapping, including grid and wizard-page expansion
- Parent/child component hierarchy reconstruction
- Submission normalization with an incremental watermark
- Targets: REST API or JSON documents on disk
- Simulated (dry) runs
"""

__version__ = "0.1.0"
