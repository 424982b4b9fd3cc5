"""Read-only snapshots of legacy webform data."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Union


@dataclass(frozen=True)
class LegacyForm:
    """A legacy webform (one per content node)."""
    form_id: int
    title: str
    status: int = 1
    confirmation: str = ""
    redirect_url: str = "<confirmation>"

    @property
    def form_identifier(self) -> str:
        """Identifier of the form on the target."""
        return f"webform_{self.form_id}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "form_id": self.form_id,
            "title": self.title,
            "status": self.status,
            "confirmation": self.confirmation,
            "redirect_url": self.redirect_url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LegacyForm":
        """Create from a row of the legacy form table (joined with its node title)."""
        return cls(
            form_id=int(data.get("nid", data.get("form_id", 0))),
            title=data.get("title") or "",
            status=int(data.get("status", 1) or 0),
            confirmation=data.get("confirmation") or "",
            redirect_url=data.get("redirect_url") or "<confirmation>",
        )


@dataclass(frozen=True)
class LegacyFieldRecord:
    """One row of the legacy component table."""
    legacy_id: int
    key: str
    display_name: str = ""
    type: str = "textfield"
    parent_legacy_id: int = 0
    is_required: bool = False
    default_value: str = ""
    weight: int = 0
    form_id: int = 0
    extra_payload: Optional[Union[str, bytes, Dict[str, Any]]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LegacyFieldRecord":
        """
        Create from a legacy component row.

        Accepts both the legacy column names (cid, pid, form_key, name,
        mandatory, value, extra, nid) and the attribute names of this class.
        """
        def pick(*names, default=None):
            for name in names:
                if name in data and data[name] is not None:
                    return data[name]
            return default

        return cls(
            legacy_id=int(pick("cid", "legacy_id", default=0)),
            key=str(pick("form_key", "key", default="")),
            display_name=str(pick("name", "display_name", default="")),
            type=str(pick("type", default="textfield")),
            parent_legacy_id=int(pick("pid", "parent_legacy_id", default=0)),
            is_required=bool(int(pick("mandatory", "required", "is_required", default=0))),
            default_value=str(pick("value", "default_value", default="")),
            weight=int(pick("weight", default=0)),
            form_id=int(pick("nid", "form_id", default=0)),
            extra_payload=pick("extra", "extra_payload"),
        )


@dataclass(frozen=True)
class RawSubmissionRow:
    """
    One submitted value joined with its submission header.

    A header without any submitted data arrives with ``field_key`` set to
    None (outer join), so empty submissions can be detected and reported.
    """
    submission_id: int
    field_key: Optional[str] = None
    value: Optional[str] = None
    user_id: Optional[int] = None
    remote_addr: Optional[str] = None
    submitted: Optional[Union[int, str, datetime]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RawSubmissionRow":
        """Create from a legacy submitted-data row (sid, form_key, data, uid, remote_addr, submitted)."""
        user_id = data.get("uid", data.get("user_id"))
        return cls(
            submission_id=int(data.get("sid", data.get("submission_id", 0))),
            field_key=data.get("form_key", data.get("field_key")),
            value=data.get("data", data.get("value")),
            user_id=int(user_id) if user_id is not None else None,
            remote_addr=data.get("remote_addr"),
            submitted=data.get("submitted"),
        )
