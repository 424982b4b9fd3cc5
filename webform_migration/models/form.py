"""Target-side models: typed field definitions, submissions and assembled forms."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .legacy import LegacyForm


class TargetType(str, Enum):
    """Element types produced by the component mapper for remapped legacy types."""
    RADIOS = "radios"
    CHECKBOXES = "checkboxes"
    SELECT = "select"
    MANAGED_FILE = "managed_file"
    TIME = "time"
    MARKUP = "markup"
    WIZARD_PAGE = "wizard_page"
    CUSTOM_COMPOSITE = "custom_composite"


@dataclass
class TargetFieldDefinition:
    """A migrated form element, possibly holding nested child elements."""
    key: str
    label: str
    target_type: str
    required: bool = False
    default_value: Optional[str] = ""  # None when the element carries no default
    description: str = ""
    properties: Dict[str, Any] = field(default_factory=dict)
    children: Dict[str, "TargetFieldDefinition"] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        result = {
            "key": self.key,
            "label": self.label,
            "target_type": self.target_type,
            "required": self.required,
            "description": self.description,
        }
        if self.default_value is not None:
            result["default_value"] = self.default_value
        if self.properties:
            result["properties"] = self.properties
        if self.children:
            result["children"] = [child.to_dict() for child in self.children.values()]
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TargetFieldDefinition":
        """Create from dictionary representation."""
        children = {}
        for child_data in data.get("children", []):
            child = cls.from_dict(child_data)
            children[child.key] = child

        return cls(
            key=data.get("key", ""),
            label=data.get("label", ""),
            target_type=data.get("target_type", ""),
            required=data.get("required", False),
            default_value=data.get("default_value"),
            description=data.get("description", ""),
            properties=dict(data.get("properties", {})),
            children=children,
        )

    def to_elements(self) -> Dict[str, Any]:
        """
        Render as a target-schema element.

        Element attributes are prefixed with '#'; child elements sit next to
        them under their own keys.
        """
        element = {
            "#title": self.label,
            "#type": self.target_type,
            "#required": self.required,
            "#description": self.description,
        }
        if self.default_value is not None:
            element["#default_value"] = self.default_value
        for name, value in self.properties.items():
            element[f"#{name}"] = value
        for key, child in self.children.items():
            element[key] = child.to_elements()
        return element


def render_elements(elements: Dict[str, TargetFieldDefinition]) -> Dict[str, Any]:
    """Render a root-level element mapping in the target schema."""
    return {key: definition.to_elements() for key, definition in elements.items()}


@dataclass
class SubmissionRecord:
    """One legacy submission, reshaped into values keyed by element key."""
    legacy_submission_id: int
    values: Dict[str, Optional[str]] = field(default_factory=dict)
    user_id: Optional[int] = None
    remote_addr: Optional[str] = None
    submitted: Optional[datetime] = None

    @property
    def metadata(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "remote_addr": self.remote_addr,
            "submitted": self.submitted,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "legacy_submission_id": self.legacy_submission_id,
            "values": self.values,
            "metadata": {
                "user_id": self.user_id,
                "remote_addr": self.remote_addr,
                "submitted": self.submitted.isoformat() if self.submitted else None,
            },
        }


@dataclass
class AssembledForm:
    """A legacy form assembled into its target structure, ready for hand-off."""
    form: LegacyForm
    elements: Dict[str, TargetFieldDefinition] = field(default_factory=dict)
    settings: Dict[str, Any] = field(default_factory=dict)
    submissions: List[SubmissionRecord] = field(default_factory=list)
    notices: List[str] = field(default_factory=list)
    # Highest legacy submission id seen, including dropped empty submissions
    max_submission_id: Optional[int] = None

    @property
    def form_identifier(self) -> str:
        return self.form.form_identifier

    @property
    def title(self) -> str:
        return self.form.title

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "form_identifier": self.form_identifier,
            "title": self.title,
            "settings": self.settings,
            "elements": render_elements(self.elements),
            "submissions": [s.to_dict() for s in self.submissions],
            "notices": self.notices,
        }
