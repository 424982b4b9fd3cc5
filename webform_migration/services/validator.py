"""Validation of assembled forms before they are handed to a loader."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..models.form import AssembledForm, TargetFieldDefinition, TargetType
from ..models.errors import ValidationError

logger = logging.getLogger(__name__)

CHOICE_TYPES = {
    TargetType.RADIOS.value,
    TargetType.CHECKBOXES.value,
    TargetType.SELECT.value,
}


@dataclass
class ValidationIssue:
    """A problem found on an assembled form."""
    field: str
    message: str
    severity: str = "error"  # error, warning

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "field": self.field,
            "message": self.message,
            "severity": self.severity,
        }

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class FormValidator:
    """
    Checks an assembled form against what the target accepts.

    Errors (empty title, empty element key) make the form unpersistable;
    warnings (choice elements without options, composites without
    sub-elements) are reported and the form is migrated anyway.
    """

    def validate(self, assembled: AssembledForm) -> List[ValidationIssue]:
        """
        Validate an assembled form.

        Args:
            assembled: The assembled form

        Returns:
            List of issues, errors and warnings
        """
        issues = []

        if not (assembled.title or "").strip():
            issues.append(ValidationIssue(
                field="title",
                message=f"Form {assembled.form_identifier} has an empty title; the target requires a name",
            ))

        for key, definition in assembled.elements.items():
            issues.extend(self._validate_element(key, definition, path=key))

        return issues

    def check(self, assembled: AssembledForm) -> List[ValidationIssue]:
        """
        Validate and raise on the first error.

        Returns:
            The remaining warnings

        Raises:
            ValidationError: if the form has an error-level issue
        """
        issues = self.validate(assembled)
        for issue in issues:
            if issue.severity == "error":
                raise ValidationError(str(issue))
        return issues

    def _validate_element(
        self,
        key: str,
        definition: TargetFieldDefinition,
        path: str
    ) -> List[ValidationIssue]:
        """Validate a single element and its children."""
        issues = []

        if not key:
            issues.append(ValidationIssue(
                field=path or "<root>",
                message=f"Element '{definition.label}' has an empty key",
            ))

        if definition.target_type in CHOICE_TYPES and not definition.properties.get("options"):
            issues.append(ValidationIssue(
                field=path,
                message=f"{definition.target_type} element has no options",
                severity="warning",
            ))

        if (
            definition.target_type == TargetType.CUSTOM_COMPOSITE.value
            and not definition.properties.get("element")
        ):
            issues.append(ValidationIssue(
                field=path,
                message="Composite element has no sub-elements",
                severity="warning",
            ))

        for child_key, child in definition.children.items():
            issues.extend(self._validate_element(child_key, child, path=f"{path}.{child_key}"))

        return issues


def warnings_of(issues: List[ValidationIssue], form_identifier: Optional[str] = None) -> List[str]:
    """Format warning-level issues as report lines."""
    prefix = f"{form_identifier}: " if form_identifier else ""
    return [f"{prefix}{issue}" for issue in issues if issue.severity == "warning"]
