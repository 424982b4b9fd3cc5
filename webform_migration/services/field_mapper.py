"""Mapping of legacy components to typed target field definitions."""

import re
import logging
from typing import Any, Callable, Dict, Optional

from ..models.legacy import LegacyFieldRecord
from ..models.form import TargetFieldDefinition, TargetType
from ..models.errors import DecodeError
from .payload import decode_payload, as_bool, as_text, split_lines

logger = logging.getLogger(__name__)

TIME_FORMAT_12_HOUR = "g:i A"

# Exact-match rewrites of legacy default-value placeholders. Values that are
# not exactly one of these keys pass through unchanged.
DEFAULT_TOKEN_REWRITES = {
    "%username": "[current-user:display-name]",
    "[current-user:name]": "[current-user:display-name]",
    "%profile[profile_name]": "[current-user:display-name]",
    "%profile[profile_location]": "[current-user:field_location]",
    "[current-user:profile-location]": "[current-user:field_location]",
    "%profile[profile_title]": "[current-user:field_title]",
    "[current-user:profile-title]": "[current-user:field_title]",
}

NON_KEY_CHARACTERS = re.compile(r"[^A-Za-z0-9 ]")


def parse_options(items: Any) -> Dict[str, str]:
    """
    Parse a legacy option list: one "key|Label" line per option.

    A line without a separator uses its text as both key and label.
    """
    options = {}
    for line in split_lines(items):
        key, separator, label = line.partition("|")
        if separator:
            options[key.strip()] = label.strip()
        else:
            options[line.strip()] = line.strip()
    return options


def grid_question_key(question: str) -> str:
    """
    Derive a sub-element key from a grid question.

    'How was it?' -> 'how_was_it', 'Rate 1-5!' -> 'rate_15'
    """
    base = NON_KEY_CHARACTERS.sub("", question.strip())
    return base.lower().replace(" ", "_")


class FieldTypeMapper:
    """
    Maps one legacy component to one target field definition.

    Every record gets the base mapping (label, type, required, default value,
    description); the rule registered for its legacy type then overrides it.
    Mapping is pure: no I/O, same record in, same definition out.
    """

    def __init__(self, token_rewrites: Optional[Dict[str, str]] = None):
        """
        Initialize the mapper.

        Args:
            token_rewrites: Extra exact-match token rewrites, merged over the built-ins
        """
        self.token_rewrites = dict(DEFAULT_TOKEN_REWRITES)
        if token_rewrites:
            self.token_rewrites.update(token_rewrites)
        self._type_rules = self._register_type_rules()

    def _register_type_rules(self) -> Dict[str, Callable]:
        """Register the per-legacy-type mapping rules."""
        return {
            "select": self._map_select,
            "file": self._map_file,
            "time": self._map_time,
            "markup": self._map_markup,
            "pagebreak": self._map_pagebreak,
            "grid": self._map_grid,
        }

    def map(self, record: LegacyFieldRecord) -> TargetFieldDefinition:
        """
        Map a legacy component.

        Args:
            record: The legacy component row

        Returns:
            The target field definition (without children)

        Raises:
            DecodeError: if the component's extra payload cannot be decoded
        """
        try:
            extra = decode_payload(record.extra_payload)
        except DecodeError as e:
            raise DecodeError(str(e), field_key=record.key, legacy_id=record.legacy_id) from e

        definition = TargetFieldDefinition(
            key=record.key,
            label=record.display_name,
            target_type=record.type,
            required=record.is_required,
            default_value=self.token_rewrite(record.default_value),
            description=as_text(extra.get("description")),
        )

        rule = self._type_rules.get(record.type)
        if rule:
            rule(definition, record, extra)

        return definition

    def token_rewrite(self, value: Optional[str]) -> str:
        """Rewrite a legacy placeholder token to its target equivalent."""
        if value is None:
            return ""
        return self.token_rewrites.get(value, value)

    # Per-type rules

    def _map_select(self, definition: TargetFieldDefinition, record: LegacyFieldRecord, extra: Dict[str, Any]) -> None:
        """Pick radios, checkboxes or select from the option count and list flags."""
        options = parse_options(extra.get("items"))
        item_count = len(split_lines(extra.get("items")))
        multiple = as_bool(extra.get("multiple"))
        aslist = as_bool(extra.get("aslist"))

        if (item_count == 1 and multiple) or (not multiple and not aslist):
            definition.target_type = TargetType.RADIOS.value
        elif item_count > 1 and multiple and not aslist:
            definition.target_type = TargetType.CHECKBOXES.value

        definition.properties["options"] = options

    def _map_file(self, definition: TargetFieldDefinition, record: LegacyFieldRecord, extra: Dict[str, Any]) -> None:
        definition.target_type = TargetType.MANAGED_FILE.value

    def _map_time(self, definition: TargetFieldDefinition, record: LegacyFieldRecord, extra: Dict[str, Any]) -> None:
        definition.target_type = TargetType.TIME.value
        definition.properties["time_format"] = TIME_FORMAT_12_HOUR

    def _map_markup(self, definition: TargetFieldDefinition, record: LegacyFieldRecord, extra: Dict[str, Any]) -> None:
        """Markup carries its content as markup, never as a default value."""
        definition.target_type = TargetType.MARKUP.value
        definition.properties["admin_title"] = definition.label
        definition.properties["markup"] = record.default_value
        definition.default_value = None

    def _map_pagebreak(self, definition: TargetFieldDefinition, record: LegacyFieldRecord, extra: Dict[str, Any]) -> None:
        definition.target_type = TargetType.WIZARD_PAGE.value
        definition.properties["open"] = True
        definition.properties["prev_button_label"] = "Prev"
        definition.properties["next_button_label"] = "Next"

    def _map_grid(self, definition: TargetFieldDefinition, record: LegacyFieldRecord, extra: Dict[str, Any]) -> None:
        """Expand a grid into a composite holding one radios sub-element per question."""
        definition.target_type = TargetType.CUSTOM_COMPOSITE.value
        definition.properties["allow_multiple"] = False
        definition.properties["allow_multiple_header"] = False
        definition.properties["allow_multiple_sorting"] = False
        definition.properties["allow_multiple_operations"] = False

        options = {value: value for value in split_lines(extra.get("options"))}

        elements: Dict[str, Dict[str, Any]] = {}
        for question in split_lines(extra.get("questions")):
            key = grid_question_key(question)
            if key in elements:
                # Colliding questions overwrite each other
                logger.warning(
                    f"Grid {record.key}: question '{question}' reuses sub-element key '{key}', "
                    f"replacing '{elements[key]['label']}'"
                )
            elements[key] = {
                "type": TargetType.RADIOS.value,
                "options": dict(options),
                "label": question,
            }

        definition.properties["element"] = elements
