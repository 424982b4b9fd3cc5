"""Tests for webform_migration.services.field_mapper."""

import pytest

from conftest import php, record
from webform_migration.models.errors import DecodeError
from webform_migration.services.field_mapper import (
    FieldTypeMapper,
    grid_question_key,
    parse_options,
)


@pytest.fixture
def mapper():
    return FieldTypeMapper()


# ---------------------------------------------------------------------------
# Base mapping
# ---------------------------------------------------------------------------
class TestBaseMapping:
    """Every component gets label, type, required, default and description."""

    def test_identity_type_for_unmapped_types(self, mapper):
        definition = mapper.map(record(1, "email", type="email", name="E-mail"))
        assert definition.key == "email"
        assert definition.label == "E-mail"
        assert definition.target_type == "email"

    def test_required_and_description(self, mapper):
        definition = mapper.map(record(
            1, "phone", mandatory=1, extra=php({"description": "Daytime number"}),
        ))
        assert definition.required is True
        assert definition.description == "Daytime number"

    def test_json_payload_accepted(self, mapper):
        definition = mapper.map(record(1, "phone", extra='{"description": "From JSON"}'))
        assert definition.description == "From JSON"

    def test_empty_payload_is_empty_mapping(self, mapper):
        definition = mapper.map(record(1, "phone", extra=None))
        assert definition.description == ""
        assert definition.properties == {}


# ---------------------------------------------------------------------------
# select
# ---------------------------------------------------------------------------
class TestSelectMapping:
    """Option count and list flags pick radios, checkboxes or select."""

    @pytest.mark.parametrize("items,multiple,aslist,expected", [
        ("a|A", 1, 0, "radios"),
        ("a|A", 1, 1, "radios"),
        ("a|A\nb|B", 0, 0, "radios"),
        ("a|A", 0, 0, "radios"),
        ("a|A\nb|B", 1, 0, "checkboxes"),
        ("a|A\nb|B\nc|C", 1, 0, "checkboxes"),
        ("a|A\nb|B", 1, 1, "select"),
        ("a|A\nb|B", 0, 1, "select"),
        ("a|A", 0, 1, "select"),
        ("", 1, 0, "select"),
    ])
    def test_select_type_matrix(self, mapper, items, multiple, aslist, expected):
        definition = mapper.map(record(
            1, "choice", type="select",
            extra=php({"items": items, "multiple": multiple, "aslist": aslist}),
        ))
        assert definition.target_type == expected

    def test_blank_item_lines_are_not_counted(self, mapper):
        definition = mapper.map(record(
            1, "choice", type="select",
            extra=php({"items": "a|A\r\n\r\n  \n", "multiple": 1, "aslist": 0}),
        ))
        assert definition.target_type == "radios"

    def test_string_flags(self, mapper):
        definition = mapper.map(record(
            1, "choice", type="select",
            extra=php({"items": "a|A\nb|B", "multiple": "1", "aslist": "0"}),
        ))
        assert definition.target_type == "checkboxes"

    def test_options_are_parsed(self, mapper):
        definition = mapper.map(record(
            1, "choice", type="select",
            extra=php({"items": "sales|Sales\nsupport|Support", "aslist": 1}),
        ))
        assert definition.properties["options"] == {"sales": "Sales", "support": "Support"}


def test_parse_options_without_separator():
    assert parse_options("Red\nblue|Blue\r\n") == {"Red": "Red", "blue": "Blue"}


# ---------------------------------------------------------------------------
# Other per-type rules
# ---------------------------------------------------------------------------
class TestTypeRules:

    def test_file(self, mapper):
        assert mapper.map(record(1, "cv", type="file")).target_type == "managed_file"

    def test_time(self, mapper):
        definition = mapper.map(record(1, "at", type="time"))
        assert definition.target_type == "time"
        assert definition.properties["time_format"] == "g:i A"

    def test_markup_clears_default_and_keeps_label(self, mapper):
        definition = mapper.map(record(1, "intro", type="markup", name="Intro text", value="<p>Hello</p>"))
        assert definition.target_type == "markup"
        assert definition.default_value is None
        assert definition.properties["admin_title"] == "Intro text"
        assert definition.properties["markup"] == "<p>Hello</p>"

    def test_markup_renders_without_default_value(self, mapper):
        element = mapper.map(record(1, "intro", type="markup", value="<p>Hi</p>")).to_elements()
        assert "#default_value" not in element
        assert element["#markup"] == "<p>Hi</p>"

    def test_pagebreak(self, mapper):
        definition = mapper.map(record(1, "page_2", type="pagebreak"))
        assert definition.target_type == "wizard_page"
        assert definition.properties == {
            "open": True,
            "prev_button_label": "Prev",
            "next_button_label": "Next",
        }


# ---------------------------------------------------------------------------
# grid
# ---------------------------------------------------------------------------
class TestGridMapping:

    @pytest.mark.parametrize("question,key", [
        ("How was it?", "how_was_it"),
        ("Rate 1-5!", "rate_15"),
        ("  Clean?  ", "clean"),
        ("Fast?", "fast"),
    ])
    def test_question_keys(self, question, key):
        assert grid_question_key(question) == key

    def test_grid_expands_to_radios(self, mapper):
        definition = mapper.map(record(
            1, "rating", type="grid",
            extra=php({"options": "Yes\nNo", "questions": "Clean?\nFast?"}),
        ))
        assert definition.target_type == "custom_composite"
        assert definition.properties["allow_multiple"] is False
        assert definition.properties["allow_multiple_header"] is False
        assert definition.properties["allow_multiple_sorting"] is False
        assert definition.properties["allow_multiple_operations"] is False

        elements = definition.properties["element"]
        assert list(elements) == ["clean", "fast"]
        for key, label in (("clean", "Clean?"), ("fast", "Fast?")):
            assert elements[key]["type"] == "radios"
            assert elements[key]["options"] == {"Yes": "Yes", "No": "No"}
            assert elements[key]["label"] == label

    def test_cr_is_stripped_from_lines(self, mapper):
        definition = mapper.map(record(
            1, "rating", type="grid",
            extra=php({"options": "Yes\r\nNo\r\n", "questions": "Clean?\r\n"}),
        ))
        assert definition.properties["element"]["clean"]["label"] == "Clean?"
        assert definition.properties["element"]["clean"]["options"] == {"Yes": "Yes", "No": "No"}

    def test_colliding_question_keys_last_wins(self, mapper):
        definition = mapper.map(record(
            1, "rating", type="grid",
            extra=php({"options": "Yes", "questions": "Clean?\nClean!"}),
        ))
        elements = definition.properties["element"]
        assert list(elements) == ["clean"]
        assert elements["clean"]["label"] == "Clean!"


# ---------------------------------------------------------------------------
# Tokens and errors
# ---------------------------------------------------------------------------
class TestTokenRewrite:

    @pytest.mark.parametrize("legacy,expected", [
        ("%username", "[current-user:display-name]"),
        ("[current-user:name]", "[current-user:display-name]"),
        ("%profile[profile_location]", "[current-user:field_location]"),
        ("%profile[profile_title]", "[current-user:field_title]"),
    ])
    def test_known_tokens(self, mapper, legacy, expected):
        assert mapper.map(record(1, "who", value=legacy)).default_value == expected

    def test_partial_match_passes_through(self, mapper):
        assert mapper.token_rewrite("Hello %username") == "Hello %username"

    def test_custom_rewrites_merge_over_builtins(self):
        mapper = FieldTypeMapper(token_rewrites={"%email": "[current-user:mail]"})
        assert mapper.token_rewrite("%email") == "[current-user:mail]"
        assert mapper.token_rewrite("%username") == "[current-user:display-name]"


class TestDecodeErrors:

    def test_garbage_payload(self, mapper):
        with pytest.raises(DecodeError) as excinfo:
            mapper.map(record(7, "broken", type="select", extra="not a payload"))
        assert excinfo.value.field_key == "broken"
        assert excinfo.value.legacy_id == 7
        assert "broken" in str(excinfo.value)

    def test_non_mapping_payload(self, mapper):
        with pytest.raises(DecodeError):
            mapper.map(record(1, "broken", extra='s:3:"abc";'))

    def test_invalid_json(self, mapper):
        with pytest.raises(DecodeError):
            mapper.map(record(1, "broken", extra="{not json"))
