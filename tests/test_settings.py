"""Tests for webform_migration.services.settings."""

import pytest

from webform_migration.models.legacy import LegacyForm
from webform_migration.services.settings import confirmation_type, map_form_settings


@pytest.mark.parametrize("redirect,message,expected", [
    ("<none>", "Thanks", "inline"),
    ("<confirmation>", "Thanks", "page"),
    ("", "", "page"),
    ("https://example.com/thanks", "Thanks", "url_message"),
    ("https://example.com/thanks", "", "url"),
])
def test_confirmation_type(redirect, message, expected):
    form = LegacyForm(form_id=1, title="Contact", confirmation=message, redirect_url=redirect)
    assert confirmation_type(form) == expected


def test_open_form_settings():
    form = LegacyForm(form_id=1, title="Contact", status=1, confirmation="Thanks!")
    assert map_form_settings(form) == {
        "status": "open",
        "confirmation_type": "page",
        "confirmation_message": "Thanks!",
    }


def test_closed_form_with_redirect():
    form = LegacyForm(form_id=1, title="Contact", status=0, redirect_url="https://example.com/done")
    settings = map_form_settings(form)
    assert settings["status"] == "closed"
    assert settings["confirmation_type"] == "url"
    assert settings["confirmation_url"] == "https://example.com/done"
