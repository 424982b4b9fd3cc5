"""Form-level settings carried over from the legacy form table."""

from typing import Any, Dict

from ..models.legacy import LegacyForm

REDIRECT_CONFIRMATION = "<confirmation>"
REDIRECT_NONE = "<none>"


def confirmation_type(form: LegacyForm) -> str:
    """
    Pick how the target confirms a submission.

    '<none>' stays on the form (inline), '<confirmation>' shows a
    confirmation page, any other redirect goes to that URL, with the
    message when there is one.
    """
    redirect = (form.redirect_url or "").strip()
    if redirect == REDIRECT_NONE:
        return "inline"
    if redirect in ("", REDIRECT_CONFIRMATION):
        return "page"
    if form.confirmation:
        return "url_message"
    return "url"


def map_form_settings(form: LegacyForm) -> Dict[str, Any]:
    """Map legacy form settings to target form settings."""
    settings = {
        "status": "open" if form.status == 1 else "closed",
        "confirmation_type": confirmation_type(form),
        "confirmation_message": form.confirmation,
    }
    if settings["confirmation_type"] in ("url", "url_message"):
        settings["confirmation_url"] = form.redirect_url.strip()
    return settings
