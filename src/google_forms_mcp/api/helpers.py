"""
Helper functions for Google Forms API operations.
"""

import re
from typing import Any
from urllib.parse import urlparse

from fastmcp.exceptions import ToolError

from google_forms_mcp.types import ITEM_PAYLOAD_KEYS

# --- Constants ---
FORM_ID_REGEX = re.compile(r"^[A-Za-z0-9_-]+$")
FORMS_HOST = "docs.google.com"


# --- Form Reference Resolution ---
def extract_form_id(form_ref: str) -> str:
    """
    Resolve a form reference to a form ID.

    Accepts either a bare form ID or a Google Forms URL in one of the forms
    ``https://docs.google.com/forms/d/{id}/edit`` or
    ``https://docs.google.com/forms/d/e/{id}/viewform``.

    Args:
        form_ref: Form ID or Google Forms URL

    Returns:
        The form ID

    Raises:
        ToolError: If the reference is neither a form ID nor a usable URL
    """
    form_ref = (form_ref or "").strip()
    if not form_ref:
        raise ToolError("A form ID or Google Forms URL is required.")

    if "://" not in form_ref:
        if FORM_ID_REGEX.match(form_ref):
            return form_ref
        raise ToolError(f"Invalid form reference: {form_ref!r}")

    parsed = urlparse(form_ref)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ToolError(f"Error parsing form URL: Invalid URL {form_ref!r}")

    parts = parsed.path.split("/")
    try:
        d_pos = parts.index("d")
    except ValueError:
        raise ToolError("Error parsing form URL: Invalid Google Forms URL")
    if "forms" not in parts[:d_pos]:
        raise ToolError("Error parsing form URL: Invalid Google Forms URL")

    id_pos = d_pos + 1
    # Published links insert an "e" segment before the ID
    if id_pos < len(parts) and parts[id_pos] == "e":
        id_pos += 1

    form_id = parts[id_pos] if id_pos < len(parts) else ""
    if not form_id:
        raise ToolError("Error parsing form URL: Form ID not found in URL path")
    if not FORM_ID_REGEX.match(form_id):
        raise ToolError(f"Error parsing form URL: Invalid form ID {form_id!r}")
    return form_id


def build_form_urls(form_id: str, responder_uri: str | None = None) -> dict[str, str]:
    """Build the edit and responder URLs for a form."""
    return {
        "edit": f"https://{FORMS_HOST}/forms/d/{form_id}/edit",
        "view": responder_uri or f"https://{FORMS_HOST}/forms/d/{form_id}/viewform",
    }


# --- Snapshot Inspection ---
def get_items(form: dict | None) -> list[dict]:
    """Return the form's item list (empty for a form without items)."""
    if not form:
        return []
    return form.get("items") or []


def get_item_kind(item: dict[str, Any]) -> str | None:
    """
    Determine the kind of a form item from its payload key.

    Returns:
        One of the item type names ("question", "text", ...) or None
        when the item carries no recognised payload.
    """
    for kind, key in ITEM_PAYLOAD_KEYS.items():
        if key in item:
            return kind
    return None


def split_update_mask(update_mask: str) -> list[str]:
    """Split a comma-separated field mask into trimmed, non-empty paths."""
    return [path.strip() for path in update_mask.split(",") if path.strip()]
