"""
Tests for form reference resolution and snapshot helpers.
"""

import pytest
from fastmcp.exceptions import ToolError

from google_forms_mcp.api.helpers import (
    build_form_urls,
    extract_form_id,
    get_item_kind,
    get_items,
    split_update_mask,
)


class TestExtractFormId:
    """Tests for extract_form_id."""

    def test_bare_id(self):
        """Should return a bare form ID unchanged."""
        assert extract_form_id("1FAIpQLSe_abc-123") == "1FAIpQLSe_abc-123"

    def test_bare_id_trimmed(self):
        """Should ignore surrounding whitespace."""
        assert extract_form_id("  abc123 \n") == "abc123"

    def test_edit_url(self):
        """Should extract the ID from an edit URL."""
        url = "https://docs.google.com/forms/d/abc123/edit"
        assert extract_form_id(url) == "abc123"

    def test_url_without_suffix(self):
        """Should extract the ID when nothing follows it."""
        assert extract_form_id("https://docs.google.com/forms/d/abc123") == "abc123"

    def test_published_url(self):
        """Should skip the 'e' segment of published links."""
        url = "https://docs.google.com/forms/d/e/1FAIpQLSdXYZ/viewform?usp=sf_link"
        assert extract_form_id(url) == "1FAIpQLSdXYZ"

    def test_user_scoped_url(self):
        """Should handle URLs with a /u/N/ segment."""
        url = "https://docs.google.com/forms/u/0/d/abc123/edit"
        assert extract_form_id(url) == "abc123"

    def test_non_forms_url(self):
        """Should reject URLs of other Google products."""
        with pytest.raises(ToolError, match="Invalid Google Forms URL"):
            extract_form_id("https://docs.google.com/document/d/abc123/edit")

    def test_url_without_id(self):
        """Should reject a URL that ends before the ID."""
        with pytest.raises(ToolError, match="Form ID not found in URL path"):
            extract_form_id("https://docs.google.com/forms/d/")

    def test_empty_reference(self):
        """Should reject an empty reference."""
        with pytest.raises(ToolError):
            extract_form_id("   ")

    def test_invalid_bare_id(self):
        """Should reject IDs with unexpected characters."""
        with pytest.raises(ToolError, match="Invalid form reference"):
            extract_form_id("abc 123/edit")


class TestBuildFormUrls:
    """Tests for build_form_urls."""

    def test_default_urls(self):
        """Should build edit and view URLs from the ID."""
        assert build_form_urls("abc") == {
            "edit": "https://docs.google.com/forms/d/abc/edit",
            "view": "https://docs.google.com/forms/d/abc/viewform",
        }

    def test_responder_uri_preferred(self):
        """Should use the responder URI returned by the API."""
        urls = build_form_urls("abc", "https://docs.google.com/forms/d/e/xyz/viewform")
        assert urls["view"] == "https://docs.google.com/forms/d/e/xyz/viewform"


class TestSnapshotHelpers:
    """Tests for item inspection helpers."""

    def test_get_items(self, sample_form):
        """Should return the item list, or an empty list."""
        assert len(get_items(sample_form)) == 3
        assert get_items({"formId": "x"}) == []
        assert get_items(None) == []

    def test_get_item_kind(self, sample_form):
        """Should identify each item by its payload key."""
        kinds = [get_item_kind(item) for item in sample_form["items"]]
        assert kinds == ["text", "question", "pageBreak"]
        assert get_item_kind({"title": "bare"}) is None

    def test_split_update_mask(self):
        """Should trim paths and drop empty segments."""
        assert split_update_mask("title, description,,") == ["title", "description"]
