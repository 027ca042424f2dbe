"""
Tests for the Forms API client wrapper.
"""

import httplib2
import pytest
from fastmcp.exceptions import ToolError
from googleapiclient.errors import HttpError

from google_forms_mcp.types import FormNotFoundError, RemoteSubmissionError
from google_forms_mcp.api.service import FormsService


def _http_error(status: int, message: str = "Something went wrong") -> HttpError:
    content = f'{{"error": {{"code": {status}, "message": "{message}"}}}}'.encode()
    return HttpError(resp=httplib2.Response({"status": status}), content=content)


class TestGetForm:
    """Tests for FormsService.get_form."""

    def test_returns_form(self, mock_forms_client, sample_form):
        """Should return the fetched form."""
        mock_forms_client.forms().get().execute.return_value = sample_form
        service = FormsService(mock_forms_client)

        assert service.get_form("form123") == sample_form
        mock_forms_client.forms().get.assert_called_with(formId="form123")

    def test_not_found(self, mock_forms_client):
        """Should raise FormNotFoundError on 404."""
        mock_forms_client.forms().get().execute.side_effect = _http_error(404)
        service = FormsService(mock_forms_client)

        with pytest.raises(FormNotFoundError) as exc_info:
            service.get_form("missing")

        assert exc_info.value.form_id == "missing"

    def test_empty_response(self, mock_forms_client):
        """Should treat an empty response as a missing form."""
        mock_forms_client.forms().get().execute.return_value = {}
        service = FormsService(mock_forms_client)

        with pytest.raises(FormNotFoundError):
            service.get_form("form123")

    def test_permission_denied(self, mock_forms_client):
        """Should explain a 403."""
        mock_forms_client.forms().get().execute.side_effect = _http_error(403)
        service = FormsService(mock_forms_client)

        with pytest.raises(ToolError, match="Permission denied"):
            service.get_form("form123")

    def test_other_error(self, mock_forms_client):
        """Should wrap other failures in a ToolError."""
        mock_forms_client.forms().get().execute.side_effect = RuntimeError("network down")
        service = FormsService(mock_forms_client)

        with pytest.raises(ToolError, match="Failed to fetch form form123: network down"):
            service.get_form("form123")


class TestCreateForm:
    """Tests for FormsService.create_form."""

    def test_title_only(self, mock_forms_client):
        """Should send only the title."""
        mock_forms_client.forms().create().execute.return_value = {"formId": "new1"}
        service = FormsService(mock_forms_client)

        assert service.create_form("Survey") == {"formId": "new1"}
        mock_forms_client.forms().create.assert_called_with(body={"info": {"title": "Survey"}})

    def test_document_title_and_unpublished(self, mock_forms_client):
        """Should pass the document title and unpublished flag."""
        mock_forms_client.forms().create().execute.return_value = {"formId": "new1"}
        service = FormsService(mock_forms_client)

        service.create_form("Survey", document_title="Survey 2024", unpublished=True)

        mock_forms_client.forms().create.assert_called_with(
            body={"info": {"title": "Survey", "documentTitle": "Survey 2024"}},
            unpublished=True,
        )

    def test_failure(self, mock_forms_client):
        """Should wrap API failures."""
        mock_forms_client.forms().create().execute.side_effect = _http_error(400, "Bad title")
        service = FormsService(mock_forms_client)

        with pytest.raises(ToolError, match="Failed to create form"):
            service.create_form("Survey")


class TestBatchUpdate:
    """Tests for FormsService.batch_update."""

    def test_submits_single_call(self, mock_forms_client, sample_form):
        """Should send every request in one batchUpdate call."""
        mock_forms_client.forms().batchUpdate().execute.return_value = {"form": sample_form}
        service = FormsService(mock_forms_client)
        requests = [{"deleteItem": {"location": {"index": 0}}}]

        response = service.batch_update("form123", requests)

        assert response == {"form": sample_form}
        mock_forms_client.forms().batchUpdate.assert_called_with(
            formId="form123",
            body={"requests": requests, "includeFormInResponse": True},
        )

    def test_rejected(self, mock_forms_client):
        """Should raise RemoteSubmissionError with the API's message."""
        mock_forms_client.forms().batchUpdate().execute.side_effect = _http_error(
            400, "Invalid requests[0].deleteItem: index out of bounds"
        )
        service = FormsService(mock_forms_client)

        with pytest.raises(RemoteSubmissionError) as exc_info:
            service.batch_update("form123", [{"deleteItem": {"location": {"index": 9}}}])

        assert exc_info.value.form_id == "form123"
        assert "index out of bounds" in exc_info.value.detail


class TestLazyClient:
    """Tests for lazy client construction."""

    def test_client_built_on_first_use(self, mock_forms_client, monkeypatch):
        """Should build the API client only when first needed."""
        calls = []

        def fake_client():
            calls.append(1)
            return mock_forms_client

        monkeypatch.setattr("google_forms_mcp.auth.get_forms_client", fake_client)
        service = FormsService()
        assert calls == []

        assert service.forms is mock_forms_client
        assert service.forms is mock_forms_client
        assert calls == [1]
