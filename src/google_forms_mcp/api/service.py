"""
Google Forms API client wrapper.

The three remote calls the server needs (fetch, create, batch update) live
here, behind one object that is built once at startup and passed to
whatever needs it.
"""

from typing import Any

from fastmcp.exceptions import ToolError
from googleapiclient.errors import HttpError

from google_forms_mcp.types import FormNotFoundError, RemoteSubmissionError
from google_forms_mcp.utils import log


def _http_status(error: Exception) -> int | None:
    if isinstance(error, HttpError):
        return error.resp.status
    return None


def _http_detail(error: Exception) -> str:
    if isinstance(error, HttpError):
        reason = error.reason if isinstance(error.reason, str) else ""
        return reason or str(error)
    return str(error)


class FormsService:
    """
    Thin wrapper over the ``googleapiclient`` Forms v1 resource.

    Args:
        forms: A Forms API resource (``build("forms", "v1", ...)``). When
            omitted it is created on first use via ``auth.get_forms_client``.
    """

    def __init__(self, forms: Any = None):
        self._forms = forms

    @property
    def forms(self) -> Any:
        if self._forms is None:
            from google_forms_mcp.auth import get_forms_client

            self._forms = get_forms_client()
        return self._forms

    def get_form(self, form_id: str) -> dict:
        """
        Fetch the current state of a form.

        Raises:
            FormNotFoundError: If the form does not exist or the API returns nothing
            ToolError: For permission and other API errors
        """
        try:
            form = self.forms.forms().get(formId=form_id).execute()
        except Exception as e:
            status = _http_status(e)
            log(f"Google API forms.get error for form {form_id}: {e}", "ERROR")
            if status == 404:
                raise FormNotFoundError(form_id)
            if status == 403:
                raise ToolError(
                    f"Permission denied for form (ID: {form_id}). "
                    "Ensure the authenticated user can edit the form."
                )
            raise ToolError(f"Failed to fetch form {form_id}: {_http_detail(e)}")

        if not form:
            raise FormNotFoundError(form_id)
        return form

    def create_form(
        self, title: str, document_title: str | None = None, unpublished: bool = False
    ) -> dict:
        """
        Create a new, empty form.

        Only the title and document title can be set at creation time; the
        Forms API rejects any other field in ``forms.create``.
        """
        info: dict[str, Any] = {"title": title}
        if document_title:
            info["documentTitle"] = document_title

        kwargs: dict[str, Any] = {"body": {"info": info}}
        if unpublished:
            kwargs["unpublished"] = True

        try:
            return self.forms.forms().create(**kwargs).execute()
        except Exception as e:
            log(f"Google API forms.create error: {e}", "ERROR")
            raise ToolError(f"Failed to create form: {_http_detail(e)}")

    def batch_update(
        self,
        form_id: str,
        requests: list[dict],
        include_form_in_response: bool = True,
    ) -> dict:
        """
        Submit a list of requests to ``forms.batchUpdate`` in one call.

        Raises:
            RemoteSubmissionError: If the API rejects the batch
        """
        body = {"requests": requests, "includeFormInResponse": include_form_in_response}
        try:
            return self.forms.forms().batchUpdate(formId=form_id, body=body).execute()
        except Exception as e:
            log(f"Google API batchUpdate error for form {form_id}: {e}", "ERROR")
            raise RemoteSubmissionError(form_id, _http_detail(e))
