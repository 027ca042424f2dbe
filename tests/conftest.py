"""
Pytest configuration and fixtures for Google Forms MCP Server tests.
"""

import copy

import pytest
from unittest.mock import MagicMock

from google_forms_mcp.api.batch import BatchTranslator


SAMPLE_FORM = {
    "formId": "form123",
    "info": {"title": "Customer Survey", "documentTitle": "Customer Survey"},
    "settings": {"emailCollectionType": "DO_NOT_COLLECT"},
    "items": [
        {
            "itemId": "item0",
            "title": "Welcome",
            "textItem": {},
        },
        {
            "itemId": "item1",
            "title": "How did you hear about us?",
            "questionItem": {
                "question": {
                    "questionId": "q1",
                    "required": True,
                    "choiceQuestion": {
                        "type": "RADIO",
                        "options": [{"value": "Friend"}, {"value": "Online"}],
                    },
                }
            },
        },
        {
            "itemId": "item2",
            "title": "Details",
            "pageBreakItem": {},
        },
    ],
}


@pytest.fixture
def sample_form():
    """
    Provide a three-item form matching the Forms API structure.
    """
    return copy.deepcopy(SAMPLE_FORM)


@pytest.fixture
def mock_forms_client():
    """
    Provide a mock Google Forms API client.
    """
    return MagicMock()


@pytest.fixture
def mock_service(sample_form):
    """
    Provide a mock FormsService returning the sample form.

    batch_update echoes the sample form back as the updated form.
    """
    service = MagicMock()
    service.get_form.return_value = sample_form
    service.batch_update.return_value = {"form": sample_form, "replies": []}
    return service


@pytest.fixture
def translator(mock_service):
    """
    Provide a BatchTranslator wired to the mock service.
    """
    return BatchTranslator(mock_service)
