"""
Google Forms MCP Server

Main MCP server entry point with all tool definitions.
Uses FastMCP framework for MCP protocol implementation.

IMPORTANT: All logging must use stderr, never stdout.
The MCP protocol uses stdout for JSON-RPC communication.
"""

import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated, Any

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from google_forms_mcp.types import (
    SUPPORTED_OPERATIONS,
    BatchOperation,
    EmailCollectionType,
    GridType,
    QuestionType,
    ReleaseGrade,
    parse_operation,
)
from google_forms_mcp.api import helpers
from google_forms_mcp.api.batch import BatchTranslator
from google_forms_mcp.api.builders import build_item_patch
from google_forms_mcp.api.formatting import format_batch_result
from google_forms_mcp.api.service import FormsService
from google_forms_mcp.utils import log

INSTRUCTIONS = """
This MCP server provides tools for reading, creating, and editing Google Forms.

Key capabilities:
- Create new forms and read their full structure
- Add text, question, page break and question group (grid) items
- Update, delete and move items
- Update form title/description and settings (email collection, quiz mode)
- Apply many of these operations in one atomic batch with batch_update_form

Item positions are 0-based. Call get_form first to see current positions;
every index in a batch refers to the form as it was before the batch.
"""

FORM_REF_HELP = "Form ID or Google Forms URL (e.g. https://docs.google.com/forms/d/FORM_ID/edit)"


@dataclass(frozen=True)
class ToolSpec:
    """A tool registration: name, handler, and MCP annotations."""

    name: str
    handler: Callable[..., str]
    annotations: dict[str, Any] | None = None


def build_tools(translator: BatchTranslator) -> list[ToolSpec]:
    """
    Build the tool table. Every handler closes over the same translator.
    """
    service = translator.service

    def run_single(form_ref: str, raw_operation: dict[str, Any]) -> str:
        operation = parse_operation(raw_operation)
        result = translator.execute(form_ref, [operation])
        return format_batch_result(result)

    def get_form(
        form_url: Annotated[str, FORM_REF_HELP],
    ) -> str:
        """
        Get the full structure of a Google Form (info, settings, items).

        Use this before editing to learn item positions and item IDs.
        """
        form_id = helpers.extract_form_id(form_url)
        log(f"Reading form {form_id}")
        return json.dumps(service.get_form(form_id), indent=2, ensure_ascii=False)

    def create_form(
        title: Annotated[str, "Form title shown to respondents"],
        document_title: Annotated[
            str | None, "Title of the form file in Drive (defaults to the form title)"
        ] = None,
        unpublished: Annotated[
            bool, "Create the form unpublished (it will not accept responses)"
        ] = False,
    ) -> str:
        """
        Create a new, empty Google Form.

        Only the title can be set at creation; add items afterwards.
        """
        log(f"Creating form {title!r}")
        result = service.create_form(title, document_title, unpublished)
        form_id = result.get("formId")
        if not form_id:
            raise ToolError("Form was created but the API returned no form ID.")
        urls = helpers.build_form_urls(form_id, result.get("responderUri"))
        return (
            f"Form created successfully.\n"
            f"Title: {title}\n"
            f"Form ID: {form_id}\n"
            f"Edit URL: {urls['edit']}\n"
            f"Responder URL: {urls['view']}"
        )

    def batch_update_form(
        form_url: Annotated[str, FORM_REF_HELP],
        operations: Annotated[
            list[BatchOperation],
            "Operations to apply, each tagged by its 'operation' field. Supported: "
            + ", ".join(SUPPORTED_OPERATIONS),
        ],
    ) -> str:
        """
        Execute multiple form edits in a single atomic batch.

        All indexes refer to the form as it was before the batch. If any
        operation is invalid, nothing is applied and the error names the
        failing operation's number. To build a quiz, enable quiz mode with
        update_form_settings in one batch, then add graded questions in a
        later batch.
        """
        result = translator.execute(form_url, operations)
        return format_batch_result(result)

    def add_text_item(
        form_url: Annotated[str, FORM_REF_HELP],
        title: Annotated[str, "Title of the text item"],
        description: Annotated[str | None, "Body text shown under the title"] = None,
        index: Annotated[int | None, "Insertion position (end of form if omitted)"] = None,
    ) -> str:
        """
        Add a text (title and description) item to a form.
        """
        return run_single(
            form_url,
            {
                "operation": "create_item",
                "item_type": "text",
                "title": title,
                "description": description,
                "index": index,
            },
        )

    def add_question_item(
        form_url: Annotated[str, FORM_REF_HELP],
        title: Annotated[str, "Question text"],
        question_type: Annotated[QuestionType, "Question type"],
        options: Annotated[
            list[str] | None, "Choices (required for RADIO, CHECKBOX, DROP_DOWN)"
        ] = None,
        required: Annotated[bool, "Whether an answer is required"] = False,
        include_other: Annotated[bool, "Add an 'Other' choice (RADIO/CHECKBOX)"] = False,
        description: Annotated[str | None, "Help text shown under the question"] = None,
        index: Annotated[int | None, "Insertion position (end of form if omitted)"] = None,
    ) -> str:
        """
        Add a question item to a form.
        """
        return run_single(
            form_url,
            {
                "operation": "create_item",
                "item_type": "question",
                "title": title,
                "description": description,
                "question_type": question_type,
                "options": [{"value": value} for value in options] if options else None,
                "required": required,
                "include_other": include_other or None,
                "index": index,
            },
        )

    def add_page_break_item(
        form_url: Annotated[str, FORM_REF_HELP],
        title: Annotated[str, "Title of the new section"],
        description: Annotated[str | None, "Section description"] = None,
        index: Annotated[int | None, "Insertion position (end of form if omitted)"] = None,
    ) -> str:
        """
        Add a page break (start of a new section) to a form.
        """
        return run_single(
            form_url,
            {
                "operation": "create_item",
                "item_type": "pageBreak",
                "title": title,
                "description": description,
                "index": index,
            },
        )

    def add_question_group_item(
        form_url: Annotated[str, FORM_REF_HELP],
        title: Annotated[str, "Title of the question group"],
        rows: Annotated[list[str], "Row titles (one sub-question per row)"],
        columns: Annotated[list[str] | None, "Grid columns (choices for every row)"] = None,
        grid_type: Annotated[GridType | None, "Grid selection type"] = None,
        rows_required: Annotated[bool, "Whether every row must be answered"] = False,
        shuffle_questions: Annotated[bool | None, "Shuffle the rows"] = None,
        description: Annotated[str | None, "Group description"] = None,
        index: Annotated[int | None, "Insertion position (end of form if omitted)"] = None,
    ) -> str:
        """
        Add a question group (grid) to a form.

        Grid groups need both columns and grid_type.
        """
        return run_single(
            form_url,
            {
                "operation": "create_item",
                "item_type": "questionGroup",
                "title": title,
                "description": description,
                "rows": [{"title": row, "required": rows_required} for row in rows],
                "columns": [{"value": value} for value in columns] if columns else None,
                "grid_type": grid_type,
                "shuffle_questions": shuffle_questions,
                "index": index,
            },
        )

    def update_item(
        form_url: Annotated[str, FORM_REF_HELP],
        index: Annotated[int, "Index of the item to update (0-based)"],
        title: Annotated[str | None, "New title"] = None,
        description: Annotated[str | None, "New description"] = None,
        required: Annotated[bool | None, "New required flag (question items only)"] = None,
    ) -> str:
        """
        Update the title, description or required flag of an existing item.
        """
        item, update_mask = build_item_patch(title, description, required)
        if not update_mask:
            raise ToolError("Nothing to update: provide title, description and/or required")
        return run_single(
            form_url,
            {
                "operation": "update_item",
                "index": index,
                "item": item,
                "update_mask": update_mask,
            },
        )

    def delete_item(
        form_url: Annotated[str, FORM_REF_HELP],
        index: Annotated[int, "Index of the item to delete (0-based)"],
    ) -> str:
        """
        Delete an item from a form.
        """
        return run_single(form_url, {"operation": "delete_item", "index": index})

    def move_item(
        form_url: Annotated[str, FORM_REF_HELP],
        index: Annotated[int, "Current index of the item (0-based)"],
        new_index: Annotated[int, "Destination index"],
    ) -> str:
        """
        Move an item to a new position within a form.
        """
        return run_single(
            form_url, {"operation": "move_item", "index": index, "new_index": new_index}
        )

    def update_form_info(
        form_url: Annotated[str, FORM_REF_HELP],
        title: Annotated[str | None, "New form title"] = None,
        description: Annotated[str | None, "New form description"] = None,
    ) -> str:
        """
        Update the title and/or description of a form.
        """
        return run_single(
            form_url,
            {"operation": "update_form_info", "title": title, "description": description},
        )

    def update_form_settings(
        form_url: Annotated[str, FORM_REF_HELP],
        email_collection_type: Annotated[
            EmailCollectionType | None, "How respondent emails are collected"
        ] = None,
        is_quiz: Annotated[bool | None, "Turn quiz mode on or off"] = None,
        release_grade: Annotated[
            ReleaseGrade | None, "When grades are released to respondents"
        ] = None,
    ) -> str:
        """
        Update form settings (email collection, quiz mode, grade release).
        """
        return run_single(
            form_url,
            {
                "operation": "update_form_settings",
                "email_collection_type": email_collection_type,
                "is_quiz": is_quiz,
                "release_grade": release_grade,
            },
        )

    read_only = {"readOnlyHint": True}
    destructive = {"destructiveHint": True}
    return [
        ToolSpec("get_form", get_form, read_only),
        ToolSpec("create_form", create_form),
        ToolSpec("batch_update_form", batch_update_form, destructive),
        ToolSpec("add_text_item", add_text_item),
        ToolSpec("add_question_item", add_question_item),
        ToolSpec("add_page_break_item", add_page_break_item),
        ToolSpec("add_question_group_item", add_question_group_item),
        ToolSpec("update_item", update_item),
        ToolSpec("delete_item", delete_item, destructive),
        ToolSpec("move_item", move_item),
        ToolSpec("update_form_info", update_form_info),
        ToolSpec("update_form_settings", update_form_settings),
    ]


def create_server(service: FormsService | None = None) -> FastMCP:
    """
    Create the MCP server and register every tool.

    Args:
        service: Forms API wrapper; a lazily-authorized one is created if omitted
    """
    translator = BatchTranslator(service or FormsService())
    mcp = FastMCP(name="Google Forms MCP Server", instructions=INSTRUCTIONS)
    for tool in build_tools(translator):
        mcp.tool(name=tool.name, annotations=tool.annotations)(tool.handler)
    return mcp


def main() -> None:
    """Run the Google Forms MCP Server."""
    log("Starting Google Forms MCP Server...")
    create_server().run()


if __name__ == "__main__":
    main()
