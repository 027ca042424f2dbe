"""
Type definitions for Google Forms MCP Server.

Batch operations are modelled as a discriminated union keyed by the
``operation`` field: each variant carries exactly the payload its kind
needs, and FastMCP publishes the resulting JSON schema to clients.
"""

from typing import Annotated, Any, ClassVar, Literal, Union, get_args

from fastmcp.exceptions import ToolError
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

# --- Enumerations ---
OperationKind = Literal[
    "create_item",
    "update_item",
    "delete_item",
    "move_item",
    "update_form_info",
    "update_form_settings",
]

ItemType = Literal["text", "question", "pageBreak", "questionGroup", "image", "video"]
QuestionType = Literal["TEXT", "PARAGRAPH_TEXT", "RADIO", "CHECKBOX", "DROP_DOWN"]
GoToAction = Literal["NEXT_SECTION", "RESTART_FORM", "SUBMIT_FORM"]
GridType = Literal["CHECKBOX", "RADIO"]
EmailCollectionType = Literal["DO_NOT_COLLECT", "VERIFIED", "RESPONDER_INPUT"]
ReleaseGrade = Literal["NONE", "IMMEDIATELY", "LATER"]

SUPPORTED_OPERATIONS: tuple[str, ...] = get_args(OperationKind)
ITEM_TYPES: tuple[str, ...] = get_args(ItemType)
CHOICE_QUESTION_TYPES = frozenset({"RADIO", "CHECKBOX", "DROP_DOWN"})
OTHER_OPTION_QUESTION_TYPES = frozenset({"RADIO", "CHECKBOX"})

# Payload key of each item kind in the Forms API item resource
ITEM_PAYLOAD_KEYS: dict[str, str] = {
    "text": "textItem",
    "question": "questionItem",
    "pageBreak": "pageBreakItem",
    "questionGroup": "questionGroupItem",
    "image": "imageItem",
    "video": "videoItem",
}


# --- Payload Building Blocks ---
class FormOption(BaseModel):
    """A choice value, optionally branching to an action or a section."""

    model_config = ConfigDict(extra="forbid")

    value: str = Field(description="Option text value")
    go_to_action: GoToAction | None = Field(
        None, description="Branching action when this option is selected"
    )
    go_to_section_id: str | None = Field(
        None, description="Item ID of the section to jump to when this option is selected"
    )


class QuestionGroupRow(BaseModel):
    """A row (sub-question) of a question group."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(description="Row title")
    required: bool = Field(False, description="Whether this row must be answered")


class Grading(BaseModel):
    """Quiz grading for a question item."""

    model_config = ConfigDict(extra="forbid")

    point_value: int = Field(ge=0, description="Points awarded for a correct answer")
    correct_answers: list[str] | None = Field(
        None, description="Values that count as correct"
    )
    when_right: str | None = Field(None, description="Feedback shown for a correct answer")
    when_wrong: str | None = Field(None, description="Feedback shown for a wrong answer")
    general_feedback: str | None = Field(
        None, description="Feedback shown regardless of the answer"
    )


# --- Batch Operations ---
# Index fields are unconstrained here; the batch translator bounds-checks
# them against the form snapshot and reports the operation's position.
class CreateItemOperation(BaseModel):
    """Insert a new item into the form."""

    model_config = ConfigDict(extra="forbid")
    insertion_index_fields: ClassVar[tuple[str, ...]] = ("index",)
    item_index_fields: ClassVar[tuple[str, ...]] = ()

    operation: Literal["create_item"] = "create_item"
    title: str = Field(description="Item title")
    item_type: ItemType = Field(description="Type of item to create")
    description: str | None = Field(None, description="Item description")
    item_id: str | None = Field(
        None, description="Explicit item ID, useful as a branching target for page breaks"
    )
    index: int | None = Field(
        None, description="Insertion position (appends to the end if omitted)"
    )
    # question
    question_type: QuestionType | None = Field(
        None, description="Question type (required for question items)"
    )
    options: list[FormOption] | None = Field(
        None, description="Choices for RADIO, CHECKBOX and DROP_DOWN questions"
    )
    required: bool | None = Field(None, description="Whether the question is required")
    include_other: bool | None = Field(
        None, description="Append an 'Other' choice (RADIO and CHECKBOX only)"
    )
    shuffle_options: bool | None = Field(None, description="Shuffle the choices")
    grading: Grading | None = Field(None, description="Quiz grading (quiz forms only)")
    # questionGroup
    rows: list[QuestionGroupRow] | None = Field(None, description="Rows of a question group")
    is_grid: bool | None = Field(None, description="Whether the question group is a grid")
    columns: list[FormOption] | None = Field(None, description="Grid columns")
    grid_type: GridType | None = Field(None, description="Selection type of grid rows")
    shuffle_questions: bool | None = Field(None, description="Shuffle the grid rows")
    # image / video
    image_uri: str | None = Field(None, description="Public image URL (image items)")
    alt_text: str | None = Field(None, description="Image alt text (image items)")
    youtube_uri: str | None = Field(None, description="YouTube URL (video items)")
    caption: str | None = Field(None, description="Video caption (video items)")


class UpdateItemOperation(BaseModel):
    """Update fields of an existing item, restricted by a field mask."""

    model_config = ConfigDict(extra="forbid")
    insertion_index_fields: ClassVar[tuple[str, ...]] = ()
    item_index_fields: ClassVar[tuple[str, ...]] = ("index",)

    operation: Literal["update_item"] = "update_item"
    index: int = Field(description="Index of the item to update")
    item: dict[str, Any] = Field(description="Full item object after the update")
    update_mask: str = Field(
        min_length=1,
        description='Comma-separated field paths to apply, e.g. "title,questionItem.question.required"',
    )


class DeleteItemOperation(BaseModel):
    """Delete an existing item."""

    model_config = ConfigDict(extra="forbid")
    insertion_index_fields: ClassVar[tuple[str, ...]] = ()
    item_index_fields: ClassVar[tuple[str, ...]] = ("index",)

    operation: Literal["delete_item"] = "delete_item"
    index: int = Field(description="Index of the item to delete")


class MoveItemOperation(BaseModel):
    """Move an existing item to another position."""

    model_config = ConfigDict(extra="forbid")
    insertion_index_fields: ClassVar[tuple[str, ...]] = ("new_index",)
    item_index_fields: ClassVar[tuple[str, ...]] = ("index",)

    operation: Literal["move_item"] = "move_item"
    index: int = Field(description="Current index of the item")
    new_index: int = Field(description="Destination index")


class UpdateFormInfoOperation(BaseModel):
    """Change the form title and/or description."""

    model_config = ConfigDict(extra="forbid")
    insertion_index_fields: ClassVar[tuple[str, ...]] = ()
    item_index_fields: ClassVar[tuple[str, ...]] = ()

    operation: Literal["update_form_info"] = "update_form_info"
    title: str | None = Field(None, description="New form title")
    description: str | None = Field(None, description="New form description")


class UpdateFormSettingsOperation(BaseModel):
    """Change email collection and quiz settings."""

    model_config = ConfigDict(extra="forbid")
    insertion_index_fields: ClassVar[tuple[str, ...]] = ()
    item_index_fields: ClassVar[tuple[str, ...]] = ()

    operation: Literal["update_form_settings"] = "update_form_settings"
    email_collection_type: EmailCollectionType | None = Field(
        None, description="How respondent email addresses are collected"
    )
    is_quiz: bool | None = Field(None, description="Whether the form is a quiz")
    release_grade: ReleaseGrade | None = Field(
        None, description="When quiz grades are released to respondents"
    )


BatchOperation = Annotated[
    Union[
        CreateItemOperation,
        UpdateItemOperation,
        DeleteItemOperation,
        MoveItemOperation,
        UpdateFormInfoOperation,
        UpdateFormSettingsOperation,
    ],
    Field(discriminator="operation"),
]

_operation_adapter: TypeAdapter = TypeAdapter(BatchOperation)


# --- Custom Exceptions ---
class OperationShapeError(ToolError):
    """Raised when a raw operation does not match any operation schema."""

    def __init__(self, position: int, detail: str):
        super().__init__(f"Operation #{position}: invalid payload: {detail}")
        self.position = position
        self.detail = detail


class OperationError(ToolError):
    """Raised when a well-formed operation is invalid against the form."""

    def __init__(self, position: int, kind: str, cause: str):
        super().__init__(f"Error in operation #{position} ({kind}): {cause}")
        self.position = position
        self.kind = kind
        self.cause = cause


class FormNotFoundError(ToolError):
    """Raised when the target form cannot be fetched."""

    def __init__(self, form_id: str):
        super().__init__(f"Form not found (ID: {form_id}). Check the form ID or URL.")
        self.form_id = form_id


class RemoteSubmissionError(ToolError):
    """Raised when the Forms API rejects a batch that passed local validation."""

    def __init__(self, form_id: str, detail: str):
        super().__init__(f"Google Forms API rejected the batch for form {form_id}: {detail}")
        self.form_id = form_id
        self.detail = detail


def _describe_validation_error(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"])
        parts.append(f"{location}: {err['msg']}" if location else err["msg"])
    return "; ".join(parts)


def parse_operation(raw: Any, position: int = 1) -> BatchOperation:
    """Validate one raw operation dict (or pass a model through)."""
    if isinstance(raw, BaseModel):
        return raw
    try:
        return _operation_adapter.validate_python(raw)
    except ValidationError as e:
        raise OperationShapeError(position, _describe_validation_error(e))


def parse_operations(raw_operations: list[Any]) -> list[BatchOperation]:
    """
    Validate a list of raw operations against the operation schemas.

    Args:
        raw_operations: Operation dicts (or already-validated models)

    Returns:
        The operations as typed models, in the same order

    Raises:
        OperationShapeError: For the first operation that fails validation
    """
    return [parse_operation(raw, i + 1) for i, raw in enumerate(raw_operations)]
