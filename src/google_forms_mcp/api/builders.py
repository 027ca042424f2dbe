"""
Request builders for the Google Forms API.

One builder per operation kind turns a validated operation into a
``batchUpdate`` request dict. Builders do not raise for invalid payloads:
they return a ``BuildError`` so the batch translator can attach the
operation's position to the message uniformly.
"""

import functools
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

from google_forms_mcp.types import (
    CHOICE_QUESTION_TYPES,
    ITEM_PAYLOAD_KEYS,
    OTHER_OPTION_QUESTION_TYPES,
    CreateItemOperation,
    DeleteItemOperation,
    FormOption,
    Grading,
    MoveItemOperation,
    UpdateFormInfoOperation,
    UpdateFormSettingsOperation,
    UpdateItemOperation,
)
from google_forms_mcp.api.helpers import get_item_kind, split_update_mask

WireRequest = dict[str, Any]

# Fields every item kind accepts in an update mask
COMMON_ITEM_FIELDS = ("title", "description")

YOUTUBE_HOSTS = ("youtube.com", "www.youtube.com", "m.youtube.com", "youtu.be")


@dataclass(frozen=True)
class BuildError:
    """Why a builder rejected its payload."""

    message: str

    def __str__(self) -> str:
        return self.message


class _PayloadError(Exception):
    """Internal signal for an invalid payload, converted to BuildError."""


def _returns_build_error(builder: Callable[..., WireRequest]) -> Callable[..., WireRequest | BuildError]:
    """Turn ``_PayloadError`` raised inside a builder into a returned BuildError."""

    @functools.wraps(builder)
    def wrapper(*args, **kwargs):
        try:
            return builder(*args, **kwargs)
        except _PayloadError as e:
            return BuildError(str(e))

    return wrapper


# --- Item Payload Encoding ---
def _encode_option(option: FormOption) -> dict[str, Any]:
    encoded: dict[str, Any] = {"value": option.value}
    if option.go_to_action and option.go_to_section_id:
        raise _PayloadError(
            f"Option {option.value!r} sets both go_to_action and go_to_section_id; "
            "choose one branching target"
        )
    if option.go_to_action:
        encoded["goToAction"] = option.go_to_action
    elif option.go_to_section_id:
        encoded["goToSectionId"] = option.go_to_section_id
    return encoded


def _encode_grading(grading: Grading) -> dict[str, Any]:
    encoded: dict[str, Any] = {"pointValue": grading.point_value}
    if grading.correct_answers:
        encoded["correctAnswers"] = {
            "answers": [{"value": answer} for answer in grading.correct_answers]
        }
    if grading.when_right:
        encoded["whenRight"] = {"text": grading.when_right}
    if grading.when_wrong:
        encoded["whenWrong"] = {"text": grading.when_wrong}
    if grading.general_feedback:
        encoded["generalFeedback"] = {"text": grading.general_feedback}
    return encoded


def _build_question(op: CreateItemOperation) -> dict[str, Any]:
    if not op.question_type:
        raise _PayloadError("question_type is required when creating a question item")

    question: dict[str, Any] = {"required": bool(op.required)}

    if op.include_other and op.question_type not in OTHER_OPTION_QUESTION_TYPES:
        raise _PayloadError("include_other is only supported for RADIO and CHECKBOX questions")

    if op.question_type in CHOICE_QUESTION_TYPES:
        if not op.options:
            raise _PayloadError(
                f"{op.question_type} questions require at least one option"
            )
        options = [_encode_option(option) for option in op.options]
        if op.include_other:
            options.append({"isOther": True})
        choice: dict[str, Any] = {"type": op.question_type, "options": options}
        if op.shuffle_options is not None:
            choice["shuffle"] = op.shuffle_options
        question["choiceQuestion"] = choice
    else:
        if op.options:
            raise _PayloadError(f"{op.question_type} questions do not take options")
        question["textQuestion"] = {"paragraph": op.question_type == "PARAGRAPH_TEXT"}

    if op.grading:
        question["grading"] = _encode_grading(op.grading)

    return {"question": question}


def _build_question_group(op: CreateItemOperation) -> dict[str, Any]:
    if not op.rows:
        raise _PayloadError("Question group requires at least one row")

    group: dict[str, Any] = {
        "questions": [
            {"required": row.required, "rowQuestion": {"title": row.title}}
            for row in op.rows
        ]
    }

    grid_requested = bool(op.is_grid) or op.columns is not None or op.grid_type is not None
    if grid_requested:
        if not op.columns:
            raise _PayloadError("Grid question group requires at least one column")
        if not op.grid_type:
            raise _PayloadError(
                "Grid question group requires grid_type (CHECKBOX or RADIO)"
            )
        group["grid"] = {
            "columns": {
                "type": op.grid_type,
                "options": [_encode_option(column) for column in op.columns],
            },
            "shuffleQuestions": bool(op.shuffle_questions),
        }
    elif op.shuffle_questions is not None:
        raise _PayloadError("shuffle_questions only applies to grid question groups")

    return group


def _build_image(op: CreateItemOperation) -> dict[str, Any]:
    if not op.image_uri:
        raise _PayloadError("image_uri is required when creating an image item")
    if urlparse(op.image_uri).scheme not in ("http", "https"):
        raise _PayloadError(f"image_uri must be an http(s) URL, got {op.image_uri!r}")
    image: dict[str, Any] = {"sourceUri": op.image_uri}
    if op.alt_text:
        image["altText"] = op.alt_text
    return {"image": image}


def _build_video(op: CreateItemOperation) -> dict[str, Any]:
    if not op.youtube_uri:
        raise _PayloadError("youtube_uri is required when creating a video item")
    if urlparse(op.youtube_uri).netloc.lower() not in YOUTUBE_HOSTS:
        raise _PayloadError(f"youtube_uri must be a YouTube URL, got {op.youtube_uri!r}")
    video: dict[str, Any] = {"video": {"youtubeUri": op.youtube_uri}}
    if op.caption:
        video["caption"] = op.caption
    return video


_ITEM_PAYLOAD_BUILDERS: dict[str, Callable[[CreateItemOperation], dict[str, Any]]] = {
    "text": lambda op: {},
    "pageBreak": lambda op: {},
    "question": _build_question,
    "questionGroup": _build_question_group,
    "image": _build_image,
    "video": _build_video,
}


# --- Operation Builders ---
@_returns_build_error
def build_create_item_request(
    op: CreateItemOperation, items: Sequence[dict] = ()
) -> WireRequest:
    """
    Build a createItem request.

    Args:
        op: The create operation
        items: Items of the form as fetched before the batch; an omitted
            insertion index defaults to ``len(items)`` (end of the form)

    Returns:
        Request dictionary, or BuildError for an invalid payload
    """
    if not op.title:
        raise _PayloadError("title is required when creating an item")
    if op.grading and op.item_type != "question":
        raise _PayloadError("grading can only be set on question items")

    payload_builder = _ITEM_PAYLOAD_BUILDERS.get(op.item_type)
    if payload_builder is None:
        raise _PayloadError(f"Unknown item type: {op.item_type}")

    item: dict[str, Any] = {"title": op.title}
    if op.description:
        item["description"] = op.description
    if op.item_id:
        item["itemId"] = op.item_id
    item[ITEM_PAYLOAD_KEYS[op.item_type]] = payload_builder(op)

    index = op.index if op.index is not None else len(items)
    return {"createItem": {"item": item, "location": {"index": index}}}


@_returns_build_error
def build_update_item_request(
    op: UpdateItemOperation, items: Sequence[dict] = ()
) -> WireRequest:
    """
    Build an updateItem request.

    Every path of the update mask must be settable on the item currently
    at ``op.index``: the common fields, or fields under the payload key of
    that item's own kind. Fields of ``op.item`` outside the mask are left
    for the API to ignore.
    """
    if not 0 <= op.index < len(items):
        raise _PayloadError(
            f"Index {op.index} is out of range (form has {len(items)} items)"
        )

    paths = split_update_mask(op.update_mask)
    if not paths:
        raise _PayloadError("update_mask must name at least one field")

    kind = get_item_kind(items[op.index])
    own_key = ITEM_PAYLOAD_KEYS.get(kind) if kind else None
    for path in paths:
        root = path.split(".", 1)[0]
        if root in COMMON_ITEM_FIELDS or root == own_key:
            continue
        if root in ITEM_PAYLOAD_KEYS.values():
            raise _PayloadError(
                f"Field '{path}' cannot be set on a {kind or 'unknown'} item"
            )
        raise _PayloadError(f"Unknown field '{path}' in update_mask")

    return {
        "updateItem": {
            "item": op.item,
            "location": {"index": op.index},
            "updateMask": ",".join(paths),
        }
    }


@_returns_build_error
def build_delete_item_request(
    op: DeleteItemOperation, items: Sequence[dict] = ()
) -> WireRequest:
    """Build a deleteItem request."""
    return {"deleteItem": {"location": {"index": op.index}}}


@_returns_build_error
def build_move_item_request(
    op: MoveItemOperation, items: Sequence[dict] = ()
) -> WireRequest:
    """Build a moveItem request."""
    return {
        "moveItem": {
            "originalLocation": {"index": op.index},
            "newLocation": {"index": op.new_index},
        }
    }


@_returns_build_error
def build_update_form_info_request(
    op: UpdateFormInfoOperation, items: Sequence[dict] = ()
) -> WireRequest:
    """
    Build an updateFormInfo request.

    The update mask lists exactly the fields that were provided.
    """
    info: dict[str, Any] = {}
    fields_to_update: list[str] = []

    if op.title is not None:
        info["title"] = op.title
        fields_to_update.append("title")

    if op.description is not None:
        info["description"] = op.description
        fields_to_update.append("description")

    if not fields_to_update:
        raise _PayloadError("Nothing to update: provide title and/or description")

    return {"updateFormInfo": {"info": info, "updateMask": ",".join(fields_to_update)}}


@_returns_build_error
def build_update_form_settings_request(
    op: UpdateFormSettingsOperation, items: Sequence[dict] = ()
) -> WireRequest:
    """
    Build an updateSettings request.

    The update mask lists exactly the settings that were provided.
    """
    settings: dict[str, Any] = {}
    fields_to_update: list[str] = []

    if op.email_collection_type is not None:
        settings["emailCollectionType"] = op.email_collection_type
        fields_to_update.append("emailCollectionType")

    if op.is_quiz is not None:
        settings.setdefault("quizSettings", {})["isQuiz"] = op.is_quiz
        fields_to_update.append("quizSettings.isQuiz")

    if op.release_grade is not None:
        settings.setdefault("quizSettings", {})["releaseGrade"] = op.release_grade
        fields_to_update.append("quizSettings.releaseGrade")

    if not fields_to_update:
        raise _PayloadError(
            "Nothing to update: provide email_collection_type, is_quiz and/or release_grade"
        )

    return {"updateSettings": {"settings": settings, "updateMask": ",".join(fields_to_update)}}


REQUEST_BUILDERS: dict[str, Callable[..., WireRequest | BuildError]] = {
    "create_item": build_create_item_request,
    "update_item": build_update_item_request,
    "delete_item": build_delete_item_request,
    "move_item": build_move_item_request,
    "update_form_info": build_update_form_info_request,
    "update_form_settings": build_update_form_settings_request,
}


# --- Convenience ---
def build_item_patch(
    title: str | None = None,
    description: str | None = None,
    required: bool | None = None,
) -> tuple[dict[str, Any], str]:
    """
    Build the item object and update mask for a simple item update.

    Returns:
        Tuple of (item, update_mask); the mask is empty when nothing was given.
    """
    item: dict[str, Any] = {}
    fields_to_update: list[str] = []

    if title is not None:
        item["title"] = title
        fields_to_update.append("title")

    if description is not None:
        item["description"] = description
        fields_to_update.append("description")

    if required is not None:
        item["questionItem"] = {"question": {"required": required}}
        fields_to_update.append("questionItem.question.required")

    return item, ",".join(fields_to_update)
