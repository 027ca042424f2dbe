"""
Human-readable summaries of executed batches.
"""

import json

from google_forms_mcp.types import (
    BatchOperation,
    CreateItemOperation,
    DeleteItemOperation,
    FormOption,
    MoveItemOperation,
    UpdateFormInfoOperation,
    UpdateFormSettingsOperation,
    UpdateItemOperation,
)
from google_forms_mcp.api.batch import BatchResult


def _describe_option(option: FormOption) -> str:
    text = f'"{option.value}"'
    if option.go_to_action:
        text += f" (→{option.go_to_action})"
    elif option.go_to_section_id:
        text += f" (→Section:{option.go_to_section_id})"
    return text


def _describe_create(op: CreateItemOperation) -> str:
    description = f'Create item: type={op.item_type}, title="{op.title}"'
    if op.index is not None:
        description += f", position={op.index}"

    if op.item_type == "question":
        if op.question_type:
            description += f", question_type={op.question_type}"
        if op.options:
            description += f", options=[{', '.join(_describe_option(o) for o in op.options)}]"
        if op.include_other:
            description += ", with Other"
        if op.required:
            description += ", required"
        if op.grading:
            description += f", points={op.grading.point_value}"
            if op.grading.correct_answers:
                answers = ", ".join(f'"{a}"' for a in op.grading.correct_answers)
                description += f", correct answers=[{answers}]"
    elif op.item_type == "questionGroup":
        if op.rows:
            description += f", rows={len(op.rows)}"
        if op.is_grid or op.columns or op.grid_type:
            description += f", grid={op.grid_type or 'true'}"
            if op.columns:
                description += f", columns={len(op.columns)}"
    elif op.item_type == "image" and op.image_uri:
        description += f", source={op.image_uri}"
    elif op.item_type == "video" and op.youtube_uri:
        description += f", youtube={op.youtube_uri}"

    return description


def _describe_form_info(op: UpdateFormInfoOperation) -> str:
    updates = []
    if op.title is not None:
        updates.append(f'title="{op.title}"')
    if op.description is not None:
        updates.append(f'description="{op.description}"')
    return f"Update form info: {', '.join(updates)}"


def _describe_form_settings(op: UpdateFormSettingsOperation) -> str:
    updates = []
    if op.email_collection_type is not None:
        updates.append(f'email collection="{op.email_collection_type}"')
    if op.is_quiz is not None:
        updates.append(f"quiz mode={'enabled' if op.is_quiz else 'disabled'}")
    if op.release_grade is not None:
        updates.append(f"grade release={op.release_grade}")
    return f"Update form settings: {', '.join(updates)}"


def describe_operation(op: BatchOperation) -> str:
    """Describe one requested operation in a single line."""
    if isinstance(op, CreateItemOperation):
        return _describe_create(op)
    if isinstance(op, UpdateItemOperation):
        return f"Update item: index={op.index}, fields: {op.update_mask}"
    if isinstance(op, DeleteItemOperation):
        return f"Delete item: index={op.index}"
    if isinstance(op, MoveItemOperation):
        return f"Move item: index={op.index} → {op.new_index}"
    if isinstance(op, UpdateFormInfoOperation):
        return _describe_form_info(op)
    if isinstance(op, UpdateFormSettingsOperation):
        return _describe_form_settings(op)
    return "Unknown operation"


def format_batch_result(result: BatchResult, include_form: bool = True) -> str:
    """
    Render a confirmation message for an applied batch.

    Operations are listed in the order the caller gave them. The batch is
    all-or-nothing, so every listed operation was applied.

    Args:
        result: The executed batch
        include_form: Append the updated form as JSON

    Returns:
        Multi-line summary
    """
    lines = [f"Executed {result.applied_count} operations in batch.", "", "Operations:"]
    lines.extend(
        f"{i}. {describe_operation(op)}" for i, op in enumerate(result.operations, start=1)
    )
    lines.append("")
    lines.append(f"The form now has {result.item_count} items.")

    if include_form:
        lines.append("")
        lines.append("Updated form information:")
        lines.append(json.dumps(result.form, indent=2, ensure_ascii=False))

    return "\n".join(lines)
