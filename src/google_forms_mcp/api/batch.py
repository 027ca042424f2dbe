"""
Batch translation for Google Forms.

Turns an ordered list of batch operations into one atomic
``forms.batchUpdate`` call: fetch a snapshot of the form, reorder,
validate and build every request against that snapshot, then submit.
Nothing is submitted unless every operation is valid.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from fastmcp.exceptions import ToolError

from google_forms_mcp.types import BatchOperation, OperationError, parse_operations
from google_forms_mcp.api import helpers
from google_forms_mcp.api.builders import REQUEST_BUILDERS, BuildError
from google_forms_mcp.api.service import FormsService
from google_forms_mcp.utils import log


@dataclass
class BatchResult:
    """Outcome of a submitted batch."""

    form_id: str
    operations: list[BatchOperation]
    form: dict[str, Any]
    applied_count: int

    @property
    def item_count(self) -> int:
        return len(helpers.get_items(self.form))


def order_operations(operations: Sequence[BatchOperation]) -> list[tuple[int, BatchOperation]]:
    """
    Order operations for submission, tagging each with its 1-based position.

    The Forms API resolves every createItem location against the form as it
    was before the batch, so creations go first and in reverse order; all
    other operations follow in their original relative order.
    """
    tagged = list(enumerate(operations, start=1))
    creations = [entry for entry in tagged if entry[1].operation == "create_item"]
    others = [entry for entry in tagged if entry[1].operation != "create_item"]
    return list(reversed(creations)) + others


def _index_label(field_name: str) -> str:
    return field_name.replace("_", " ").capitalize()


def _check_indexes(op: BatchOperation, item_count: int) -> str | None:
    """Return a description of the first out-of-range index, if any."""
    for field_name in op.item_index_fields:
        value = getattr(op, field_name)
        if not 0 <= value < item_count:
            return (
                f"{_index_label(field_name)} {value} is out of range "
                f"(form has {item_count} items)"
            )
    for field_name in op.insertion_index_fields:
        value = getattr(op, field_name)
        if value is not None and not 0 <= value <= item_count:
            return (
                f"{_index_label(field_name)} {value} is out of range "
                f"(valid positions are 0-{item_count})"
            )
    return None


def translate_operations(
    operations: Sequence[BatchOperation | dict], form: dict
) -> list[dict]:
    """
    Validate operations against a form snapshot and build the wire requests.

    Every index is checked against ``form`` as given; no operation sees the
    effect of another in the same batch. This makes no remote calls, so the
    same input always gives the same verdict.

    Args:
        operations: Operations in the caller's order (models or raw dicts)
        form: Snapshot of the form from ``forms.get``

    Returns:
        Request dictionaries in submission order

    Raises:
        OperationShapeError: If a raw operation does not match any schema
        OperationError: For the first operation that fails validation
        ToolError: If there is nothing to submit
    """
    parsed = parse_operations(list(operations))
    items = helpers.get_items(form)
    item_count = len(items)

    ordered = order_operations(parsed)
    log(f"Processing order: {[position for position, _ in ordered]}")

    requests: list[dict] = []
    for position, op in ordered:
        builder = REQUEST_BUILDERS.get(op.operation)
        if builder is None:
            raise OperationError(position, op.operation, "Unknown operation type")

        index_problem = _check_indexes(op, item_count)
        if index_problem:
            raise OperationError(position, op.operation, index_problem)

        request = builder(op, items)
        if isinstance(request, BuildError):
            raise OperationError(position, op.operation, request.message)
        requests.append(request)

    if not requests:
        raise ToolError("No operations to execute")

    log(f"Built {len(requests)} requests")
    return requests


class BatchTranslator:
    """
    Executes batches of form operations through an injected FormsService.

    Holds no state between calls besides the service handle.
    """

    def __init__(self, service: FormsService):
        self.service = service

    def fetch_form(self, form_ref: str) -> tuple[str, dict]:
        """Resolve a form reference and fetch the form."""
        form_id = helpers.extract_form_id(form_ref)
        log(f"Fetching form {form_id}")
        return form_id, self.service.get_form(form_id)

    def validate(self, form_ref: str, operations: Sequence[BatchOperation | dict]) -> list[dict]:
        """Fetch the form and translate operations without submitting them."""
        _, form = self.fetch_form(form_ref)
        return translate_operations(operations, form)

    def execute(
        self, form_ref: str, operations: Sequence[BatchOperation | dict]
    ) -> BatchResult:
        """
        Validate and apply a batch of operations atomically.

        Args:
            form_ref: Form ID or Google Forms URL
            operations: Operations in the caller's order

        Returns:
            BatchResult with the updated form and the number of applied requests

        Raises:
            ToolError: For invalid input, a missing form, or a rejected batch
        """
        parsed = parse_operations(list(operations))
        form_id, form = self.fetch_form(form_ref)
        log(
            f"Translating {len(parsed)} operations for form {form_id} "
            f"({len(helpers.get_items(form))} items)"
        )

        requests = translate_operations(parsed, form)

        log(f"Submitting {len(requests)} requests to form {form_id}")
        response = self.service.batch_update(form_id, requests, include_form_in_response=True)
        updated_form = response.get("form") or {}
        log(f"Batch applied to form {form_id}")

        return BatchResult(
            form_id=form_id,
            operations=parsed,
            form=updated_form,
            applied_count=len(requests),
        )
