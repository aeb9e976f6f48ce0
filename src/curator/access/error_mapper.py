"""Maps domain errors to HTTP-equivalent status codes.

Extend by adding kinds to the table, not by branching on classes.
"""

from http import HTTPStatus
from typing import Final

from curator.errors import CuratorError


STATUS_BY_KIND: Final[dict[str, HTTPStatus]] = {
    "invalid_scope": HTTPStatus.BAD_REQUEST,
    "missing_scope_field": HTTPStatus.BAD_REQUEST,
    "invalid_sort_option": HTTPStatus.BAD_REQUEST,
    "invalid_topics": HTTPStatus.UNPROCESSABLE_ENTITY,
    "tier_insufficient": HTTPStatus.FORBIDDEN,
    "folder_not_owned": HTTPStatus.FORBIDDEN,
    "item_archived": HTTPStatus.CONFLICT,
    "folder_not_found": HTTPStatus.NOT_FOUND,
    "digest_not_found": HTTPStatus.NOT_FOUND,
    "item_not_found": HTTPStatus.NOT_FOUND,
}


def map_error_to_status(error: CuratorError) -> HTTPStatus:
    """Status code for a domain error; unknown kinds map to 500."""
    return STATUS_BY_KIND.get(error.kind, HTTPStatus.INTERNAL_SERVER_ERROR)


def error_payload(error: CuratorError) -> dict[str, object]:
    """Response body for a domain error.

    Tier errors carry ``upgrade_required`` and ``required_tier`` so
    clients can show an upgrade prompt.
    """
    status = map_error_to_status(error)
    payload: dict[str, object] = {
        "status": int(status),
        "error": error.kind,
        "message": error.message,
        "details": error.context,
    }
    if error.kind == "tier_insufficient":
        payload["upgrade_required"] = True
        payload["required_tier"] = error.context.get("required_tier")
    return payload
