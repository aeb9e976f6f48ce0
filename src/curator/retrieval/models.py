"""Response models for the retrieval service."""

from dataclasses import dataclass, field
from http import HTTPStatus

from curator.access.folders import MembershipChange
from curator.store.models import Folder, Item


@dataclass(frozen=True)
class ItemsResponse:
    """Items returned for a retrieval request.

    Attributes:
        status: HTTP-equivalent status code.
        items: Items in the requested order; empty on error.
        error: Structured error payload when ``status`` is not 200.
    """

    status: int = HTTPStatus.OK
    items: list[Item] = field(default_factory=list)
    error: dict[str, object] | None = None

    @property
    def ok(self) -> bool:
        return HTTPStatus.OK <= self.status < HTTPStatus.MULTIPLE_CHOICES


@dataclass(frozen=True)
class MembershipResponse:
    """Result of a folder membership change.

    Attributes:
        status: HTTP-equivalent status code.
        change: What happened, on success.
        error: Structured error payload when ``status`` is not 200.
    """

    status: int = HTTPStatus.OK
    change: MembershipChange | None = None
    error: dict[str, object] | None = None

    @property
    def ok(self) -> bool:
        return HTTPStatus.OK <= self.status < HTTPStatus.MULTIPLE_CHOICES


@dataclass(frozen=True)
class FolderResponse:
    """Result of a folder management call."""

    status: int = HTTPStatus.OK
    folders: list[Folder] = field(default_factory=list)
    error: dict[str, object] | None = None

    @property
    def ok(self) -> bool:
        return HTTPStatus.OK <= self.status < HTTPStatus.MULTIPLE_CHOICES
