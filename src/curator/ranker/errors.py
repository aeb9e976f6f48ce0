"""Errors raised by the ranker."""

from curator.errors import CuratorError


class InvalidSortOptionError(CuratorError):
    """The requested sort option is not supported."""

    kind = "invalid_sort_option"

    def __init__(self, value: str, allowed: list[str]) -> None:
        self.value = value
        super().__init__(
            f"Unsupported sort option: {value!r}",
            context={"value": value, "allowed": allowed},
        )
