from typing import Any, Protocol


class LookupContext(Protocol):
    """What the calling configuration engine hands to a lookup."""

    def cache_all(self, data: dict[str, Any]) -> None: ...

    def not_found(self) -> None: ...


class MemoryLookupContext:
    def __init__(self) -> None:
        self.cached: dict[str, Any] | None = None
        self.missed = False

    def cache_all(self, data: dict[str, Any]) -> None:
        self.cached = dict(data)

    def not_found(self) -> None:
        self.missed = True
