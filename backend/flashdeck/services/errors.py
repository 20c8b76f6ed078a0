"""Service-layer error types."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class FieldIssue:
    loc: tuple[str | int, ...]
    msg: str


class ServiceValidationError(ValueError):
    """Malformed input rejected before any state change."""

    def __init__(self, message: str, issues: list[FieldIssue] | None = None) -> None:
        super().__init__(message)
        self.issues = issues or []

    def details(self) -> list[dict[str, object]]:
        return [{"loc": list(issue.loc), "msg": issue.msg} for issue in self.issues]


class NotFoundError(LookupError):
    """Unknown or non-owned resource."""

    def __init__(self, resource: str, missing_ids: list[str] | None = None) -> None:
        self.resource = resource
        self.missing_ids = missing_ids or []
        if self.missing_ids:
            message = f"{resource} not found: {', '.join(self.missing_ids)}"
        else:
            message = f"{resource} not found"
        super().__init__(message)
