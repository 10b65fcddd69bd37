"""Exception types raised by the scoring system."""

from __future__ import annotations


class InvalidRoleConfigError(ValueError):
    """Raised when a role configuration fails validation before scoring."""

    def __init__(self, errors: list[str]):
        super().__init__("Invalid role configuration")
        self.errors = errors

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Invalid role configuration: {self.errors}"


class InvalidEvidenceError(ValueError):
    """Raised when an evidence payload is structurally malformed."""

    def __init__(self, errors: list[str]):
        super().__init__("Invalid evidence bundle")
        self.errors = errors

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Invalid evidence bundle: {self.errors}"


class EvidenceExtractionError(RuntimeError):
    """Raised when the upstream evidence extraction call fails or is unparseable."""


def validation_messages(exc: Exception) -> list[str]:
    """Flatten a pydantic ``ValidationError`` into readable messages."""
    errors = getattr(exc, "errors", None)
    if not callable(errors):
        return [str(exc)]
    messages: list[str] = []
    for item in errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "<root>"
        messages.append(f"{location}: {item.get('msg', 'invalid value')}")
    return messages
