"""Domain errors and the attached error collection used by guides and components."""

from dataclasses import dataclass, field
from typing import Iterator, Optional

BASE = "base"

# Messages carried over from underlying exceptions are cut to this many characters
ERROR_MESSAGE_LIMIT = 50

# Identifier lists in spreadsheet errors are cut to this many characters
ID_LIST_DISPLAY_LIMIT = 300


def truncate(text: str, length: int, omission: str = "...") -> str:
    """Shorten ``text`` so the result, omission included, is at most ``length`` long."""
    if len(text) <= length:
        return text
    return text[: max(length - len(omission), 0)] + omission


def abbreviate(text: str, limit: int = ERROR_MESSAGE_LIMIT) -> str:
    """Keep the first ``limit`` characters and mark the cut with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


@dataclass(frozen=True)
class FieldError:
    """One error attached to a record, either on a field or on the record itself."""

    field: str
    message: str

    @property
    def full_message(self) -> str:
        if self.field == BASE:
            return self.message
        return f"{self.field.replace('_', ' ').capitalize()} {self.message}"


@dataclass
class ErrorSet:
    """Ordered collection of field and base errors."""

    items: list[FieldError] = field(default_factory=list)

    def add(self, field_name: str, message: str) -> None:
        self.items.append(FieldError(field_name, message))

    def extend(self, other: "ErrorSet") -> None:
        self.items.extend(other.items)

    def on(self, field_name: str) -> list[str]:
        """Messages attached to one field."""
        return [e.message for e in self.items if e.field == field_name]

    def full_messages(self) -> list[str]:
        return [e.full_message for e in self.items]

    def clear(self) -> None:
        self.items.clear()

    def to_dict(self) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = {}
        for error in self.items:
            grouped.setdefault(error.field, []).append(error.message)
        return grouped

    def __bool__(self) -> bool:
        return bool(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[FieldError]:
        return iter(self.items)


class VulcanError(Exception):
    """Base exception for Vulcan domain failures."""

    def __init__(self, message: str, field: str = BASE):
        self.message = message
        self.field = field
        super().__init__(message)


class BenchmarkParseError(VulcanError):
    """The benchmark document is not structurally usable."""


class RuleImportError(VulcanError):
    """A bulk rule import was rejected as a whole."""

    @classmethod
    def wrap(cls, context: str, exc: BaseException) -> "RuleImportError":
        """Build the user-facing message for an unexpected failure during an import."""
        return cls(f"Encountered an error when importing rules {context}: {abbreviate(str(exc))}")


class RecordInvalid(VulcanError):
    """Validation failed; ``errors`` holds every attached message."""

    def __init__(self, errors: ErrorSet):
        self.errors = errors
        messages = errors.full_messages()
        super().__init__("; ".join(messages) if messages else "Record is invalid")


class SpreadsheetImportError(VulcanError):
    """A spreadsheet could not be mapped onto a component."""


class MissingHeadersError(SpreadsheetImportError):
    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"The following required headers were missing {', '.join(missing)}")


class MissingSrgIdsError(SpreadsheetImportError):
    def __init__(self, missing: list[str]):
        self.missing = missing
        listed = truncate(", ".join(missing), ID_LIST_DISPLAY_LIMIT)
        super().__init__(
            "The following required SRG IDs were missing from the selected SRG "
            f"{listed}. Please remove these rows or select a different SRG and try again."
        )


class MissingPrefixError(SpreadsheetImportError):
    def __init__(self) -> None:
        super().__init__(
            "No STIG prefixes were detected in the file. Please set any STIGID "
            "in the file and try again."
        )


class UnreadableSpreadsheetError(SpreadsheetImportError):
    def __init__(self, reason: str, filename: Optional[str] = None):
        self.filename = filename
        where = f" {filename}" if filename else ""
        super().__init__(f"Unable to read spreadsheet{where}: {abbreviate(reason)}")


class RuleMutationError(VulcanError):
    """A rule change was refused by the lock or release state."""
