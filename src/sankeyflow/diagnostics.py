"""
Diagnostics for editor integrations.

Converts parse failures into line-anchored diagnostics. Size and resource
guards are reported as warnings, everything else as errors.

DiagnosticCollection is the per-host store of diagnostics keyed by document.
The host creates one when it starts, passes it to whatever needs it and
disposes it on shutdown.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from .parser import ErrorKind, ParseError, Parser


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


WARNING_KINDS = (ErrorKind.TOO_LARGE, ErrorKind.RESOURCE_LIMIT_EXCEEDED)


@dataclass(frozen=True)
class Diagnostic:
    """
    A problem found in a document.

    Attributes:
        line: 1-based line number (1 when the error has no line).
        message: Human-readable error message.
        severity: ERROR or WARNING.
        kind: The ErrorKind of the underlying failure.
    """

    line: int
    message: str
    severity: Severity
    kind: ErrorKind


def diagnostic_from_error(error: ParseError) -> Diagnostic:
    """Build a Diagnostic from a ParseError."""
    severity = Severity.WARNING if error.kind in WARNING_KINDS else Severity.ERROR
    return Diagnostic(
        line=error.line or 1,
        message=str(error),
        severity=severity,
        kind=error.kind,
    )


def validate_text(text: str, parser: Optional[Parser] = None) -> List[Diagnostic]:
    """
    Parse a document and report its diagnostics.

    Returns an empty list when the document parses cleanly. Parsing stops at
    the first error, so at most one diagnostic is returned.
    """
    parser = parser or Parser()
    try:
        parser.parse(text)
    except ParseError as e:
        return [diagnostic_from_error(e)]
    return []


class DiagnosticCollection:
    """Diagnostics per document, owned by the caller."""

    def __init__(self, name: str = "sankey"):
        self.name = name
        self._entries: Dict[str, List[Diagnostic]] = {}
        self._disposed = False

    def _check_alive(self) -> None:
        if self._disposed:
            raise RuntimeError(f"Diagnostic collection {self.name!r} is disposed")

    def set(self, key: str, diagnostics: List[Diagnostic]) -> None:
        """Replace the diagnostics for a document; an empty list clears it."""
        self._check_alive()
        if diagnostics:
            self._entries[key] = list(diagnostics)
        else:
            self._entries.pop(key, None)

    def get(self, key: str) -> List[Diagnostic]:
        self._check_alive()
        return list(self._entries.get(key, []))

    def delete(self, key: str) -> None:
        self._check_alive()
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._check_alive()
        self._entries.clear()

    def keys(self) -> List[str]:
        self._check_alive()
        return list(self._entries)

    def validate(self, key: str, text: str, parser: Optional[Parser] = None) -> None:
        """Parse a document and store its diagnostics under key."""
        self.set(key, validate_text(text, parser))

    def dispose(self) -> None:
        """Drop all entries; any further use raises RuntimeError."""
        self._entries.clear()
        self._disposed = True

    @property
    def disposed(self) -> bool:
        return self._disposed
