"""Pagesmith exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class PagesmithError(Exception):
    """Base exception for pagesmith errors."""


class ConfigurationError(PagesmithError):
    """Raised when the renderer cannot be configured.

    Covers template directories that cannot be created or read.

    Attributes:
        path: The offending path, if any.
    """

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        """Initialize with error message and optional path context."""
        super().__init__(message)
        self.path: Path | None = path


class ConfigLoadError(ConfigurationError):
    """Raised when a configuration file cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message, path=path)
        self.line: int | None = line
        self.column: int | None = column


class ResolutionError(PagesmithError, LookupError):
    """Raised when a template name is not found in any resolution source.

    Attributes:
        name: The logical template name that could not be resolved.
        referrer: The template being rendered when the lookup failed, if it
            differs from ``name``.
    """

    def __init__(
        self,
        message: str,
        *,
        name: str,
        referrer: str | None = None,
    ) -> None:
        """Initialize with error message and lookup context."""
        super().__init__(message)
        self.name: str = name
        self.referrer: str | None = referrer


class SynthesisIOError(PagesmithError):
    """Raised when a working template cannot be written.

    Attributes:
        path: Target path of the working template.
        cause: The underlying I/O error.
    """

    def __init__(self, message: str, *, path: Path, cause: OSError) -> None:
        """Initialize with error message, target path and cause."""
        super().__init__(message)
        self.path: Path = path
        self.cause: OSError = cause


class EngineError(PagesmithError):
    """Raised when the template engine fails to parse or evaluate a template.

    Attributes:
        template: Logical or synthetic inline name of the template.
        cause: The underlying engine or I/O error.
    """

    def __init__(self, message: str, *, template: str, cause: Exception) -> None:
        """Initialize with error message, template identity and cause."""
        super().__init__(message)
        self.template: str = template
        self.cause: Exception = cause


class InstantiationError(PagesmithError):
    """Raised when a declared template model cannot be constructed.

    Attributes:
        name: Name the model was to be registered under.
        identifier: The factory identifier from configuration.
        cause: The underlying error, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        name: str,
        identifier: str,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and binding context."""
        super().__init__(message)
        self.name: str = name
        self.identifier: str = identifier
        self.cause: Exception | None = cause
