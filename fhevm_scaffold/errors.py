"""Error taxonomy for the scaffolding tool.

Every failure raised by the registry, renderer and materializer derives from
:class:`ScaffoldError`, so the CLI can report any of them uniformly.  Errors
carry the *subject* (example or category identifier) and the *step* that
failed, both of which end up in the human-readable message.
"""

from __future__ import annotations

from collections.abc import Iterable


class ScaffoldError(Exception):
    """Base class for all scaffolding failures."""

    def __init__(
        self,
        message: str,
        *,
        subject: str | None = None,
        step: str | None = None,
    ) -> None:
        self.subject = subject
        self.step = step
        self.detail = message
        prefix = ""
        if subject and step:
            prefix = f"[{subject}] {step}: "
        elif subject:
            prefix = f"[{subject}] "
        elif step:
            prefix = f"{step}: "
        super().__init__(f"{prefix}{message}")


class ConfigurationError(ScaffoldError):
    """The static registry is internally inconsistent."""

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors = list(errors)
        lines = "\n".join(f"  - {e}" for e in self.errors)
        super().__init__(
            f"Example registry failed validation:\n{lines}",
            step="validate registry",
        )


class NotFoundError(ScaffoldError):
    """A requested example or category identifier is not registered."""

    def __init__(self, kind: str, identifier: str, available: Iterable[str]) -> None:
        self.kind = kind
        self.identifier = identifier
        self.available = sorted(available)
        listing = "\n".join(f"  - {name}" for name in self.available) or "  (none)"
        super().__init__(
            f"Unknown {kind}: {identifier}\n\nAvailable {kind}s:\n{listing}",
            subject=identifier,
            step=f"resolve {kind}",
        )


class MissingArtifactError(ScaffoldError):
    """A referenced source or test artifact is absent, unreadable or empty."""


class FilesystemError(ScaffoldError):
    """An I/O failure while copying or writing generated files."""


class AlreadyExistsError(FilesystemError):
    """The target directory exists, is non-empty, and overwrite was not requested."""


class ConflictError(FilesystemError):
    """Another invocation is currently generating into the same target."""


__all__ = [
    "AlreadyExistsError",
    "ConfigurationError",
    "ConflictError",
    "FilesystemError",
    "MissingArtifactError",
    "NotFoundError",
    "ScaffoldError",
]
