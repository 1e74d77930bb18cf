"""Exception hierarchy for read-later sync.

Provider-scoped errors (credential resolution, authentication, extraction) are
caught by the orchestrator and reported as failed results. Configuration and
persistence errors propagate to the caller.
"""

from __future__ import annotations


class ReadLaterError(Exception):
    """Base class for all read-later sync errors."""


class ConfigurationError(ReadLaterError):
    """Settings document is missing or malformed."""


class CredentialResolutionError(ReadLaterError):
    """A credential value could not be turned into a secret."""

    def __init__(self, message: str, key: str | None = None, reference: str | None = None):
        super().__init__(message)
        self.key = key
        self.reference = reference

    def __str__(self) -> str:
        message = super().__str__()
        if self.key is None:
            return message
        return f"Credential '{self.key}' ({self.reference}): {message}"


class BackendUnavailableError(CredentialResolutionError):
    """The backend named by a reference cannot be used on this machine."""

    def __init__(self, backend: str, reference: str | None = None):
        super().__init__(f"Credential backend '{backend}' not available", reference=reference)
        self.backend = backend


class CredentialNotFoundError(CredentialResolutionError):
    """The backend is usable but has no value for the pointer."""

    def __init__(self, backend: str, pointer: str):
        super().__init__(f"Failed to resolve credential: {pointer}", reference=pointer)
        self.backend = backend
        self.pointer = pointer


class AuthenticationFailure(ReadLaterError):
    """Provider could not log in, or was used before logging in."""


class ExtractionFailure(ReadLaterError):
    """Saved items could not be read or parsed."""


class PersistenceError(ReadLaterError):
    """Rendered output could not be written to its target.

    When raised from a sync run, `run` and `content` carry what was fetched
    and rendered so the caller can still report or emit it.
    """

    run = None
    content = None


class VersionControlWarning(UserWarning):
    """Non-fatal failure of a pull, commit or push."""
