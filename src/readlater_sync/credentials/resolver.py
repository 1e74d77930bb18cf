"""Credential reference parsing and resolution."""

from __future__ import annotations

import logging
from typing import Mapping

from readlater_sync.credentials.backends import CredentialBackend, default_backends
from readlater_sync.errors import (
    BackendUnavailableError,
    CredentialNotFoundError,
    CredentialResolutionError,
)
from readlater_sync.models import CredentialReference, CredentialValue

logger = logging.getLogger(__name__)


def parse_reference(value: str) -> CredentialValue:
    """Parse a raw credential string.

    Formats:
        op://vault/item/field  -> onepassword, pointer is the whole string
        bw://item/field        -> bitwarden, pointer is the whole string
        env://NAME             -> env, pointer is NAME
        anything else          -> returned unchanged as a literal
    """
    if value.startswith("op://"):
        return CredentialReference(backend="onepassword", pointer=value)
    if value.startswith("bw://"):
        return CredentialReference(backend="bitwarden", pointer=value)
    if value.startswith("env://"):
        return CredentialReference(backend="env", pointer=value[len("env://"):])
    return value


def format_reference(value: CredentialValue) -> str:
    """Inverse of parse_reference, used when writing settings back."""
    if isinstance(value, str):
        return value
    if value.backend == "env":
        return f"env://{value.pointer}"
    return value.pointer


class CredentialResolver:
    """Resolves credential values against a set of registered backends."""

    def __init__(self, backends: Mapping[str, CredentialBackend] | None = None):
        self.backends: dict[str, CredentialBackend] = dict(
            backends if backends is not None else default_backends()
        )

    def register(self, backend: CredentialBackend) -> None:
        self.backends[backend.name] = backend

    def resolve(self, value: CredentialValue) -> str:
        """Resolve one value to a secret.

        Raises:
            BackendUnavailableError: the reference's backend is missing or unusable
            CredentialNotFoundError: the backend has no value for the pointer
        """
        if isinstance(value, str):
            return value
        if value.backend == "plain":
            return value.pointer

        backend = self.backends.get(value.backend)
        if backend is None or not backend.is_available():
            raise BackendUnavailableError(value.backend, reference=value.pointer)

        secret = backend.get_credential(value.pointer)
        if not secret:
            raise CredentialNotFoundError(value.backend, value.pointer)

        logger.debug("Resolved credential %s via %s", value.pointer, value.backend)
        return secret

    def resolve_many(self, values: Mapping[str, CredentialValue]) -> dict[str, str]:
        """Resolve every entry; the first failure is raised naming its key."""
        resolved = {}
        for key, value in values.items():
            if value is None or value == "":
                continue
            if isinstance(value, str):
                value = parse_reference(value)
            try:
                resolved[key] = self.resolve(value)
            except CredentialResolutionError as e:
                e.key = key
                e.reference = format_reference(value)
                raise
        return resolved

    def list_available(self) -> list[str]:
        """Names of backends whose tooling is usable right now."""
        return [name for name, backend in self.backends.items() if backend.is_available()]
