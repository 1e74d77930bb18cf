"""Credential reference resolution."""

from readlater_sync.credentials.backends import (
    BitwardenBackend,
    CredentialBackend,
    EnvBackend,
    OnePasswordBackend,
)
from readlater_sync.credentials.resolver import CredentialResolver, parse_reference

__all__ = [
    "BitwardenBackend",
    "CredentialBackend",
    "CredentialResolver",
    "EnvBackend",
    "OnePasswordBackend",
    "parse_reference",
]
