"""Secret backends that credential references are resolved against.

Every backend answers two questions: is it usable on this machine, and what
value does it hold for a pointer. Lookups never raise; a missing value, a
failing subprocess or unparsable output all come back as None.
"""

from __future__ import annotations

import json
import logging
import os
import re
import shutil
import subprocess
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

SUBPROCESS_TIMEOUT = 30

BITWARDEN_REFERENCE = re.compile(r"^bw://([^/]+)/(.+)$")


class CredentialBackend:
    """Base class for credential backends."""

    name: str = "base"

    def is_available(self) -> bool:
        raise NotImplementedError

    def get_credential(self, pointer: str) -> str | None:
        raise NotImplementedError


class EnvBackend(CredentialBackend):
    """Process environment variables; the pointer is the variable name."""

    name = "env"

    def is_available(self) -> bool:
        return True

    def get_credential(self, pointer: str) -> str | None:
        return os.environ.get(pointer) or None


def _run(args: list[str]) -> subprocess.CompletedProcess | None:
    """Run a secret-manager command, returning None if it could not be started."""
    try:
        return subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=SUBPROCESS_TIMEOUT,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning("Failed to run %s: %s", args[0], e)
        return None


class OnePasswordBackend(CredentialBackend):
    """1Password CLI (`op`). Pointers are full `op://vault/item/field` references."""

    name = "onepassword"
    command = "op"

    def is_available(self) -> bool:
        if shutil.which(self.command) is None:
            return False
        return self.is_signed_in()

    def is_signed_in(self) -> bool:
        result = _run([self.command, "account", "list"])
        return result is not None and result.returncode == 0 and bool(result.stdout.strip())

    def get_credential(self, pointer: str) -> str | None:
        result = _run([self.command, "read", pointer])
        if result is None:
            return None
        if result.returncode != 0:
            logger.warning(
                "Failed to read 1Password credential %s: %s", pointer, result.stderr.strip()
            )
            return None
        value = result.stdout.strip()
        return value or None


class BitwardenField(BaseModel):
    """Custom field attached to a Bitwarden item."""

    name: Optional[str] = None
    value: Optional[str] = None


class BitwardenLogin(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class BitwardenItem(BaseModel):
    """The subset of `bw get item` output used for lookups."""

    name: Optional[str] = None
    login: Optional[BitwardenLogin] = None
    fields: list[BitwardenField] = Field(default_factory=list)

    def field_value(self, field_name: str) -> str | None:
        if self.login is not None:
            if field_name == "username" and self.login.username:
                return self.login.username
            if field_name == "password" and self.login.password:
                return self.login.password
        for item_field in self.fields:
            if item_field.name == field_name:
                return item_field.value or None
        return None


def parse_bitwarden_item(output: str) -> BitwardenItem | None:
    """Validate `bw get item` JSON; any shape mismatch counts as not found."""
    try:
        return BitwardenItem.model_validate(json.loads(output))
    except (ValueError, ValidationError) as e:
        logger.warning("Unexpected Bitwarden item output: %s", e)
        return None


class BitwardenBackend(CredentialBackend):
    """Bitwarden CLI (`bw`). Pointers are `bw://item/field` references."""

    name = "bitwarden"
    command = "bw"

    def is_available(self) -> bool:
        if shutil.which(self.command) is None:
            return False
        result = _run([self.command, "--version"])
        return result is not None and result.returncode == 0

    def get_credential(self, pointer: str) -> str | None:
        match = BITWARDEN_REFERENCE.match(pointer)
        if not match:
            logger.warning("Invalid Bitwarden reference format: %s", pointer)
            return None

        item_name, field_name = match.groups()
        result = _run([self.command, "get", "item", item_name])
        if result is None:
            return None
        if result.returncode != 0:
            logger.warning(
                "Failed to read Bitwarden item %s: %s", item_name, result.stderr.strip()
            )
            return None

        item = parse_bitwarden_item(result.stdout)
        if item is None:
            return None

        value = item.field_value(field_name)
        if value is None:
            logger.warning("Field '%s' not found in Bitwarden item '%s'", field_name, item_name)
        return value


def default_backends() -> dict[str, CredentialBackend]:
    """Backends in the order they are probed for diagnostics."""
    return {
        "onepassword": OnePasswordBackend(),
        "bitwarden": BitwardenBackend(),
        "env": EnvBackend(),
    }
