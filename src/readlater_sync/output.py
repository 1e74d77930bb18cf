"""Persist rendered articles: append or replace, optionally through a git-backed vault."""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from readlater_sync.errors import ConfigurationError, PersistenceError, VersionControlWarning

logger = logging.getLogger(__name__)

SEPARATOR = "\n\n"
STDOUT_PATH = "-"
VAULT_MARKER = ".obsidian"
SYNC_TOUCH_FILE = "workspace.json"
GIT_TIMEOUT = 120
COMMIT_MESSAGE = "chore: sync read-later articles ({count} articles)"


def merge(existing: str | None, content: str) -> str:
    """Append semantics: join with a blank line, or start fresh."""
    if existing:
        return existing + SEPARATOR + content
    return content


class FileTarget:
    """Writes through the ordinary filesystem."""

    def __init__(self, base_dir: Path | str | None = None):
        self.base_dir = Path(base_dir) if base_dir is not None else None

    def resolve(self, path: str) -> Path:
        candidate = Path(path).expanduser()
        if self.base_dir is not None and not candidate.is_absolute():
            return self.base_dir / candidate
        return candidate

    def read(self, path: str) -> str | None:
        full_path = self.resolve(path)
        if not full_path.exists():
            return None
        try:
            return full_path.read_text(encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Cannot read {full_path}: {e}") from e

    def write(self, path: str, content: str) -> None:
        if path == STDOUT_PATH:
            sys.stdout.write(content + "\n")
            return
        full_path = self.resolve(path)
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Cannot write {full_path}: {e}") from e
        logger.info("Wrote %s", full_path)

    def append(self, path: str, content: str) -> None:
        if path == STDOUT_PATH:
            self.write(path, content)
            return
        self.write(path, merge(self.read(path), content))


class VaultTarget(FileTarget):
    """A managed workspace root (an Obsidian vault) that output is written into."""

    def __init__(self, root: Path | str):
        super().__init__(Path(root).expanduser())
        self.root = self.base_dir

    def is_valid(self) -> bool:
        return self.root.is_dir() and (self.root / VAULT_MARKER).is_dir()

    def validate(self) -> None:
        if not self.is_valid():
            raise ConfigurationError(
                f"Invalid vault path: {self.root} (no {VAULT_MARKER} directory)"
            )

    def resolve(self, path: str) -> Path:
        full_path = (self.root / path).resolve()
        if not full_path.is_relative_to(self.root.resolve()):
            raise PersistenceError(f"Output path escapes the vault: {path}")
        return full_path

    def is_git_repository(self) -> bool:
        return (self.root / ".git").exists()

    def trigger_external_sync(self) -> bool:
        """Touch the workspace file so the sync agent notices new content."""
        workspace_file = self.root / VAULT_MARKER / SYNC_TOUCH_FILE
        if not workspace_file.exists():
            return False
        try:
            workspace_file.touch()
            return True
        except OSError as e:
            logger.warning("Failed to trigger sync: %s", e)
            return False

    def create_backup(self, path: str) -> Path | None:
        """Copy an existing file aside before it is replaced."""
        full_path = self.resolve(path)
        if not full_path.exists():
            return None
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%f")
        backup_path = full_path.with_name(f"{full_path.name}.backup-{timestamp}")
        try:
            shutil.copy2(full_path, backup_path)
        except OSError as e:
            raise PersistenceError(f"Cannot back up {full_path}: {e}") from e
        logger.info("Backed up %s to %s", full_path, backup_path)
        return backup_path


class GitRepository:
    """Git operations on a working copy. Failures are logged and reported as False."""

    def __init__(self, root: Path | str):
        self.root = Path(root)

    def _run(self, *args: str) -> subprocess.CompletedProcess | None:
        try:
            return subprocess.run(
                ["git", *args],
                cwd=self.root,
                capture_output=True,
                text=True,
                timeout=GIT_TIMEOUT,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning("git %s could not run: %s", args[0], e)
            return None

    def _ok(self, *args: str) -> bool:
        result = self._run(*args)
        if result is None:
            return False
        if result.returncode != 0:
            logger.warning("git %s failed: %s", args[0], result.stderr.strip())
            return False
        return True

    def pull(self) -> bool:
        return self._ok("pull")

    def has_staged_changes(self) -> bool:
        result = self._run("diff", "--cached", "--quiet")
        # --quiet exits 1 when there are differences
        return result is not None and result.returncode == 1

    def stage(self, files: list[str] | None = None) -> bool:
        """Stage only the given paths, or everything when none are given."""
        if not files:
            return self._ok("add", "-A")
        return all(self._ok("add", "--", file) for file in files)

    def commit(self, message: str, files: list[str] | None = None) -> bool:
        if files and not self.stage(files):
            return False
        return self._ok("commit", "-m", message)

    def push(self) -> bool:
        return self._ok("push")


@dataclass
class ReconcileResult:
    """What happened to the output target in one run."""
    path: str
    written: bool = False
    committed: bool = False
    pushed: bool = False
    backup: Path | None = None
    warnings: list[VersionControlWarning] = field(default_factory=list)


class OutputReconciler:
    """Merges rendered text into the output note, then commits and pushes if enabled."""

    def __init__(
        self,
        target: FileTarget,
        git: GitRepository | None = None,
        backup: bool = False,
    ):
        self.target = target
        self.git = git
        self.backup = backup

    @classmethod
    def from_settings(cls, vault_path: str | None, git_sync: bool, backup: bool = False):
        if not vault_path:
            return cls(FileTarget(), backup=backup)

        vault = VaultTarget(vault_path)
        vault.validate()
        git = None
        if git_sync:
            if vault.is_git_repository():
                git = GitRepository(vault.root)
            else:
                logger.warning("Git sync requested but %s is not a git repository", vault.root)
        return cls(vault, git=git, backup=backup)

    def pull(self) -> bool:
        """Pull before fetching so the write lands on the latest copy. Never fatal."""
        if self.git is None:
            return False
        if self.git.pull():
            logger.info("Pulled latest changes into %s", self.git.root)
            return True
        logger.warning("%s", VersionControlWarning("git pull failed; continuing with local copy"))
        return False

    def reconcile(
        self,
        path: str,
        content: str,
        append: bool,
        article_count: int,
    ) -> ReconcileResult:
        """Write once, then sync. Raises PersistenceError if the write fails."""
        result = ReconcileResult(path=path)

        if path == STDOUT_PATH:
            # Stdout output is never backed up, touched or committed
            self.target.write(path, content)
            result.written = True
            return result

        if append:
            self.target.append(path, content)
        else:
            if self.backup and isinstance(self.target, VaultTarget):
                result.backup = self.target.create_backup(path)
            self.target.write(path, content)
        result.written = True

        if isinstance(self.target, VaultTarget):
            self.target.trigger_external_sync()

        if self.git is not None:
            self._commit_and_push(result, article_count)

        return result

    def _commit_and_push(self, result: ReconcileResult, article_count: int) -> None:
        if not self.git.stage([result.path]):
            self._warn(result, "git add failed; nothing committed")
            return
        if not self.git.has_staged_changes():
            logger.info("No changes to commit")
            return

        result.committed = self.git.commit(COMMIT_MESSAGE.format(count=article_count))
        if not result.committed:
            self._warn(result, "git commit failed")
            return
        logger.info("Changes committed to git")

        result.pushed = self.git.push()
        if result.pushed:
            logger.info("Changes pushed to remote")
        else:
            self._warn(result, "git push failed; local commit kept")

    @staticmethod
    def _warn(result: ReconcileResult, message: str) -> None:
        warning = VersionControlWarning(message)
        logger.warning("%s", warning)
        result.warnings.append(warning)
