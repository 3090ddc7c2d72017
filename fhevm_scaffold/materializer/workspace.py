"""Target-directory ownership for a single materialization.

A :class:`Workspace` enforces the overwrite policy, holds an exclusive lock
on the target, and builds the project in a hidden staging directory beside
it.  Nothing appears at the target path until :meth:`Workspace.commit`; if
the ``async with`` block exits without committing, the staging directory is
removed and the target is left exactly as it was.
"""

from __future__ import annotations

import asyncio
import os
import shutil
import tempfile
from collections.abc import Iterable
from pathlib import Path

from fhevm_scaffold.errors import AlreadyExistsError, ConflictError, FilesystemError
from fhevm_scaffold.utils import is_empty_dir, write_text


def lock_path_for(target: Path) -> Path:
    """Return the lock file guarding *target*: ``<parent>/.<name>.lock``."""
    return target.parent / f".{target.name}.lock"


class TargetLock:
    """Exclusive, process-independent lock on one target directory.

    The lock file is created with ``O_EXCL`` so two invocations racing for
    the same target cannot both acquire it.  The file records the owner's
    PID; a lock whose owner no longer exists is reclaimed.
    """

    def __init__(self, target: Path, *, subject: str | None = None) -> None:
        self.target = target
        self.path = lock_path_for(target)
        self.subject = subject
        self._held = False

    def acquire(self) -> None:
        """Create the lock file, reclaiming it once if its owner has exited.

        Raises:
            ConflictError: If a live process holds the lock.
            FilesystemError: If the lock file cannot be created.
        """
        try:
            self._create()
        except FileExistsError:
            if not self._owner_gone():
                raise self._conflict() from None
            self.path.unlink(missing_ok=True)
            try:
                self._create()
            except FileExistsError:
                raise self._conflict() from None
        self._held = True

    def _create(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            raise
        except OSError as exc:
            raise FilesystemError(
                f"Cannot create lock file {self.path}: {exc}",
                subject=self.subject,
                step="lock target",
            ) from exc
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(f"{os.getpid()}\n")

    def _owner_gone(self) -> bool:
        """True when the lock file names a process that no longer exists."""
        try:
            pid = int(self.path.read_text(encoding="utf-8").strip())
        except (OSError, ValueError):
            # Unreadable or still being written: assume a live owner.
            return False
        if pid <= 0:
            return False
        try:
            os.kill(pid, 0)
        except ProcessLookupError:
            return True
        except OSError:
            return False
        return False

    def _conflict(self) -> ConflictError:
        return ConflictError(
            f"Another invocation is generating into {self.target} "
            f"(lock file {self.path} exists; remove it if that process is gone)",
            subject=self.subject,
            step="lock target",
        )

    def release(self) -> None:
        if not self._held:
            return
        self._held = False
        self.path.unlink(missing_ok=True)

    @property
    def held(self) -> bool:
        return self._held


class Workspace:
    """Stage a project beside *target* and move it into place on commit.

    Usage::

        async with Workspace(target, overwrite=False, subject="fhe-counter") as ws:
            await ws.copy_template(template_dir, exclude=["node_modules"])
            await ws.write("README.md", readme)
            await ws.commit()
    """

    def __init__(
        self,
        target: str | Path,
        *,
        overwrite: bool = False,
        subject: str | None = None,
    ) -> None:
        self.target = Path(target).absolute()
        self.overwrite = overwrite
        self.subject = subject
        self.lock = TargetLock(self.target, subject=subject)
        self._staging: Path | None = None
        self._committed = False

    # -- Context management ------------------------------------------------

    async def __aenter__(self) -> "Workspace":
        self.check_target()
        self.lock.acquire()
        try:
            # Re-check under the lock; the target may have appeared meanwhile.
            self.check_target()
            self._staging = Path(
                await asyncio.to_thread(
                    tempfile.mkdtemp,
                    prefix=f".{self.target.name}.staging-",
                    dir=str(self.target.parent),
                )
            )
        except BaseException:
            self.lock.release()
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if self._staging is not None and self._staging.exists():
                await asyncio.to_thread(shutil.rmtree, self._staging, ignore_errors=True)
        finally:
            self.lock.release()

    # -- Policy ------------------------------------------------------------

    def check_target(self) -> None:
        """Apply the overwrite policy to the current state of the target.

        Raises:
            AlreadyExistsError: If the target is a file, or a non-empty
                directory and ``overwrite`` is false.
        """
        if not self.target.exists():
            return
        if not self.target.is_dir():
            raise AlreadyExistsError(
                f"Target {self.target} exists and is not a directory",
                subject=self.subject,
                step="check target",
            )
        if not self.overwrite and not is_empty_dir(self.target):
            raise AlreadyExistsError(
                f"Target directory {self.target} already exists and is not empty "
                "(use --force to replace it)",
                subject=self.subject,
                step="check target",
            )

    # -- Staged writes -----------------------------------------------------

    @property
    def staging(self) -> Path:
        if self._staging is None:
            raise RuntimeError("Workspace is not open; use 'async with'")
        return self._staging

    @property
    def committed(self) -> bool:
        return self._committed

    async def copy_template(self, template_dir: Path, *, exclude: Iterable[str] = ()) -> None:
        """Copy the base template into the staging directory."""
        if not template_dir.is_dir():
            raise FilesystemError(
                f"Base template directory not found: {template_dir}",
                subject=self.subject,
                step="copy base template",
            )
        ignore = shutil.ignore_patterns(*exclude)
        try:
            await asyncio.to_thread(
                shutil.copytree, template_dir, self.staging, ignore=ignore, dirs_exist_ok=True
            )
        except (OSError, shutil.Error) as exc:
            raise FilesystemError(
                f"Cannot copy base template {template_dir}: {exc}",
                subject=self.subject,
                step="copy base template",
            ) from exc

    async def write(self, relative: str | Path, content: str, *, step: str = "write file") -> Path:
        """Write *content* to ``staging/relative`` and return the final target path."""
        destination = self.staging / relative
        try:
            await asyncio.to_thread(write_text, destination, content)
        except OSError as exc:
            raise FilesystemError(
                f"Cannot write {relative}: {exc}", subject=self.subject, step=step
            ) from exc
        return self.target / relative

    async def remove(self, relative: str | Path) -> bool:
        """Delete a staged file; return ``False`` if it did not exist."""
        path = self.staging / relative
        if not path.is_file():
            return False
        try:
            await asyncio.to_thread(path.unlink)
        except OSError as exc:
            raise FilesystemError(
                f"Cannot remove {relative}: {exc}", subject=self.subject, step="remove placeholder"
            ) from exc
        return True

    def read(self, relative: str | Path) -> str | None:
        """Return the text of a staged file, or ``None`` if it does not exist."""
        path = self.staging / relative
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    # -- Commit ------------------------------------------------------------

    async def commit(self) -> Path:
        """Move the staged tree into place, replacing any previous target."""
        await asyncio.to_thread(self._swap)
        self._committed = True
        return self.target

    def _swap(self) -> None:
        staging = self.staging
        backup: Path | None = None
        try:
            if self.target.exists():
                backup = self.target.parent / f".{self.target.name}.old-{os.getpid()}"
                if backup.exists():
                    shutil.rmtree(backup)
                os.replace(self.target, backup)
            os.replace(staging, self.target)
        except OSError as exc:
            if backup is not None and backup.exists() and not self.target.exists():
                os.replace(backup, self.target)
            raise FilesystemError(
                f"Cannot move generated project into {self.target}: {exc}",
                subject=self.subject,
                step="commit",
            ) from exc
        self._staging = None
        if backup is not None:
            shutil.rmtree(backup, ignore_errors=True)
