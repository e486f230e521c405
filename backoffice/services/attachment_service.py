"""
Bill attachment storage on local disk.

The policy (directory, size limit, allowed types) is passed in explicitly;
nothing here reads global settings.
"""
import asyncio
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import FrozenSet, Optional
from uuid import uuid4

from backoffice.core.exceptions import InvalidAttachment, StorageError, StorageUnavailable

logger = logging.getLogger(__name__)

DEFAULT_MAX_BYTES = 5 * 1024 * 1024
DEFAULT_EXTENSIONS = frozenset({"jpeg", "jpg", "png", "pdf"})

_STAGING_PREFIX = ".removing-"


@dataclass(frozen=True)
class UploadPolicy:
    """Where attachments live and what may be stored there."""

    directory: str
    max_bytes: int = DEFAULT_MAX_BYTES
    allowed_extensions: FrozenSet[str] = field(default_factory=lambda: DEFAULT_EXTENSIONS)

    def accepts_extension(self, filename: str) -> bool:
        ext = PurePath(filename).suffix.lower().lstrip(".")
        return ext in self.allowed_extensions

    def accepts_content_type(self, content_type: Optional[str]) -> bool:
        # "image/jpeg" -> "jpeg", "application/pdf" -> "pdf"
        if not content_type or "/" not in content_type:
            return False
        subtype = content_type.split(";", 1)[0].split("/", 1)[1].strip().lower()
        return subtype in self.allowed_extensions


class StagedRemoval:
    """
    An old attachment moved aside while the owning record is committed.

    commit() deletes it for good; rollback() puts it back at its stored path.
    """

    def __init__(self, original: Path, staged: Path):
        self.original = original
        self.staged = staged

    async def commit(self) -> None:
        try:
            await asyncio.to_thread(self.staged.unlink, missing_ok=True)
        except OSError as e:
            # Record already points elsewhere; the staged copy is only an orphan now
            logger.warning(
                "Could not delete staged attachment",
                extra={"path": str(self.staged), "error": str(e)},
            )
            return
        logger.info("Attachment removed", extra={"path": self.original.as_posix()})

    async def rollback(self) -> None:
        try:
            await asyncio.to_thread(os.replace, self.staged, self.original)
        except OSError as e:
            logger.error(
                "Could not restore attachment after failed commit",
                extra={"path": self.original.as_posix(), "staged": str(self.staged), "error": str(e)},
            )


class AttachmentStore:
    """Validates, writes and removes bill attachments under one directory."""

    def __init__(self, policy: UploadPolicy):
        self.policy = policy
        self.directory = Path(policy.directory)

    def validate(self, filename: Optional[str], content_type: Optional[str], size: int) -> None:
        """Raise InvalidAttachment unless both extension and content type are allowed and size fits."""
        if not filename or not self.policy.accepts_extension(filename) or not self.policy.accepts_content_type(content_type):
            logger.warning(
                "Rejected attachment type",
                extra={"attachment_name": filename, "content_type": content_type},
            )
            raise InvalidAttachment()
        if size > self.policy.max_bytes:
            logger.warning(
                "Rejected oversized attachment",
                extra={"attachment_name": filename, "size": size, "max_bytes": self.policy.max_bytes},
            )
            limit_mb = self.policy.max_bytes / (1024 * 1024)
            raise InvalidAttachment(f"File too large. Maximum size is {limit_mb:g} MB")

    async def store(self, filename: str, content: bytes, content_type: Optional[str]) -> str:
        """
        Validate and write an upload, returning its forward-slash path.

        The stored name is generated; only the original extension is kept.
        """
        self.validate(filename, content_type, len(content))

        object_name = f"bill_{uuid4().hex}{PurePath(filename).suffix}"
        target = self.directory / object_name

        def _write():
            try:
                self.directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageUnavailable(_unreachable_message(e)) from e
            try:
                target.write_bytes(content)
            except (FileNotFoundError, PermissionError) as e:
                raise StorageUnavailable(_unreachable_message(e)) from e
            except OSError as e:
                raise StorageError("Server error while saving attachment", detail=str(e)) from e

        await asyncio.to_thread(_write)
        path = target.as_posix()
        logger.info("Attachment stored", extra={"path": path, "size": len(content)})
        return path

    def _resolve_owned(self, stored_path: str) -> Optional[Path]:
        """Map a stored path to a file inside the upload directory, or None if it lies outside."""
        path = Path(stored_path)
        try:
            path.resolve().relative_to(self.directory.resolve())
        except ValueError:
            # The record may still drop its reference; the file stays for manual cleanup
            logger.warning(
                "Orphaned attachment left on disk: outside upload directory",
                extra={"path": stored_path, "upload_dir": self.directory.as_posix()},
            )
            return None
        return path

    def _check_reachable(self, path: Path) -> None:
        if not path.parent.is_dir():
            raise StorageUnavailable()

    async def discard(self, stored_path: Optional[str]) -> None:
        """Delete a stored attachment. An already-missing file is not an error."""
        if not stored_path:
            return
        path = self._resolve_owned(stored_path)
        if path is None:
            return

        def _unlink():
            self._check_reachable(path)
            try:
                path.unlink(missing_ok=True)
            except PermissionError as e:
                raise StorageUnavailable(_unreachable_message(e)) from e
            except OSError as e:
                raise StorageError("Server error while removing attachment", detail=str(e)) from e

        await asyncio.to_thread(_unlink)
        logger.info("Attachment removed", extra={"path": stored_path})

    async def stage_removal(self, stored_path: Optional[str]) -> Optional[StagedRemoval]:
        """
        Move an attachment out of its stored path ahead of a record commit.

        Returns None when there is nothing to remove (no reference, or the
        file is already gone).
        """
        if not stored_path:
            return None
        path = self._resolve_owned(stored_path)
        if path is None:
            return None

        def _stage() -> Optional[StagedRemoval]:
            self._check_reachable(path)
            if not path.exists():
                return None
            staged = path.with_name(f"{_STAGING_PREFIX}{uuid4().hex}-{path.name}")
            try:
                os.replace(path, staged)
            except FileNotFoundError:
                return None
            except PermissionError as e:
                raise StorageUnavailable(_unreachable_message(e)) from e
            except OSError as e:
                raise StorageError("Server error while removing attachment", detail=str(e)) from e
            return StagedRemoval(path, staged)

        return await asyncio.to_thread(_stage)


def _unreachable_message(error: OSError) -> str:
    return f"Server error: Upload directory not accessible ({error.strerror or error})"
