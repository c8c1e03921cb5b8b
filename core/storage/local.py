"""Local file storage for uploaded resumes."""

import logging
import time
import uuid
from pathlib import Path
from typing import Optional

from core.utils.validators import sanitize_filename

logger = logging.getLogger(__name__)


class LocalStorage:
    """Local file storage handler rooted at a single upload directory."""

    def __init__(self, base_path: str = "./uploads"):
        """
        Initialize local storage.

        Args:
            base_path: Base directory for file storage
        """
        self.base_path = Path(base_path)

    @staticmethod
    def unique_filename(original_filename: str) -> str:
        """
        Build a collision-free name that keeps the original stem and extension.

        "My CV.pdf" -> "My_CV-1718000000000-1a2b3c4d.pdf"
        """
        safe = Path(sanitize_filename(original_filename))
        stem = safe.stem or "file"
        suffix = safe.suffix.lower()
        millis = int(time.time() * 1000)
        return f"{stem}-{millis}-{uuid.uuid4().hex[:8]}{suffix}"

    def save(self, file_data: bytes, original_filename: str) -> str:
        """
        Save file to local storage under a unique name.

        Args:
            file_data: File contents
            original_filename: Client-supplied filename

        Returns:
            Stored file reference (path relative to the working directory)
        """
        self.base_path.mkdir(parents=True, exist_ok=True)

        file_path = self.base_path / self.unique_filename(original_filename)
        file_path.write_bytes(file_data)

        logger.info(f"Saved file to {file_path} ({len(file_data)} bytes)")
        return file_path.as_posix()

    def resolve(self, reference: str) -> Optional[Path]:
        """
        Map a stored reference back to a file inside the upload directory.

        Returns None when the reference points outside the directory or the
        file no longer exists.
        """
        candidate = Path(reference)
        base = self.base_path.resolve()
        try:
            resolved = candidate.resolve()
            resolved.relative_to(base)
        except ValueError:
            logger.warning(f"Rejected file reference outside upload dir: {reference}")
            return None

        return resolved if resolved.is_file() else None

    def delete(self, reference: str) -> bool:
        """
        Delete a stored file.

        Args:
            reference: Reference returned by save()

        Returns:
            True if a file was deleted
        """
        file_path = self.resolve(reference)
        if file_path is None:
            return False

        file_path.unlink()
        logger.info(f"Deleted file: {file_path}")
        return True
