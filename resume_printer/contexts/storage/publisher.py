"""
Artifact publication for printed resumes and previews.

ArtifactPublisher is the boundary the printing context talks to. The local
implementation writes objects under {root}/{user_id}/{category}/ and returns a
URL under a configured base. A SHA-256 digest of every stored object is cached
so re-publishing identical content skips the write.
"""

import asyncio
import hashlib
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict

from resume_printer.contexts.printing.exceptions import PublishFailure

CATEGORY_EXTENSIONS = {
    "resumes": "pdf",
    "previews": "jpg",
}


def slugify(name: str) -> str:
    """Filesystem- and URL-safe object name (e.g., 'Senior Engineer CV' -> 'senior-engineer-cv')."""
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "untitled"


class ArtifactPublisher(ABC):
    """Stores a final buffer and returns a durable URL."""

    @abstractmethod
    async def upload_object(self, user_id: str, category: str, data: bytes, name: str) -> str:
        """
        Store data for a user under a category.

        Args:
            user_id: Owner of the artifact
            category: "resumes" or "previews"
            data: Final document or image bytes
            name: Title or identifier used to name the object

        Returns:
            URL of the stored object
        """


class LocalArtifactPublisher(ArtifactPublisher):
    """
    Publishes artifacts to a local directory.

    Args:
        root_dir: Directory objects are written under
        base_url: URL prefix the directory is served from
    """

    def __init__(self, root_dir: Path, base_url: str):
        self.root_dir = Path(root_dir)
        self.base_url = base_url.rstrip("/")
        self._digests: Dict[Path, str] = {}

    def object_key(self, user_id: str, category: str, name: str) -> str:
        if category not in CATEGORY_EXTENSIONS:
            raise ValueError(
                f"Unknown category '{category}'. Available: {list(CATEGORY_EXTENSIONS)}"
            )
        return f"{user_id}/{category}/{slugify(name)}.{CATEGORY_EXTENSIONS[category]}"

    async def upload_object(self, user_id: str, category: str, data: bytes, name: str) -> str:
        key = self.object_key(user_id, category, name)
        path = self.root_dir / key
        digest = hashlib.sha256(data).hexdigest()

        if self._digests.get(path) != digest or not path.exists():
            try:
                await asyncio.to_thread(self._write, path, data)
            except OSError as e:
                raise PublishFailure(f"Failed to store {key}", str(e)) from e
            self._digests[path] = digest

        return f"{self.base_url}/{key}"

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
