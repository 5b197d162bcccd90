"""Port: managed storage for imported audio files."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol


class AudioBlobStore(Protocol):
    """Maps stable logical filenames to files under a runtime-resolved root."""

    def import_blob(self, source_path: Path) -> str:
        """Copy *source_path* in under a fresh logical name and return that name."""
        ...

    def resolve(self, logical_filename: str) -> Path:
        """Absolute path for *logical_filename* under the current root."""
        ...

    def exists(self, logical_filename: str) -> bool:
        """Whether the blob is present."""
        ...

    def delete(self, logical_filename: str) -> None:
        """Remove the blob. Missing blobs are ignored."""
        ...
