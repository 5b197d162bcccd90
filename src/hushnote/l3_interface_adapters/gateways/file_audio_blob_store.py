"""Gateway: filesystem audio blob store — implements AudioBlobStore port."""

from __future__ import annotations

import contextlib
import logging
import os
import shutil
import uuid
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import BinaryIO

from hushnote.l1_entities.errors import PersistenceError

log = logging.getLogger('hn.blobs')


@contextlib.contextmanager
def _scoped_read(path: Path) -> Iterator[BinaryIO]:
    """Hold read access to an external file for the duration of a copy.

    The handle is released on every exit path, including a failed copy.
    """
    fh = path.open('rb')
    try:
        yield fh
    finally:
        fh.close()


class FileAudioBlobStore:
    """Stores imported audio under generated logical names in one directory.

    The root is looked up on every call (it may move between runs), so only
    the logical name is ever persisted.
    """

    def __init__(self, root: Path | Callable[[], Path]) -> None:
        self._root_provider: Callable[[], Path] = root if callable(root) else (lambda: root)

    @property
    def root(self) -> Path:
        return self._root_provider()

    def import_blob(self, source_path: Path) -> str:
        logical_filename = f'{uuid.uuid4().hex}{source_path.suffix}'
        root = self.root
        destination = root / logical_filename
        partial = root / f'.{logical_filename}.partial'
        try:
            root.mkdir(parents=True, exist_ok=True)
            with _scoped_read(source_path) as src, partial.open('wb') as dst:
                shutil.copyfileobj(src, dst)
            os.replace(partial, destination)
        except OSError as exc:
            partial.unlink(missing_ok=True)
            raise PersistenceError(f'Could not import {source_path.name}: {exc}') from exc
        log.info('Imported %s -> %s', source_path.name, logical_filename)
        return logical_filename

    def resolve(self, logical_filename: str) -> Path:
        if not logical_filename or Path(logical_filename).name != logical_filename or logical_filename in {'.', '..'}:
            raise ValueError(f'Not a logical audio filename: {logical_filename!r}')
        return self.root / logical_filename

    def exists(self, logical_filename: str) -> bool:
        return self.resolve(logical_filename).is_file()

    def delete(self, logical_filename: str) -> None:
        path = self.resolve(logical_filename)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceError(f'Could not delete audio {logical_filename}: {exc}') from exc
        log.debug('Deleted audio blob %s', logical_filename)
