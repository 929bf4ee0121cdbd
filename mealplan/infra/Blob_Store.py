"""Blob store: durable JSON files keyed by filename.

The plan engine and the recipe repository only talk to storage through this
contract:
    list(pattern)         -> filenames matching the regex (unsorted)
    read(filename)        -> parsed JSON, or None when absent/malformed
    write(filename, data) -> pretty-printed JSON, raises WriteFailed
    delete(filename)      -> raises NotFound / WriteFailed
Every call may raise StorageUnavailable when the backing location is gone.
"""
import json
import logging
import os
import re
import shutil
import tempfile
from pathlib import Path
from typing import Any, List, Optional, Pattern, Union

from mealplan.infra.errors import NotFound, ReadMalformed, StorageUnavailable, WriteFailed

logger = logging.getLogger(__name__)


class BlobStore:
    """Interface for the storage collaborators the engine consumes."""

    def list(self, pattern: Union[str, Pattern]) -> List[str]:
        raise NotImplementedError

    def read(self, filename: str) -> Optional[Any]:
        raise NotImplementedError

    def write(self, filename: str, data: Any) -> None:
        raise NotImplementedError

    def delete(self, filename: str) -> None:
        raise NotImplementedError


class FileBlobStore(BlobStore):
    """Stores each blob as a file in a single flat directory."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def __repr__(self) -> str:
        return f"FileBlobStore({str(self.directory)!r})"

    def _ensure_dir(self) -> Path:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailable(f"Cannot open data directory {self.directory}: {e}") from e
        if not self.directory.is_dir():
            raise StorageUnavailable(f"Data location is not a directory: {self.directory}")
        return self.directory

    def _path(self, filename: str) -> Path:
        if not filename or os.sep in filename or '/' in filename or filename in ('.', '..'):
            raise ValueError(f"Invalid blob name: {filename!r}")
        return self._ensure_dir() / filename

    def list(self, pattern):
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        directory = self._ensure_dir()
        try:
            names = [p.name for p in directory.iterdir() if p.is_file()]
        except OSError as e:
            raise StorageUnavailable(f"Cannot list {directory}: {e}") from e
        return [n for n in names if regex.match(n)]

    def read(self, filename):
        path = self._path(filename)
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            err = ReadMalformed(f"Invalid JSON in {filename}: {e}", filename)
            logger.warning("%s (treated as absent)", err)
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s: %s (treated as absent)", filename, e)
            return None

    def write(self, filename, data):
        path = self._path(filename)
        try:
            fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), prefix=".tmp_", suffix=".json")
        except OSError as e:
            raise WriteFailed(f"Cannot create temp file for {filename}: {e}", filename) from e
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as tmp:
                json.dump(data, tmp, indent=2, ensure_ascii=False)
            shutil.move(tmp_path, str(path))
        except (OSError, TypeError, ValueError) as e:
            raise WriteFailed(f"Write failed for {filename}: {e}", filename) from e
        finally:
            if os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    logger.debug("Leftover temp file %s", tmp_path)
        logger.debug("Wrote %s", path)

    def delete(self, filename):
        path = self._path(filename)
        try:
            path.unlink()
        except FileNotFoundError as e:
            raise NotFound(f"No such file: {filename}", filename) from e
        except OSError as e:
            raise WriteFailed(f"Delete failed for {filename}: {e}", filename) from e
        logger.debug("Deleted %s", path)


__all__ = ['BlobStore', 'FileBlobStore']
