"""Local file host

Reads files from the local disk without blocking the event loop.
"""
import asyncio
import logging
from pathlib import Path
from typing import Union

from core.errors import ResourceReadFailure


class LocalHost:
    """Host backed by the local file system"""

    def __init__(self, root: Union[str, Path, None] = None):
        """
        Args:
            root: Base directory for relative paths (default: current directory)
        """
        self.root = Path(root).resolve() if root else Path.cwd()
        self.logger = logging.getLogger(__name__)

    def _resolve(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        if not path.is_absolute():
            path = self.root / path
        return path

    async def read(self, path: Union[str, Path]) -> bytes:
        """
        Read a file as bytes

        Raises:
            ResourceReadFailure: If the file cannot be read
        """
        resolved = self._resolve(path)
        try:
            return await asyncio.to_thread(resolved.read_bytes)
        except OSError as e:
            raise ResourceReadFailure(str(resolved), e.strerror or str(e)) from e
