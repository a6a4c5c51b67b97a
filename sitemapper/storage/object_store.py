"""
Object Store - Upload target for page screenshots
"""

import io
import logging
import aiofiles
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath
from PIL import Image
from ..errors import StorageError

logger = logging.getLogger(__name__)


class ObjectStore(ABC):
    """Stores binary objects under a key and returns a reference to them"""

    @abstractmethod
    async def upload(self, key: str, data: bytes) -> str:
        """Store data under key

        Returns:
            Reference to the stored object

        Raises:
            StorageError: when the object could not be stored
        """


class FileObjectStore(ObjectStore):
    """Object store backed by a local directory

    With ``upsert`` disabled an existing object is never replaced. With
    ``compress`` enabled PNG screenshots are re-encoded as WebP before writing.
    """

    def __init__(self, base_path: str = 'crawl_data/thumbnail', compress: bool = False,
                 upsert: bool = True):
        self.base_path = Path(base_path)
        self.compress = compress
        self.upsert = upsert
        self.base_path.mkdir(parents=True, exist_ok=True)

    def get_file_path(self, key: str) -> Path:
        """Resolve a key to a path inside the store"""
        parts = [part for part in PurePosixPath(key).parts if part not in ('', '.', '/')]
        if not parts or '..' in parts:
            raise StorageError(f"Invalid object key: {key!r}")

        file_path = self.base_path.joinpath(*parts)
        if self.compress and file_path.suffix.lower() == '.png':
            file_path = file_path.with_suffix('.webp')
        return file_path

    async def upload(self, key: str, data: bytes) -> str:
        logger.info(f"Uploading {key} to object store...")
        file_path = self.get_file_path(key)

        # Exclusive create keeps the no-overwrite check atomic
        mode = 'wb' if self.upsert else 'xb'

        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            if self.compress and file_path.suffix == '.webp':
                data = self._to_webp(data)
            async with aiofiles.open(file_path, mode) as f:
                await f.write(data)
        except (OSError, ValueError) as e:
            if isinstance(e, FileExistsError) and not self.upsert and file_path.is_file():
                raise StorageError(f"Object already exists: {key}") from e
            logger.error(f"Error uploading {key}: {e}")
            raise StorageError(f"Upload of {key} failed: {e}") from e

        return file_path.relative_to(self.base_path).as_posix()

    @staticmethod
    def _to_webp(data: bytes) -> bytes:
        image = Image.open(io.BytesIO(data))
        output = io.BytesIO()
        image.save(output, format='WEBP', quality=85, method=6)
        return output.getvalue()
