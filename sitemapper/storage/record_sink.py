"""
Record Sink - Persists finished site trees
"""

import json
import hashlib
import logging
import aiofiles
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from urllib.parse import urlparse
from ..errors import PersistenceError

logger = logging.getLogger(__name__)


class RecordSink(ABC):
    """Destination for site trees of completed crawls"""

    @abstractmethod
    async def persist(self, owner: str, target_url: str, tree) -> None:
        """Store the SiteTree built for target_url

        Raises:
            PersistenceError: when the row could not be written
        """


class JsonFileRecordSink(RecordSink):
    """Writes one JSON document per finished crawl

    Layout: base_path/owner/domain/url_hash-timestamp.json
    """

    def __init__(self, base_path: str = 'crawl_data/crawl_data'):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def get_file_path(self, owner: str, target_url: str, created_at: datetime) -> Path:
        url_hash = hashlib.md5(target_url.encode()).hexdigest()[:12]
        domain = urlparse(target_url).netloc.replace('www.', '').replace(':', '_') or 'unknown'
        owner_dir = hashlib.md5(owner.encode()).hexdigest()[:12]
        filename = f"{url_hash}-{created_at.strftime('%Y%m%d_%H%M%S_%f')}.json"
        return self.base_path / owner_dir / domain / filename

    async def persist(self, owner: str, target_url: str, tree) -> None:
        created_at = datetime.now()
        row = {
            'user_id': owner,
            'site_url': target_url,
            'json_data': tree.to_dict(),
            'thumbnail_path': tree.first_thumbnail_ref(),
            'created_at': created_at.isoformat()
        }

        file_path = self.get_file_path(owner, target_url, created_at)
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(file_path, 'w', encoding='utf-8') as f:
                await f.write(json.dumps(row, indent=2, ensure_ascii=False))
        except OSError as e:
            raise PersistenceError(f"Could not write crawl data for {target_url}: {e}") from e

        logger.info(f"Saved site tree for {target_url} to {file_path}")
