# upload_gateway/services/upload_tracker.py
from __future__ import annotations

import threading
from contextlib import ExitStack
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from upload_gateway.core.errors import InvalidRequest, UploadNotFound
from upload_gateway.core.logging_config import logger
from upload_gateway.models import UploadMetadata, UploadStatus
from upload_gateway.observability.metrics import tracked_uploads_gauge


class _Shard:
    __slots__ = ("lock", "uploads")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.uploads: Dict[str, UploadMetadata] = {}


class UploadTracker:
    """
    In-memory store van multipart uploads, per upload_id.

    - Verdeeld over shards met elk een eigen lock; per-key operaties raken
      alleen de shard van die key
    - track() vervangt een record altijd volledig (last writer wins)
    - list_all() pakt alle shard-locks in vaste volgorde voor een consistente snapshot
    - niets verloopt of verdwijnt vanzelf; opruimen gaat via remove()
    """

    def __init__(self, shards: int = 16):
        if shards < 1:
            raise ValueError("shards must be >= 1")
        self._shards = [_Shard() for _ in range(shards)]
        logger.info("upload_tracker_initialized", shards=shards)

    def _shard(self, upload_id: str) -> _Shard:
        return self._shards[hash(upload_id) % len(self._shards)]

    def track(self, metadata: UploadMetadata) -> None:
        if not metadata.upload_id:
            raise InvalidRequest("uploadId")

        shard = self._shard(metadata.upload_id)
        with shard.lock:
            shard.uploads[metadata.upload_id] = metadata

        logger.debug(
            "upload_tracked",
            upload_id=metadata.upload_id,
            file_name=metadata.file_name,
            status=metadata.status.value,
        )
        tracked_uploads_gauge.set(len(self))

    def get(self, upload_id: str) -> UploadMetadata:
        shard = self._shard(upload_id)
        with shard.lock:
            metadata = shard.uploads.get(upload_id)

        if metadata is None:
            logger.warning("upload_not_found", upload_id=upload_id)
            raise UploadNotFound(upload_id)
        return metadata

    def update(
        self,
        upload_id: str,
        only_from: Optional[Iterable[UploadStatus]] = None,
        **changes,
    ) -> UploadMetadata:
        """
        Read-and-replace onder de shard-lock; het record blijft een volledige vervanging.

        Met ``only_from`` wordt alleen vervangen als de huidige status daarin zit;
        anders komt het bestaande record ongewijzigd terug.
        """
        shard = self._shard(upload_id)
        with shard.lock:
            existing = shard.uploads.get(upload_id)
            if existing is None:
                raise UploadNotFound(upload_id)
            if only_from is not None and existing.status not in set(only_from):
                return existing
            updated = replace(existing, **changes)
            shard.uploads[upload_id] = updated

        logger.debug("upload_updated", upload_id=upload_id, status=updated.status.value)
        return updated

    def list_all(self) -> List[UploadMetadata]:
        with ExitStack() as stack:
            for shard in self._shards:
                stack.enter_context(shard.lock)
            snapshot = [m for shard in self._shards for m in shard.uploads.values()]

        return sorted(snapshot, key=lambda m: m.created_at, reverse=True)

    def remove(self, upload_id: str) -> bool:
        shard = self._shard(upload_id)
        with shard.lock:
            removed = shard.uploads.pop(upload_id, None) is not None

        if removed:
            logger.debug("upload_removed", upload_id=upload_id)
            tracked_uploads_gauge.set(len(self))
        else:
            logger.debug("upload_remove_noop", upload_id=upload_id)
        return removed

    def __len__(self) -> int:
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.uploads)
        return total
