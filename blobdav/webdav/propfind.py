#!/usr/bin/env python3
"""
blobdav/webdav/propfind.py
PROPFIND over a store without directories.

Collections are never stored. A key with an object behind it is a plain
resource, any other key is reported as a collection, and the members of a
collection are whatever a prefix listing returns.
"""

from datetime import datetime, timezone
from typing import List, Optional

from ..services.storage import BlobStore, StoredObject
from .paths import PathResolver
from .responses import PropEntry


def parse_depth(value: Optional[str]) -> int:
    """Only ``1`` asks for members; everything else, including ``infinity``, is depth 0"""
    return 1 if (value or '').strip() == '1' else 0


def member_prefix(key: str) -> str:
    if not key or key.endswith('/'):
        return key
    return key + '/'


class CollectionEnumerator:
    """Builds the entries of a PROPFIND answer"""

    def __init__(self, store: BlobStore, resolver: PathResolver):
        self.store = store
        self.resolver = resolver

    def _object_entry(self, obj: StoredObject) -> PropEntry:
        return PropEntry(
            href=self.resolver.href(obj.key),
            is_collection=False,
            last_modified=obj.uploaded,
            size=obj.size,
            etag=obj.etag,
        )

    def _collection_entry(self, key: str, now: datetime) -> PropEntry:
        return PropEntry(href=self.resolver.href(key, collection=True), is_collection=True, last_modified=now)

    def enumerate(self, key: str, depth: int, now: Optional[datetime] = None) -> List[PropEntry]:
        now = now or datetime.now(timezone.utc)

        if depth == 0:
            obj = self.store.head(key) if key else None
            if obj is not None:
                return [self._object_entry(obj)]
            return [self._collection_entry(key, now)]

        entries = [self._collection_entry(key, now)]
        prefix = member_prefix(key)

        # every listed object is one entry, in store order, however deep its key
        for obj in self.store.list_prefix(prefix):
            if obj.key == prefix:
                continue
            entries.append(self._object_entry(obj))

        return entries
