#!/usr/bin/env python3
"""
blobdav/services/storage.py
Flat key -> blob stores the gateway translates WebDAV onto.

A store knows nothing about directories: it offers get, head, put, delete
and a listing of every key starting with a given prefix.
"""

import io
import os
import json
import hashlib
import logging
import tempfile
import uuid
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterator, Optional, Tuple, Union
from urllib.parse import quote, unquote

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
OPEN_ATTEMPTS = 3
RECORD_FIELDS = ('key', 'size', 'etag', 'uploaded', 'blob')

BlobData = Union[bytes, BinaryIO]


class StoreError(RuntimeError):
    """A store operation failed for a reason other than a missing key"""


@dataclass
class StoredObject:
    """Metadata of one stored blob, plus its body when fetched with ``get``"""
    key: str
    size: int
    etag: str
    uploaded: datetime
    content_type: Optional[str] = None
    body: Optional[BinaryIO] = None

    def read(self) -> bytes:
        """Read and close the body"""
        if self.body is None:
            return b''
        try:
            return self.body.read()
        finally:
            self.body.close()


class BlobStore(ABC):
    """Interface every backend implements"""

    @abstractmethod
    def get(self, key: str) -> Optional[StoredObject]:
        """Object with an open body, or None if nothing is stored at ``key``"""

    @abstractmethod
    def head(self, key: str) -> Optional[StoredObject]:
        """Object metadata only, or None"""

    @abstractmethod
    def put(self, key: str, data: BlobData, content_type: Optional[str] = None) -> StoredObject:
        """Create or fully overwrite the object at ``key``"""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the object; a missing key is not an error"""

    @abstractmethod
    def list_prefix(self, prefix: str) -> Iterator[StoredObject]:
        """Metadata of every object whose key starts with ``prefix``"""


def _iter_chunks(data: BlobData) -> Iterator[bytes]:
    if isinstance(data, (bytes, bytearray)):
        yield bytes(data)
        return
    while True:
        chunk = data.read(CHUNK_SIZE)
        if not chunk:
            break
        yield chunk


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemoryBlobStore(BlobStore):
    """Process-local store, used for tests and throwaway servers"""

    def __init__(self):
        self._objects: Dict[str, Tuple[bytes, StoredObject]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[StoredObject]:
        with self._lock:
            entry = self._objects.get(key)
        if entry is None:
            return None
        data, meta = entry
        return replace(meta, body=io.BytesIO(data))

    def head(self, key: str) -> Optional[StoredObject]:
        with self._lock:
            entry = self._objects.get(key)
        return entry[1] if entry else None

    def put(self, key: str, data: BlobData, content_type: Optional[str] = None) -> StoredObject:
        payload = b''.join(_iter_chunks(data))
        meta = StoredObject(
            key=key,
            size=len(payload),
            etag=hashlib.md5(payload).hexdigest(),
            uploaded=_utcnow(),
            content_type=content_type,
        )
        with self._lock:
            self._objects[key] = (payload, meta)
        return meta

    def delete(self, key: str) -> None:
        with self._lock:
            self._objects.pop(key, None)

    def list_prefix(self, prefix: str) -> Iterator[StoredObject]:
        with self._lock:
            metas = [meta for key, (_, meta) in sorted(self._objects.items()) if key.startswith(prefix)]
        return iter(metas)


class FilesystemBlobStore(BlobStore):
    """Flat store on local disk.

    Every key has a JSON sidecar in ``<root>/meta``, named after the fully
    percent-encoded key, holding size, etag, upload time, content type and
    the name of its body file in ``<root>/data``. Bodies are always written
    under a fresh name, so replacing the sidecar is the single step that
    commits a put: readers see either the old object or the new one, never
    a mix. Keys never turn into directories, so ``a`` and ``a/b`` can coexist.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).expanduser()
        self.data_dir = self.root / 'data'
        self.meta_dir = self.root / 'meta'
        self.tmp_dir = self.root / 'tmp'
        for directory in (self.data_dir, self.meta_dir, self.tmp_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def _meta_path(self, key: str) -> Path:
        return self.meta_dir / (quote(key, safe='') + '.json')

    def _read_record(self, meta_path: Path) -> Optional[Dict[str, Any]]:
        try:
            with open(meta_path, 'r', encoding='utf-8') as f:
                record = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Unreadable metadata {meta_path}: {e}") from e
        if not isinstance(record, dict) or not all(field in record for field in RECORD_FIELDS):
            raise StoreError(f"Incomplete metadata {meta_path}")
        return record

    @staticmethod
    def _to_object(record: Dict[str, Any]) -> StoredObject:
        return StoredObject(
            key=record['key'],
            size=record['size'],
            etag=record['etag'],
            uploaded=datetime.fromisoformat(record['uploaded']),
            content_type=record.get('content_type'),
        )

    def _write_atomic(self, target: Path, chunks: Iterator[bytes]) -> Tuple[int, str]:
        digest = hashlib.md5()
        size = 0
        fd, tmp_path = tempfile.mkstemp(dir=self.tmp_dir)
        try:
            with os.fdopen(fd, 'wb') as f:
                for chunk in chunks:
                    digest.update(chunk)
                    size += len(chunk)
                    f.write(chunk)
            os.replace(tmp_path, target)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
        return size, digest.hexdigest()

    def _discard_blob(self, blob: str) -> None:
        try:
            (self.data_dir / blob).unlink()
        except FileNotFoundError:
            pass

    def get(self, key: str) -> Optional[StoredObject]:
        # an overwrite can remove the body between reading the sidecar and opening it
        for _ in range(OPEN_ATTEMPTS):
            record = self._read_record(self._meta_path(key))
            if record is None:
                return None
            try:
                body = open(self.data_dir / record['blob'], 'rb')
            except FileNotFoundError:
                continue
            return replace(self._to_object(record), body=body)
        raise StoreError(f"Body of {key!r} is missing under {self.data_dir}")

    def head(self, key: str) -> Optional[StoredObject]:
        record = self._read_record(self._meta_path(key))
        return self._to_object(record) if record is not None else None

    def put(self, key: str, data: BlobData, content_type: Optional[str] = None) -> StoredObject:
        blob = uuid.uuid4().hex
        size, etag = self._write_atomic(self.data_dir / blob, _iter_chunks(data))

        meta_path = self._meta_path(key)
        try:
            previous = self._read_record(meta_path)
        except StoreError:
            previous = None

        record = {
            'key': key,
            'size': size,
            'etag': etag,
            'uploaded': _utcnow().isoformat(),
            'content_type': content_type,
            'blob': blob,
        }
        try:
            self._write_atomic(meta_path, iter([json.dumps(record).encode('utf-8')]))
        except BaseException:
            self._discard_blob(blob)
            raise

        if previous is not None:
            self._discard_blob(previous['blob'])
        logger.debug(f"Stored {key!r} ({size} bytes) under {self.root}")
        return self._to_object(record)

    def delete(self, key: str) -> None:
        meta_path = self._meta_path(key)
        try:
            record = self._read_record(meta_path)
        except StoreError:
            record = None
        # the sidecar goes first: a body without one is invisible
        try:
            meta_path.unlink()
        except FileNotFoundError:
            return
        if record is not None:
            self._discard_blob(record['blob'])

    def list_prefix(self, prefix: str) -> Iterator[StoredObject]:
        entries = sorted(
            (unquote(name[:-len('.json')]), name)
            for name in os.listdir(self.meta_dir)
            if name.endswith('.json')
        )
        for key, name in entries:
            if not key.startswith(prefix):
                continue
            record = self._read_record(self.meta_dir / name)
            if record is not None:
                yield self._to_object(record)
