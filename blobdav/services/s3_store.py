#!/usr/bin/env python3
"""
blobdav/services/s3_store.py
S3-compatible backend (AWS S3, Cloudflare R2, MinIO) on top of boto3
"""

import logging
from datetime import datetime, timezone
from typing import Any, BinaryIO, Dict, Iterator, Optional

import boto3
from botocore.exceptions import ClientError

from .storage import BlobData, BlobStore, StoreError, StoredObject

logger = logging.getLogger(__name__)

MISSING_KEY_CODES = ('404', 'NoSuchKey', 'NotFound')


def _strip_etag(etag: Optional[str]) -> str:
    return (etag or '').strip('"')


class _CountingReader:
    """Read-only wrapper that counts the bytes handed to the uploader"""

    def __init__(self, stream: BinaryIO):
        self.stream = stream
        self.count = 0

    def read(self, size: int = -1) -> bytes:
        chunk = self.stream.read(size)
        self.count += len(chunk)
        return chunk


class S3BlobStore(BlobStore):
    """Blob store backed by one bucket. Keys are used as object keys verbatim."""

    def __init__(self, bucket: str, client: Any = None, endpoint_url: Optional[str] = None,
                 region_name: Optional[str] = None, access_key_id: Optional[str] = None,
                 secret_access_key: Optional[str] = None):
        self.bucket = bucket
        if client is None:
            session = boto3.session.Session(
                aws_access_key_id=access_key_id or None,
                aws_secret_access_key=secret_access_key or None,
                region_name=region_name or None,
            )
            client = session.client('s3', endpoint_url=endpoint_url or None)
            logger.info(f"S3 client initialized for bucket {bucket} ({endpoint_url or 'AWS'})")
        self.client = client

    def _call(self, operation: str, **kwargs) -> Optional[Dict[str, Any]]:
        """Run a client call; None when the key does not exist"""
        try:
            return getattr(self.client, operation)(Bucket=self.bucket, **kwargs)
        except ClientError as e:
            code = str(e.response.get('Error', {}).get('Code', ''))
            if code in MISSING_KEY_CODES:
                return None
            raise StoreError(f"S3 {operation} failed for {kwargs.get('Key', kwargs.get('Prefix'))!r}: {code}") from e

    def _to_object(self, key: str, response: Dict[str, Any], body=None) -> StoredObject:
        return StoredObject(
            key=key,
            size=int(response.get('ContentLength', 0)),
            etag=_strip_etag(response.get('ETag')),
            uploaded=response.get('LastModified') or datetime.now(timezone.utc),
            content_type=response.get('ContentType'),
            body=body,
        )

    def get(self, key: str) -> Optional[StoredObject]:
        response = self._call('get_object', Key=key)
        if response is None:
            return None
        return self._to_object(key, response, body=response['Body'])

    def head(self, key: str) -> Optional[StoredObject]:
        response = self._call('head_object', Key=key)
        if response is None:
            return None
        return self._to_object(key, response)

    def put(self, key: str, data: BlobData, content_type: Optional[str] = None) -> StoredObject:
        extra = {'ContentType': content_type} if content_type else {}

        if isinstance(data, (bytes, bytearray)):
            response = self._call('put_object', Key=key, Body=bytes(data), **extra)
            return StoredObject(
                key=key,
                size=len(data),
                etag=_strip_etag(response.get('ETag')),
                uploaded=datetime.now(timezone.utc),
                content_type=content_type,
            )

        # streams of unknown length go through the managed (multipart) transfer
        reader = _CountingReader(data)
        try:
            self.client.upload_fileobj(reader, self.bucket, key, ExtraArgs=extra or None)
        except ClientError as e:
            raise StoreError(f"S3 upload failed for {key!r}") from e

        # the etag comes from a second request; a writer of the same size in between goes unnoticed
        stored = self.head(key)
        if stored is None:
            raise StoreError(f"S3 object {key!r} missing right after upload")
        if stored.size != reader.count:
            raise StoreError(
                f"S3 object {key!r} was replaced during upload ({reader.count} bytes sent, {stored.size} stored)"
            )
        return stored

    def delete(self, key: str) -> None:
        self._call('delete_object', Key=key)

    def list_prefix(self, prefix: str) -> Iterator[StoredObject]:
        paginator = self.client.get_paginator('list_objects_v2')
        try:
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                for item in page.get('Contents', []):
                    yield StoredObject(
                        key=item['Key'],
                        size=int(item['Size']),
                        etag=_strip_etag(item.get('ETag')),
                        uploaded=item['LastModified'],
                    )
        except ClientError as e:
            raise StoreError(f"S3 listing failed for prefix {prefix!r}") from e
