#!/usr/bin/env python3
"""
blobdav/services/factory.py
Builds the configured blob store
"""

import logging

from ..config.config import ConfigService, ConfigError
from .storage import BlobStore, MemoryBlobStore, FilesystemBlobStore
from .s3_store import S3BlobStore

logger = logging.getLogger(__name__)


def create_store(config: ConfigService) -> BlobStore:
    """Instantiate the backend named by STORE_BACKEND"""
    backend = config.get('STORE_BACKEND')

    if backend == 'memory':
        logger.warning("Using the in-memory store: contents are lost when the server stops")
        return MemoryBlobStore()

    if backend == 'filesystem':
        root = config.get('STORE_ROOT')
        logger.info(f"Using filesystem store at {root}")
        return FilesystemBlobStore(root)

    if backend == 's3':
        return S3BlobStore(
            bucket=config.get('S3_BUCKET'),
            endpoint_url=config.get('S3_ENDPOINT_URL'),
            region_name=config.get('S3_REGION'),
            access_key_id=config.get('S3_ACCESS_KEY_ID'),
            secret_access_key=config.get('S3_SECRET_ACCESS_KEY'),
        )

    raise ConfigError(f"Unknown STORE_BACKEND {backend!r}")
