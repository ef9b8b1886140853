"""
Core services
"""

from .auth import AuthService
from .storage import BlobStore, StoredObject, StoreError, MemoryBlobStore, FilesystemBlobStore
from .s3_store import S3BlobStore
from .factory import create_store

__all__ = ['AuthService', 'BlobStore', 'StoredObject', 'StoreError',
           'MemoryBlobStore', 'FilesystemBlobStore', 'S3BlobStore', 'create_store']
