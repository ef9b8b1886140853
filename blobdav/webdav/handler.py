#!/usr/bin/env python3
"""
blobdav/webdav/handler.py
One method per supported WebDAV verb, each translated into blob store calls
"""

import logging
from typing import BinaryIO, Optional

from flask import Response
from werkzeug.exceptions import BadRequest, Forbidden, NotFound
from werkzeug.wsgi import FileWrapper

from ..services.storage import BlobStore
from .paths import PathResolver
from .propfind import CollectionEnumerator, parse_depth
from .responses import empty_response, multistatus_response

logger = logging.getLogger(__name__)

ALLOWED_METHODS = ('OPTIONS', 'GET', 'HEAD', 'PUT', 'DELETE', 'MKCOL', 'PROPFIND', 'MOVE', 'COPY')
DEFAULT_CONTENT_TYPE = 'application/octet-stream'


class WebDAVHandler:
    """WebDAV request handler working on resolved store keys"""

    def __init__(self, store: BlobStore, resolver: PathResolver):
        self.store = store
        self.resolver = resolver
        self.enumerator = CollectionEnumerator(store, resolver)

    def get(self, key: str, head: bool = False) -> Response:
        """GET streams the object; HEAD only looks up its metadata"""
        # the namespace root is a collection, never an object
        if not key:
            raise NotFound()

        obj = self.store.head(key) if head else self.store.get(key)
        if obj is None:
            raise NotFound()

        if head:
            response = Response(status=200, content_type=obj.content_type or DEFAULT_CONTENT_TYPE)
        else:
            response = Response(
                FileWrapper(obj.body),
                status=200,
                content_type=obj.content_type or DEFAULT_CONTENT_TYPE,
                direct_passthrough=True,
            )

        response.content_length = obj.size
        response.set_etag(obj.etag)
        response.last_modified = obj.uploaded
        return response

    def put(self, key: str, stream: BinaryIO, content_type: Optional[str] = None) -> Response:
        if not key:
            raise Forbidden("The namespace root is a collection")

        stored = self.store.put(key, stream, content_type or None)
        response = empty_response(201)
        response.set_etag(stored.etag)
        return response

    def delete(self, key: str) -> Response:
        # deleting a missing key is fine, and the root holds no object
        if key:
            self.store.delete(key)
        return empty_response(204)

    def mkcol(self, key: str) -> Response:
        """Collections are virtual, so creating one always succeeds without touching the store"""
        return empty_response(201)

    def move(self, key: str, destination: Optional[str], host: Optional[str] = None) -> Response:
        return self._transfer(key, destination, host, remove_source=True)

    def copy(self, key: str, destination: Optional[str], host: Optional[str] = None) -> Response:
        return self._transfer(key, destination, host, remove_source=False)

    def _transfer(self, key: str, destination: Optional[str], host: Optional[str], remove_source: bool) -> Response:
        """Copy source to destination, then optionally delete the source.

        The two steps are not atomic. If the delete fails after the copy
        went through, both keys hold the data.
        """
        if not destination:
            raise BadRequest("Destination header is required")

        dest_key = self.resolver.resolve_destination(destination, host)
        if not dest_key:
            raise Forbidden("The namespace root is a collection")
        if dest_key == key:
            raise Forbidden("Source and destination are the same resource")
        if not key:
            raise NotFound()

        source = self.store.get(key)
        if source is None:
            raise NotFound()

        try:
            self.store.put(dest_key, source.body, source.content_type)
        finally:
            source.body.close()
        logger.debug(f"Copied {key!r} to {dest_key!r}")

        if remove_source:
            self.store.delete(key)
            logger.debug(f"Removed move source {key!r}")

        return empty_response(201)

    def propfind(self, key: str, depth: Optional[str] = None) -> Response:
        entries = self.enumerator.enumerate(key, parse_depth(depth))
        return multistatus_response(entries)

    def options(self) -> Response:
        return empty_response(204, {
            'Allow': ', '.join(ALLOWED_METHODS),
            'DAV': '1',
            'MS-Author-Via': 'DAV',
        })
