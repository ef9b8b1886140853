#!/usr/bin/env python3
"""
blobdav/webdav/paths.py
Maps request paths and Destination headers onto store keys
"""

from typing import Optional
from urllib.parse import quote, unquote, urlsplit

from werkzeug.exceptions import BadRequest, Forbidden, NotFound

from ..config.config import normalize_prefix


def has_dot_segment(key: str) -> bool:
    return any(segment in ('.', '..') for segment in key.split('/'))


class PathResolver:
    """Strips the namespace prefix off a path to get the store key.

    Only leading slashes of the remainder are removed; inner repeated
    slashes and a trailing slash stay part of the key.
    """

    def __init__(self, prefix: str = '/zotero/'):
        self.prefix = normalize_prefix(prefix)

    def _strip(self, path: str) -> Optional[str]:
        if not path.startswith(self.prefix):
            return None
        key = path[len(self.prefix):].lstrip('/')
        if has_dot_segment(key):
            return None
        return key

    def resolve(self, path: str) -> str:
        """Key for a request path; the WSGI layer has already percent-decoded it"""
        key = self._strip(path)
        if key is None:
            raise NotFound()
        return key

    def resolve_destination(self, destination: str, host: Optional[str] = None) -> str:
        """Key for a MOVE/COPY Destination header (absolute URL or absolute path)"""
        try:
            parts = urlsplit(destination)
        except ValueError as e:
            raise BadRequest(f"Malformed Destination header: {e}") from e
        if parts.netloc and host and parts.netloc.lower() != host.lower():
            raise Forbidden(f"Destination host {parts.netloc} is not served here")

        key = self._strip(unquote(parts.path))
        if key is None:
            raise Forbidden("Destination is outside the served namespace")
        return key

    def href(self, key: str, collection: bool = False) -> str:
        """Percent-encoded URL path of a key, as reported in multistatus bodies"""
        path = self.prefix + key
        if collection and not path.endswith('/'):
            path += '/'
        return quote(path)
