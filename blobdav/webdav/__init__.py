"""
WebDAV gateway implementation
"""

from .server import WebDAVServer, create_app
from .handler import WebDAVHandler
from .paths import PathResolver
from .propfind import CollectionEnumerator

__all__ = ['WebDAVServer', 'create_app', 'WebDAVHandler', 'PathResolver', 'CollectionEnumerator']
