#!/usr/bin/env python3
"""
blobdav/webdav/server.py
Flask application exposing a blob store as a WebDAV share
"""

import logging
from typing import Optional

from flask import Flask, g, request
from waitress import serve
from werkzeug.exceptions import HTTPException

from ..config.config import ConfigService
from ..services.auth import AuthService
from ..services.factory import create_store
from ..services.storage import BlobStore
from .handler import WebDAVHandler
from .paths import PathResolver
from .responses import error_response

logger = logging.getLogger(__name__)


class WebDAVServer:
    """WebDAV gateway in front of a flat blob store"""

    def __init__(self, config: ConfigService, store: Optional[BlobStore] = None):
        self.config = config
        self.store = store if store is not None else create_store(config)
        self.auth = AuthService(config.get('WEBDAV_USER'), config.get('WEBDAV_PASS'), config.get('REALM'))
        self.resolver = PathResolver(config.namespace_prefix)
        self.handler = WebDAVHandler(self.store, self.resolver)
        self.app = Flask(__name__)
        # paths are store keys, pass them through untouched
        self.app.url_map.merge_slashes = False
        self.setup_routes()

    def dav_route(self, *methods):
        """Register a view for the given verbs on every path"""
        def decorator(view):
            options = dict(methods=list(methods), strict_slashes=False, provide_automatic_options=False)
            self.app.add_url_rule('/', view.__name__, view, defaults={'path': ''}, **options)
            self.app.add_url_rule('/<path:path>', view.__name__, view, **options)
            return view
        return decorator

    def setup_routes(self):
        """Setup WebDAV routes"""

        @self.app.before_request
        def authenticate():
            """Authenticate all requests, then keep them inside the namespace"""
            if not self.auth.check(request.headers.get('Authorization')):
                return error_response(401, 'Unauthorized', self.auth.challenge_headers())
            g.key = self.resolver.resolve(request.path)

        @self.dav_route('GET', 'HEAD')
        def get(path):
            return self.handler.get(g.key, head=request.method == 'HEAD')

        @self.dav_route('PUT')
        def put(path):
            return self.handler.put(g.key, request.stream, request.content_type)

        @self.dav_route('DELETE')
        def delete(path):
            return self.handler.delete(g.key)

        @self.dav_route('MKCOL')
        def mkcol(path):
            return self.handler.mkcol(g.key)

        @self.dav_route('MOVE')
        def move(path):
            return self.handler.move(g.key, request.headers.get('Destination'), request.host)

        @self.dav_route('COPY')
        def copy(path):
            return self.handler.copy(g.key, request.headers.get('Destination'), request.host)

        @self.dav_route('PROPFIND')
        def propfind(path):
            return self.handler.propfind(g.key, request.headers.get('Depth'))

        @self.dav_route('OPTIONS')
        def options(path):
            return self.handler.options()

        @self.app.after_request
        def log_request(response):
            logger.info(f"{request.method} {request.path} -> {response.status_code}")
            return response

        @self.app.errorhandler(HTTPException)
        def http_error(error):
            """Render 4xx/5xx as DAV error documents, keeping headers such as Allow"""
            headers = {name: value for name, value in error.get_headers() if name.lower() != 'content-type'}
            return error_response(error.code, error.name, headers)

    def run(self, host: Optional[str] = None, port: Optional[int] = None, threads: Optional[int] = None):
        """Serve the application with waitress until interrupted"""
        host = host or self.config.get('HOST')
        port = port or self.config.get_int('PORT')
        threads = threads or self.config.get_int('THREADS')

        logger.info(f"WebDAV gateway listening on http://{host}:{port}{self.resolver.prefix}")
        logger.info(f"Store backend: {self.config.get('STORE_BACKEND')}, user: {self.auth.username}")

        serve(self.app, host=host, port=port, threads=threads, ident='blobdav')


def create_app(config: ConfigService, store: Optional[BlobStore] = None) -> Flask:
    """Build the WSGI application for the given settings"""
    return WebDAVServer(config, store).app
