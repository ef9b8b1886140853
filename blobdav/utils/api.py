#!/usr/bin/env python3
"""
blobdav/utils/api.py
Minimal WebDAV client used to probe a running gateway
"""

from typing import Any, Dict, List, Optional
from urllib.parse import unquote, urljoin
from xml.etree import ElementTree as ET

import requests

from .. import __version__

NS = {'D': 'DAV:'}

PROPFIND_BODY = '''<?xml version="1.0" encoding="utf-8"?>
<D:propfind xmlns:D="DAV:">
    <D:allprop/>
</D:propfind>'''


def parse_multistatus(content: bytes) -> List[Dict[str, Any]]:
    """Turn a multistatus body into one dict per response element"""
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise ValueError(f"Malformed multistatus document: {e}") from e

    entries = []
    for response in root.findall('D:response', NS):
        prop = response.find('D:propstat/D:prop', NS)
        size = prop.findtext('D:getcontentlength', namespaces=NS) if prop is not None else None
        etag = prop.findtext('D:getetag', namespaces=NS) if prop is not None else None
        entries.append({
            'href': unquote(response.findtext('D:href', default='', namespaces=NS)),
            'is_collection': prop is not None and prop.find('D:resourcetype/D:collection', NS) is not None,
            'size': int(size) if size else None,
            'etag': etag.strip('"') if etag else None,
            'last_modified': prop.findtext('D:getlastmodified', namespaces=NS) if prop is not None else None,
        })
    return entries


class DavClient:
    """
    HTTP client for a blobdav gateway
    """

    def __init__(self, base_url: str, username: str, password: str, timeout: int = 10):
        self.base_url = base_url if base_url.endswith('/') else base_url + '/'
        self.timeout = timeout
        self.session = requests.Session()
        self.session.auth = (username, password)
        self.session.headers.update({
            'User-Agent': f'blobdav/{__version__}',
        })

    def _make_request(self, method: str, path: str = '', headers: Optional[Dict[str, str]] = None,
                      data: Optional[Any] = None) -> requests.Response:
        """Central request handler, returns the full response object."""
        url = urljoin(self.base_url, path)
        try:
            response = self.session.request(method, url, headers=headers, data=data, timeout=self.timeout)
            response.raise_for_status()
            return response
        except requests.exceptions.HTTPError as e:
            raise ValueError(f"WebDAV Error: HTTP {e.response.status_code} for {method} {url}") from e
        except requests.exceptions.RequestException as e:
            raise ConnectionError(f"Network request failed for {url}: {e}") from e

    def options(self, path: str = '') -> Dict[str, str]:
        """Capability headers advertised by the server"""
        response = self._make_request('OPTIONS', path)
        return {name: response.headers.get(name, '') for name in ('Allow', 'DAV', 'MS-Author-Via')}

    def propfind(self, path: str = '', depth: int = 1) -> List[Dict[str, Any]]:
        """List a collection (depth 1) or describe a single resource (depth 0)"""
        response = self._make_request(
            'PROPFIND',
            path,
            headers={'Depth': str(depth), 'Content-Type': 'application/xml'},
            data=PROPFIND_BODY,
        )
        if response.status_code != 207:
            raise ValueError(f"Expected 207 Multi-Status, got {response.status_code}")
        return parse_multistatus(response.content)
