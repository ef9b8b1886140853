#!/usr/bin/env python3
"""
blobdav/webdav/responses.py
WebDAV response bodies: multistatus documents and DAV error documents
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Mapping, Optional
from xml.etree import ElementTree as ET

from flask import Response
from werkzeug.http import http_date

XML_CONTENT_TYPE = 'application/xml; charset=utf-8'
XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'
STATUS_OK_LINE = 'HTTP/1.1 200 OK'


@dataclass
class PropEntry:
    """One ``response`` element of a multistatus document"""
    href: str
    is_collection: bool
    last_modified: datetime
    size: Optional[int] = None
    etag: Optional[str] = None


def create_multistatus(entries: Iterable[PropEntry]) -> str:
    """Serialize discovery entries into a DAV: multistatus document"""
    multistatus = ET.Element('D:multistatus')
    multistatus.set('xmlns:D', 'DAV:')

    for entry in entries:
        response = ET.SubElement(multistatus, 'D:response')

        href = ET.SubElement(response, 'D:href')
        href.text = entry.href

        propstat = ET.SubElement(response, 'D:propstat')
        prop = ET.SubElement(propstat, 'D:prop')

        resourcetype = ET.SubElement(prop, 'D:resourcetype')
        if entry.is_collection:
            ET.SubElement(resourcetype, 'D:collection')

        if entry.size is not None:
            getcontentlength = ET.SubElement(prop, 'D:getcontentlength')
            getcontentlength.text = str(entry.size)

        if entry.etag is not None:
            getetag = ET.SubElement(prop, 'D:getetag')
            getetag.text = f'"{entry.etag}"'

        getlastmodified = ET.SubElement(prop, 'D:getlastmodified')
        getlastmodified.text = http_date(entry.last_modified)

        status = ET.SubElement(propstat, 'D:status')
        status.text = STATUS_OK_LINE

    return XML_DECLARATION + ET.tostring(multistatus, encoding='unicode')


def multistatus_response(entries: Iterable[PropEntry]) -> Response:
    return Response(create_multistatus(entries), status=207, content_type=XML_CONTENT_TYPE)


def create_error_document(description: str) -> str:
    error = ET.Element('D:error')
    error.set('xmlns:D', 'DAV:')
    responsedescription = ET.SubElement(error, 'D:responsedescription')
    responsedescription.text = description
    return XML_DECLARATION + ET.tostring(error, encoding='unicode')


def error_response(status: int, description: str, headers: Optional[Mapping[str, str]] = None) -> Response:
    response = Response(create_error_document(description), status=status, content_type=XML_CONTENT_TYPE)
    for name, value in (headers or {}).items():
        response.headers[name] = value
    return response


def empty_response(status: int, headers: Optional[Mapping[str, str]] = None) -> Response:
    """Bodyless success response (201, 204)"""
    return Response(status=status, headers=dict(headers or {}))
