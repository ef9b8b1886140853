from datetime import datetime, timezone
from typing import List
from xml.etree import ElementTree as ET

import pytest

from blobdav.services.storage import MemoryBlobStore
from blobdav.webdav.paths import PathResolver
from blobdav.webdav.propfind import CollectionEnumerator, member_prefix, parse_depth
from blobdav.webdav.responses import PropEntry, create_multistatus

NS = {"D": "DAV:"}
NOW = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture
def enumerator(store: MemoryBlobStore) -> CollectionEnumerator:
    return CollectionEnumerator(store, PathResolver("/zotero/"))


def hrefs(entries: List[PropEntry]) -> List[str]:
    return [entry.href for entry in entries]


@pytest.mark.parametrize(
    "value,expected",
    [("1", 1), (" 1 ", 1), ("0", 0), ("infinity", 0), ("2", 0), ("", 0), (None, 0)],
)
def test_parse_depth(value, expected) -> None:
    assert parse_depth(value) == expected


def test_member_prefix() -> None:
    assert member_prefix("") == ""
    assert member_prefix("a") == "a/"
    assert member_prefix("a/") == "a/"


def test_depth_zero_on_object(store, enumerator) -> None:
    store.put("ABCD1234.zip", b"zipdata")

    [entry] = enumerator.enumerate("ABCD1234.zip", 0, now=NOW)
    assert entry.href == "/zotero/ABCD1234.zip"
    assert not entry.is_collection
    assert entry.size == 7
    assert entry.etag == store.head("ABCD1234.zip").etag


def test_depth_zero_on_missing_key_is_a_collection(enumerator) -> None:
    [entry] = enumerator.enumerate("nothing-here", 0, now=NOW)
    assert entry.href == "/zotero/nothing-here/"
    assert entry.is_collection
    assert entry.last_modified == NOW
    assert entry.size is None and entry.etag is None


def test_depth_zero_on_root(store, enumerator) -> None:
    store.put("x", b"1")
    [entry] = enumerator.enumerate("", 0, now=NOW)
    assert entry.href == "/zotero/"
    assert entry.is_collection


def test_depth_one_lists_direct_members(store, enumerator) -> None:
    store.put("a/x", b"1")
    store.put("a/y", b"22")
    store.put("ab", b"333")

    entries = enumerator.enumerate("a", 1, now=NOW)
    assert hrefs(entries) == ["/zotero/a/", "/zotero/a/x", "/zotero/a/y"]
    assert [e.size for e in entries] == [None, 1, 2]


def test_depth_one_reports_every_object_below_the_prefix(store, enumerator) -> None:
    store.put("a/sub/one", b"1")
    store.put("a/sub/two", b"22")
    store.put("a/sub/deeper/three", b"333")
    store.put("a/z", b"4")

    entries = enumerator.enumerate("a/", 1, now=NOW)
    assert hrefs(entries) == [
        "/zotero/a/",
        "/zotero/a/sub/deeper/three",
        "/zotero/a/sub/one",
        "/zotero/a/sub/two",
        "/zotero/a/z",
    ]
    assert not any(entry.is_collection for entry in entries[1:])
    assert [entry.size for entry in entries[1:]] == [3, 1, 2, 1]
    assert all(entry.etag for entry in entries[1:])


def test_depth_one_on_root(store, enumerator) -> None:
    store.put("lastsync.txt", b"1234")
    store.put("ABCD1234.prop", b"<properties/>")
    store.put("nested/file", b"n")

    entries = enumerator.enumerate("", 1, now=NOW)
    assert hrefs(entries) == ["/zotero/", "/zotero/ABCD1234.prop", "/zotero/lastsync.txt", "/zotero/nested/file"]


def test_depth_one_keeps_keys_with_empty_segments(store, enumerator) -> None:
    store.put("a//odd", b"1")
    store.put("a/ok", b"2")

    assert hrefs(enumerator.enumerate("a", 1, now=NOW)) == ["/zotero/a/", "/zotero/a//odd", "/zotero/a/ok"]


def test_depth_one_skips_object_at_the_listed_prefix(store, enumerator) -> None:
    store.put("a/", b"marker")
    store.put("a/x", b"1")

    assert hrefs(enumerator.enumerate("a", 1, now=NOW)) == ["/zotero/a/", "/zotero/a/x"]


class ReversedStore(MemoryBlobStore):
    def list_prefix(self, prefix):
        return reversed(list(super().list_prefix(prefix)))


def test_depth_one_keeps_store_order() -> None:
    store = ReversedStore()
    store.put("a/x", b"1")
    store.put("a/y", b"2")

    entries = CollectionEnumerator(store, PathResolver("/zotero/")).enumerate("a", 1, now=NOW)
    assert hrefs(entries) == ["/zotero/a/", "/zotero/a/y", "/zotero/a/x"]


def test_depth_one_on_empty_collection(enumerator) -> None:
    entries = enumerator.enumerate("empty", 1, now=NOW)
    assert hrefs(entries) == ["/zotero/empty/"]


def test_hrefs_are_percent_encoded(store, enumerator) -> None:
    store.put("my file.zip", b"1")
    assert hrefs(enumerator.enumerate("", 1, now=NOW)) == ["/zotero/", "/zotero/my%20file.zip"]


def test_create_multistatus_document() -> None:
    document = create_multistatus([
        PropEntry(href="/zotero/", is_collection=True, last_modified=NOW),
        PropEntry(href="/zotero/a.zip", is_collection=False, last_modified=NOW, size=3, etag="abc"),
    ])
    assert document.startswith('<?xml version="1.0" encoding="utf-8"?>')

    root = ET.fromstring(document.encode("utf-8"))
    assert root.tag == "{DAV:}multistatus"
    collection, resource = root.findall("D:response", NS)

    assert collection.find("D:propstat/D:prop/D:resourcetype/D:collection", NS) is not None
    assert collection.find("D:propstat/D:prop/D:getcontentlength", NS) is None
    assert collection.findtext("D:propstat/D:status", namespaces=NS) == "HTTP/1.1 200 OK"

    assert resource.findtext("D:href", namespaces=NS) == "/zotero/a.zip"
    assert resource.find("D:propstat/D:prop/D:resourcetype/D:collection", NS) is None
    assert resource.findtext("D:propstat/D:prop/D:getcontentlength", namespaces=NS) == "3"
    assert resource.findtext("D:propstat/D:prop/D:getetag", namespaces=NS) == '"abc"'
    assert resource.findtext("D:propstat/D:prop/D:getlastmodified", namespaces=NS) == "Fri, 02 Jan 2026 03:04:05 GMT"
