import pytest
from werkzeug.exceptions import BadRequest, Forbidden, NotFound

from blobdav.webdav.paths import PathResolver, has_dot_segment


def test_resolve_strips_prefix_and_leading_slashes() -> None:
    resolver = PathResolver("/zotero/")
    assert resolver.resolve("/zotero/ABCD1234.zip") == "ABCD1234.zip"
    assert resolver.resolve("/zotero///a/b") == "a/b"
    assert resolver.resolve("/zotero/") == ""


def test_resolve_keeps_inner_and_trailing_slashes() -> None:
    resolver = PathResolver("/zotero/")
    assert resolver.resolve("/zotero/a//b") == "a//b"
    assert resolver.resolve("/zotero/a/") == "a/"


@pytest.mark.parametrize("path", ["/", "/zotero", "/other/a", "/zoteroish/a", "/zotero/../etc", "/zotero/a/./b"])
def test_resolve_outside_namespace_is_not_found(path) -> None:
    with pytest.raises(NotFound):
        PathResolver("/zotero/").resolve(path)


def test_prefix_is_normalized() -> None:
    assert PathResolver("zotero").prefix == "/zotero/"
    assert PathResolver("/a/b").prefix == "/a/b/"
    assert PathResolver("/").prefix == "/"
    assert PathResolver("/").resolve("/anything") == "anything"


def test_resolve_destination_decodes_absolute_url_once() -> None:
    resolver = PathResolver("/zotero/")
    key = resolver.resolve_destination("https://dav.example.org/zotero/new%20name%2525.zip", "dav.example.org")
    assert key == "new name%25.zip"


def test_resolve_destination_accepts_path_only() -> None:
    assert PathResolver("/zotero/").resolve_destination("/zotero/x.zip", "localhost") == "x.zip"


def test_resolve_destination_host_check_ignores_case_and_requires_port_match() -> None:
    resolver = PathResolver("/zotero/")
    assert resolver.resolve_destination("http://LOCALHOST:8080/zotero/x", "localhost:8080") == "x"
    with pytest.raises(Forbidden):
        resolver.resolve_destination("http://localhost:9090/zotero/x", "localhost:8080")


@pytest.mark.parametrize("destination", ["http://localhost/other/x", "http://localhost/zotero/a/../../x", "/elsewhere"])
def test_resolve_destination_outside_namespace_is_forbidden(destination) -> None:
    with pytest.raises(Forbidden):
        PathResolver("/zotero/").resolve_destination(destination, "localhost")


def test_resolve_destination_rejects_unparseable_url() -> None:
    with pytest.raises(BadRequest):
        PathResolver("/zotero/").resolve_destination("http://[bad/zotero/x", "localhost")


def test_href_encodes_and_marks_collections() -> None:
    resolver = PathResolver("/zotero/")
    assert resolver.href("a b.zip") == "/zotero/a%20b.zip"
    assert resolver.href("sub", collection=True) == "/zotero/sub/"
    assert resolver.href("sub/", collection=True) == "/zotero/sub/"
    assert resolver.href("", collection=True) == "/zotero/"


def test_has_dot_segment() -> None:
    assert has_dot_segment("..")
    assert has_dot_segment("a/./b")
    assert not has_dot_segment("a/..b/c.")
    assert not has_dot_segment("")
