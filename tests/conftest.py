import base64
from pathlib import Path
from typing import Callable, Dict

import pytest

from blobdav.config.config import ConfigService
from blobdav.services.storage import MemoryBlobStore
from blobdav.webdav.server import WebDAVServer

USER = "zotero"
PASSWORD = "c0rrect:horse"


def encode_basic(user: str, password: str) -> Dict[str, str]:
    token = base64.b64encode(f"{user}:{password}".encode("utf-8")).decode("ascii")
    return {"Authorization": f"Basic {token}"}


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., ConfigService]:
    config_file = tmp_path / "config.json"
    config_file.write_text("{}", encoding="utf-8")

    def _make(**overrides) -> ConfigService:
        values = {"WEBDAV_USER": USER, "WEBDAV_PASS": PASSWORD}
        values.update(overrides)
        return ConfigService(str(config_file), overrides=values, environ={})

    return _make


@pytest.fixture
def store() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def server(make_config, store) -> WebDAVServer:
    return WebDAVServer(make_config(), store=store)


@pytest.fixture
def client(server):
    return server.app.test_client()


@pytest.fixture
def auth() -> Dict[str, str]:
    return encode_basic(USER, PASSWORD)


@pytest.fixture
def make_auth() -> Callable[[str, str], Dict[str, str]]:
    return encode_basic
