"""Shared pytest fixtures and configuration

This file contains fixtures that can be used across all test files.
Pytest automatically discovers this file and makes fixtures available.
"""

import json
import logging
from pathlib import Path
from unittest.mock import Mock

import pytest
import requests

from bskyclient import BlueskyClient, Session

# ==================== Response Helpers ====================


def make_response(status=200, body=None):
    """Build a real requests.Response with a canned status and body.

    `body` may be a dict/list (JSON-encoded), raw bytes/str, or None (empty body).
    """
    response = requests.Response()
    response.status_code = status
    if body is None:
        response._content = b""
    elif isinstance(body, bytes):
        response._content = body
    elif isinstance(body, str):
        response._content = body.encode("utf-8")
    else:
        response._content = json.dumps(body).encode("utf-8")
    return response


def make_blob(link="bafkreigh2akiscaildc", mime_type="image/jpeg", size=1234):
    """Mock server-issued blob reference"""
    return {
        "$type": "blob",
        "ref": {"$link": link},
        "mimeType": mime_type,
        "size": size,
    }


SESSION_BODY = {
    "did": "did:plc:test",
    "handle": "user.bsky.social",
    "accessJwt": "access",
    "refreshJwt": "refresh",
    "active": True,
}

POST_BODY = {
    "uri": "at://did:plc:test/app.bsky.feed.post/3kabc",
    "cid": "bafyreiabc",
}


# ==================== Fake Collaborators ====================


class FakeTranscoder:
    """In-memory stand-in for FFmpegTranscoder.

    Records every path it was handed so tests can check temp-file cleanup.
    """

    def __init__(self, output=b"MP4DATA", dims=(640, 480), fail=None, probe_error=None):
        self.output = output
        self.dims = dims
        self.fail = fail
        self.probe_error = probe_error
        self.transcoded = []
        self.probed = []

    def transcode(self, src: Path, dst: Path) -> None:
        self.transcoded.append((src, dst, src.read_bytes()))
        if self.fail is not None:
            raise self.fail
        dst.write_bytes(self.output)

    def probe(self, path: Path):
        self.probed.append(path)
        if self.probe_error is not None:
            raise self.probe_error
        return self.dims

    @property
    def touched_paths(self):
        paths = []
        for src, dst, _ in self.transcoded:
            paths.extend([src, dst])
        return paths


# ==================== Client Fixtures ====================


@pytest.fixture
def http():
    """Mock requests.Session; queue responses with http.post.side_effect"""
    return Mock()


@pytest.fixture
def transcoder():
    return FakeTranscoder()


@pytest.fixture
def client(http, transcoder):
    """Unauthenticated client pointed at a test PDS"""
    return BlueskyClient("https://pds.example.com", http=http, transcoder=transcoder)


@pytest.fixture
def authed_client(client):
    """Client with an active session (did:plc:test / access token 'access')"""
    client.session = Session("did:plc:test", "user.bsky.social", "access", "refresh")
    return client


@pytest.fixture
def restore_root_logger():
    """Undo setup_logging()'s basicConfig(force=True) after the test"""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


# ==================== Pytest Configuration ====================


def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
