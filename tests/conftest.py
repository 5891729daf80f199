"""
Pytest Configuration and Shared Fixtures.

This module provides common fixtures for all tests:

- store: Fresh in-memory node store
- cache: Fresh in-memory media cache
- materializer: Fake remote-file materializer bound to `store`
- context: NormalizeContext without media downloads
- blog_schema / blog_entry: Sample collection schema and raw entry
"""

import asyncio

import pytest

from flamenode.context import NormalizeContext
from flamenode.exceptions import MediaDownloadError
from flamenode.models import FileRef, Schema
from flamenode.store import MemoryCache, MemoryNodeStore


class FakeMaterializer:
    """Materializer creating file nodes without any network access."""

    def __init__(self, store, fail_urls=(), delay: float = 0.0):
        self.store = store
        self.fail_urls = set(fail_urls)
        self.delay = delay
        self.calls = []

    async def materialize(self, url, parent_id):
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        if url in self.fail_urls:
            raise MediaDownloadError(url, "HTTP 404")

        file_id = self.store.create_node_id(f"flamelink-file-{url}")
        self.store.create_node({
            "id": file_id,
            "parent": parent_id,
            "children": [],
            "internal": {"type": "FlamelinkFile", "content": "{}", "contentDigest": "x"},
        })
        return FileRef(id=file_id, url=url)


def make_image(image_id: str, content_type: str = "image/png") -> dict:
    """Image reference as it appears in a populated media field."""
    return {
        "id": image_id,
        "contentType": content_type,
        "url": f"https://example.com/{image_id}.png",
    }


@pytest.fixture
def store():
    """Fresh in-memory node store."""
    return MemoryNodeStore()


@pytest.fixture
def cache():
    """Fresh in-memory media cache."""
    return MemoryCache()


@pytest.fixture
def materializer(store):
    """Fake materializer writing file nodes into `store`."""
    return FakeMaterializer(store)


@pytest.fixture
def context(store, cache):
    """Normalization context without media downloads."""
    return NormalizeContext(store=store, cache=cache)


@pytest.fixture
def media_context(store, cache, materializer):
    """Normalization context linking images through the fake materializer."""
    return NormalizeContext(store=store, cache=cache, materializer=materializer)


@pytest.fixture
def blog_schema() -> Schema:
    """Return a sample collection schema covering every composite field."""
    return Schema.model_validate({
        "id": "blogPost",
        "type": "collection",
        "fields": [
            {"key": "title", "type": "text"},
            {"key": "body", "type": "markdown-editor"},
            {"key": "rating", "type": "number"},
            {"key": "published", "type": "boolean"},
            {"key": "heroImage", "type": "media"},
            {
                "key": "author",
                "type": "fieldset",
                "options": [
                    {"key": "name", "type": "text"},
                    {"key": "bio", "type": "wysiwyg"},
                    {"key": "avatar", "type": "media"},
                ],
            },
            {
                "key": "sections",
                "type": "repeater",
                "options": [
                    {"key": "heading", "type": "text"},
                    {"key": "position", "type": "number"},
                ],
            },
        ],
    })


@pytest.fixture
def blog_entry() -> dict:
    """Return a sample raw entry of `blog_schema`."""
    return {
        "id": "post-1",
        "title": "Hello world",
        "body": "# Hello",
        "rating": "4.5",
        "published": True,
        "heroImage": [make_image("hero")],
        "author": {"name": "Jane Doe", "bio": "<p>Writer</p>", "avatar": [make_image("avatar")]},
        "sections": [
            {"heading": "Intro", "position": "1"},
            {"heading": "Outro", "position": "2"},
        ],
        "__meta__": {"createdDate": {"_seconds": 1577836800, "_nanoseconds": 0}},
    }
