"""
Mock source for Flamenode.

This module provides an in-memory content source for tests and dry runs of
the pipeline without a CMS backend.
"""

import copy
from typing import Any, Dict, List, Optional

from ..models import Schema
from .base import BaseSource


class MockSource(BaseSource):
    """
    Source serving fixed, in-memory records.

    Without arguments it serves a small sample site: a blog post collection,
    a single home page, a main navigation and globals.
    """

    def __init__(self, schemas: Optional[List[Dict[str, Any]]] = None,
                 content: Optional[Dict[str, Dict[str, Any]]] = None,
                 navigation: Optional[Dict[str, Dict[str, Any]]] = None,
                 globals_data: Optional[Dict[str, Any]] = None,
                 locales: Optional[List[str]] = None):
        """
        Initialize the mock source.

        Args:
            schemas: Raw schema records
            content: schema id -> locale -> raw content
            navigation: navigation key -> locale -> raw navigation tree
            globals_data: Raw globals record
            locales: Locales the CMS reports
        """
        super().__init__()
        use_sample = all(value is None for value in (schemas, content, navigation, globals_data, locales))
        sample = self._create_sample_site() if use_sample else {}

        self._raw_schemas = schemas if schemas is not None else sample.get("schemas", [])
        self._content = content if content is not None else sample.get("content", {})
        self._navigation = navigation if navigation is not None else sample.get("navigation", {})
        self._globals = globals_data if globals_data is not None else sample.get("globals")
        self._locales = locales if locales is not None else sample.get("locales", ["en-US"])

        self.calls: List[str] = []

    async def _fetch_schemas(self) -> List[Schema]:
        self.calls.append("get_schemas")
        return [Schema.model_validate(schema) for schema in self._raw_schemas]

    async def _fetch_locales(self) -> List[str]:
        self.calls.append("get_locales")
        return list(self._locales)

    async def get_globals(self) -> Optional[Dict[str, Any]]:
        self.calls.append("get_globals")
        return copy.deepcopy(self._globals)

    async def get_content_entry(self, schema_key: str, locale: Optional[str] = None,
                                populate: bool = True) -> Any:
        locale = self._resolve_locale(locale)
        self.calls.append(f"get_content_entry:{schema_key}:{locale}")
        return copy.deepcopy(self._content.get(schema_key, {}).get(locale))

    async def get_navigation(self, key: Optional[str] = None, locale: Optional[str] = None) -> Any:
        locale = self._resolve_locale(locale)
        self.calls.append(f"get_navigation:{key or '*'}:{locale}")

        if key is not None:
            return copy.deepcopy(self._navigation.get(key, {}).get(locale))

        return {
            nav_key: copy.deepcopy(per_locale[locale])
            for nav_key, per_locale in self._navigation.items()
            if locale in per_locale
        }

    def _create_sample_site(self) -> Dict[str, Any]:
        """
        Create a small sample site covering the common field types.
        """
        hero_image = {
            "id": "media-hero",
            "file": "hero.png",
            "contentType": "image/png",
            "url": "https://example.com/media/hero.png",
        }

        return {
            "locales": ["en-US"],
            "schemas": [
                {
                    "id": "blogPost",
                    "type": "collection",
                    "enabled": True,
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
                            ],
                        },
                        {
                            "key": "sections",
                            "type": "repeater",
                            "options": [
                                {"key": "heading", "type": "text"},
                                {"key": "content", "type": "markdown-editor"},
                            ],
                        },
                    ],
                },
                {
                    "id": "home",
                    "type": "single",
                    "enabled": True,
                    "fields": [
                        {"key": "headline", "type": "text"},
                        {"key": "intro", "type": "wysiwyg"},
                    ],
                },
            ],
            "content": {
                "blogPost": {
                    "en-US": {
                        "post-1": {
                            "id": "post-1",
                            "title": "Hello world",
                            "body": "# Hello\n\nFirst post.",
                            "rating": "4.5",
                            "published": True,
                            "heroImage": [hero_image],
                            "author": {"name": "Jane Doe", "bio": "<p>Writer</p>"},
                            "sections": [
                                {"heading": "Intro", "content": "Some *markdown*."},
                                {"heading": "Outro", "content": "Bye."},
                            ],
                            "__meta__": {
                                "createdDate": {"_seconds": 1577836800, "_nanoseconds": 0},
                            },
                        },
                    },
                },
                "home": {
                    "en-US": {
                        "id": "home",
                        "headline": "Welcome",
                        "intro": "<p>Hi there</p>",
                    },
                },
            },
            "navigation": {
                "mainNavigation": {
                    "en-US": {
                        "id": "mainNavigation",
                        "title": "Main Navigation",
                        "items": [
                            {"id": 1, "title": "Home", "url": "/", "order": "0", "newWindow": 0},
                            {"id": 2, "title": "Blog", "url": "/blog", "order": "1", "children": None},
                        ],
                    },
                },
            },
            "globals": {
                "siteName": "Sample Site",
                "tagline": "Built from Flamelink",
                "contact-email": "hello@example.com",
            },
        }
