"""
Base source interface for Flamenode.

This module defines the abstract interface every CMS source must implement.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

from ..models import Schema


def keyed_records(payload: Any) -> Dict[str, Any]:
    """
    Children of a keyed collection as a dict.

    The Realtime Database returns a collection whose keys are dense integers
    as a JSON array, with `null` for missing indexes. Arrays are keyed by
    index and the holes dropped; anything that is not a collection is empty.
    """
    if isinstance(payload, Mapping):
        return dict(payload)
    if isinstance(payload, list):
        return {str(index): item for index, item in enumerate(payload) if item is not None}
    return {}


class BaseSource(ABC):
    """
    Abstract base class for all content sources.

    A source delivers schemas, locales, content entries, navigation trees and
    globals as raw, untyped records. Every content call takes the locale
    explicitly so concurrent locales never share a "current locale".
    """

    def __init__(self):
        self.locale: Optional[str] = None
        self._schemas: Optional[List[Schema]] = None

    async def get_schemas(self) -> List[Schema]:
        """
        Retrieve all enabled schemas.

        The result is memoized for the lifetime of the source, which is one run.

        Returns:
            List of enabled Schema objects
        """
        if self._schemas is None:
            schemas = await self._fetch_schemas()
            self._schemas = [schema for schema in schemas if schema.enabled]
        return self._schemas

    async def get_locales(self, locales: Optional[List[str]] = None) -> List[str]:
        """
        Resolve the locales to process.

        Args:
            locales: Explicitly configured locales; fetched from the CMS when None

        Returns:
            List of locale codes
        """
        if isinstance(locales, list):
            return locales
        return await self._fetch_locales()

    async def set_locale(self, locale: str) -> None:
        """Set the locale used by calls that do not pass one explicitly."""
        self.locale = locale

    def _resolve_locale(self, locale: Optional[str]) -> str:
        resolved = locale or self.locale
        if not resolved:
            raise ValueError("No locale given and no default locale set")
        return resolved

    @abstractmethod
    async def _fetch_schemas(self) -> List[Schema]:
        pass

    @abstractmethod
    async def _fetch_locales(self) -> List[str]:
        pass

    @abstractmethod
    async def get_globals(self) -> Optional[Dict[str, Any]]:
        """
        Retrieve the globals record.

        Returns:
            The raw globals mapping, or None when none are set up
        """
        pass

    @abstractmethod
    async def get_content_entry(self, schema_key: str, locale: Optional[str] = None,
                                populate: bool = True) -> Any:
        """
        Retrieve the content of one schema in one locale.

        Args:
            schema_key: Schema id
            locale: Locale to fetch (defaults to the locale set via set_locale)
            populate: Expand relational fields (media) into full records

        Returns:
            A single raw entry for single schemas, a mapping of id to raw entry
            for collections, or None when there is no content
        """
        pass

    @abstractmethod
    async def get_navigation(self, key: Optional[str] = None, locale: Optional[str] = None) -> Any:
        """
        Retrieve navigation trees.

        Args:
            key: Navigation key; all navigations when None
            locale: Locale to fetch (defaults to the locale set via set_locale)

        Returns:
            One raw navigation tree when `key` is given, otherwise a mapping
            of navigation key to raw tree
        """
        pass

    async def close(self) -> None:
        """Release any resources held by the source."""
        pass
