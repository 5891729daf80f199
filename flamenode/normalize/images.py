"""
Image discovery and resolution.

Images can sit at any depth of an entry (media fields, fieldsets, repeater
items). They are located by shape, then each one is linked to a local file
node, reusing cached downloads from earlier runs where possible.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..models.node import FileRef
from ..store.base import BaseCache, BaseNodeStore

DEFAULT_SUPPORTED_IMAGE_TYPES = ("png", "jpg", "jpeg")
MEDIA_CACHE_PREFIX = "flamelink-media-"
LOCAL_FILE_FIELD = "localFile___NODE"


def is_image_reference(value: Any, supported: Iterable[str] = DEFAULT_SUPPORTED_IMAGE_TYPES) -> bool:
    """True when `value` is a mapping carrying an image `contentType` and a `url`."""
    if not isinstance(value, Mapping):
        return False

    content_type = value.get("contentType")
    if not isinstance(content_type, str) or not value.get("url"):
        return False

    parts = content_type.split("/")
    return len(parts) == 2 and parts[0] == "image" and parts[1] in supported


def locate_image_fields(value: Any, supported: Iterable[str] = DEFAULT_SUPPORTED_IMAGE_TYPES) -> List[Dict[str, Any]]:
    """
    Recursively search `value` for image references.

    Traversal is depth-first, following mapping field order and sequence
    order. The returned mappings are the original objects, so callers can
    annotate them in place.
    """
    supported = tuple(supported)
    results: List[Dict[str, Any]] = []
    _collect_images(value, supported, results)
    return results


def _collect_images(value: Any, supported: tuple, results: List[Dict[str, Any]]) -> None:
    if isinstance(value, Mapping):
        if is_image_reference(value, supported):
            results.append(value)
        children = value.values()
    elif isinstance(value, list):
        children = value
    else:
        return

    for child in children:
        _collect_images(child, supported, results)


def media_cache_key(image: Mapping) -> Optional[str]:
    """Cache key for an image, None when it has no stable identifier."""
    identifier = image.get("flamelink_id") or image.get("id")
    if not identifier:
        return None
    return f"{MEDIA_CACHE_PREFIX}{identifier}"


@dataclass
class ImageResolution:
    """Outcome of resolving one image reference."""

    url: str
    cache_key: Optional[str]
    file_node_id: Optional[str] = None
    cached: bool = False
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.file_node_id is not None


class ImageResolver:
    """
    Links image references to local file nodes.

    One resolver lives for one run. It remembers in-flight downloads so that
    the same media item referenced from several entries is only materialized
    once, even when those entries are processed concurrently.
    """

    def __init__(self, store: BaseNodeStore, cache: BaseCache, materializer=None,
                 supported_image_types: Iterable[str] = DEFAULT_SUPPORTED_IMAGE_TYPES):
        """
        Initialize the image resolver.

        Args:
            store: Node store used to check and touch cached file nodes
            cache: Media cache shared across runs
            materializer: Remote-file materializer; None disables downloads
            supported_image_types: Image subtypes that are resolved
        """
        self.store = store
        self.cache = cache
        self.materializer = materializer
        self.supported_image_types = tuple(supported_image_types)
        self._in_flight: Dict[str, asyncio.Future] = {}

    def locate(self, value: Any) -> List[Dict[str, Any]]:
        return locate_image_fields(value, self.supported_image_types)

    async def resolve_entry_images(self, entry: Any, parent_id: str) -> List[ImageResolution]:
        """
        Resolve every image found in `entry` concurrently.

        Each image mapping receives a `localFile___NODE` link (None when the
        download failed). Returns once every image has settled.
        """
        if self.materializer is None:
            return []

        images = self.locate(entry)
        if not images:
            return []

        return list(await asyncio.gather(
            *(self.resolve_image(image, parent_id) for image in images)
        ))

    async def resolve_image(self, image: Dict[str, Any], parent_id: str) -> ImageResolution:
        """Resolve a single image reference and link it in place."""
        key = media_cache_key(image)
        resolution = ImageResolution(url=image["url"], cache_key=key)

        cached_id = await self._cached_file_node(key)
        if cached_id:
            self.store.touch_node(cached_id)
            resolution.file_node_id = cached_id
            resolution.cached = True
        else:
            try:
                file_ref = await self._materialize_once(key, image["url"], parent_id)
            except Exception as e:
                logging.warning(f"Failed to download image {image['url']}: {e}")
                resolution.error = str(e)
                file_ref = None

            if file_ref is not None:
                resolution.file_node_id = file_ref.id

        image[LOCAL_FILE_FIELD] = resolution.file_node_id
        return resolution

    async def _cached_file_node(self, key: Optional[str]) -> Optional[str]:
        if key is None:
            return None

        try:
            cached = await self.cache.get(key)
        except Exception as e:
            logging.debug(f"Media cache read failed for {key}: {e}")
            return None

        if not isinstance(cached, Mapping):
            return None

        file_node_id = cached.get("file_node_id")
        if file_node_id and self.store.get_node(file_node_id):
            return file_node_id
        return None

    async def _materialize_once(self, key: Optional[str], url: str, parent_id: str) -> Optional[FileRef]:
        if key is None:
            return await self.materializer.materialize(url=url, parent_id=parent_id)

        pending = self._in_flight.get(key)
        if pending is not None:
            return await asyncio.shield(pending)

        future = asyncio.get_running_loop().create_future()
        self._in_flight[key] = future
        try:
            file_ref = await self.materializer.materialize(url=url, parent_id=parent_id)
        except Exception as e:
            future.set_exception(e)
            # Mark the exception retrieved when nobody else is waiting.
            future.exception()
            del self._in_flight[key]
            raise

        future.set_result(file_ref)
        if file_ref is not None:
            await self._store_in_cache(key, file_ref)
        return file_ref

    async def _store_in_cache(self, key: str, file_ref: FileRef) -> None:
        try:
            await self.cache.set(key, {"file_node_id": file_ref.id, "url": file_ref.url})
        except Exception as e:
            logging.debug(f"Media cache write failed for {key}: {e}")
