"""
Per-run normalization context.

Everything the assemblers need besides their direct input is carried here:
the node store, the media cache, the remote-file materializer and the
per-run image resolver. A context is built once per run and dropped at the
end of it.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

from .normalize.images import DEFAULT_SUPPORTED_IMAGE_TYPES, ImageResolver
from .store.base import BaseCache, BaseNodeStore


@dataclass
class NormalizeContext:
    """
    Collaborators shared by every assembler call in one run.
    """
    store: BaseNodeStore
    cache: BaseCache
    materializer: Optional[Any] = None
    supported_image_types: Tuple[str, ...] = DEFAULT_SUPPORTED_IMAGE_TYPES
    images: ImageResolver = field(init=False)

    def __post_init__(self):
        self.supported_image_types = tuple(self.supported_image_types)
        self.images = ImageResolver(
            store=self.store,
            cache=self.cache,
            materializer=self.materializer,
            supported_image_types=self.supported_image_types,
        )
