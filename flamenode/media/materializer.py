"""
Remote-file materialization for Flamenode.

Downloads remote media into a local cache directory and registers a file
node for it in the node store, so content nodes can link to local files.
"""

import asyncio
import hashlib
import logging
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import unquote, urlparse

import httpx

from ..exceptions import MediaDownloadError
from ..models.node import FileRef, Node, NodeInternal
from ..store.base import BaseNodeStore, serialize

FILE_NODE_TYPE = "FlamelinkFile"


class BaseMaterializer(ABC):
    """
    Abstract remote-file materializer.
    """

    @abstractmethod
    async def materialize(self, url: str, parent_id: str) -> Optional[FileRef]:
        """
        Fetch `url` and register it as a file node owned by `parent_id`.

        Returns:
            Reference to the created file node, or None when nothing was created

        Raises:
            MediaDownloadError: If the file cannot be fetched or stored
        """
        pass


def file_name_from_url(url: str) -> str:
    """Last path segment of a (possibly percent-encoded) URL."""
    name = PurePosixPath(unquote(urlparse(url).path)).name
    return name or "file"


class RemoteFileMaterializer(BaseMaterializer):
    """
    Materializer downloading files over HTTP with httpx.
    """

    def __init__(self, store: BaseNodeStore, cache_dir: str = ".flamenode/media",
                 timeout: float = 30.0, client: Optional[httpx.AsyncClient] = None):
        """
        Initialize the materializer.

        Args:
            store: Node store the file nodes are created in
            cache_dir: Directory downloaded files are written to
            timeout: Request timeout in seconds
            client: Optional preconfigured client (mainly for tests)
        """
        self.store = store
        self.cache_dir = Path(cache_dir)
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "RemoteFileMaterializer":
        """Enter async context manager."""
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context manager."""
        await self.close()

    async def close(self) -> None:
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure HTTP client is initialized."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
            )
        return self._client

    async def materialize(self, url: str, parent_id: str) -> Optional[FileRef]:
        client = await self._ensure_client()

        try:
            response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise MediaDownloadError(url, f"HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            raise MediaDownloadError(url, str(e) or type(e).__name__)

        body = response.content
        url_hash = hashlib.sha256(url.encode("utf-8")).hexdigest()[:16]
        name = file_name_from_url(url)
        target = self.cache_dir / url_hash / name

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._write_file, target, body)
        except OSError as e:
            raise MediaDownloadError(url, f"could not write {target}: {e}")

        content_type = response.headers.get("content-type")
        file_ref = FileRef(
            id=self.store.create_node_id(f"flamelink-file-{url}"),
            url=url,
            path=str(target.resolve()),
            content_type=content_type,
            size=len(body),
        )
        self._create_file_node(file_ref, parent_id, body)
        logging.info(f"Downloaded {url} ({len(body)} bytes)")
        return file_ref

    @staticmethod
    def _write_file(target: Path, body: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(body)

    def _create_file_node(self, file_ref: FileRef, parent_id: str, body: bytes) -> None:
        path = PurePosixPath(Path(file_ref.path).as_posix())
        data = {
            "url": file_ref.url,
            "absolutePath": file_ref.path,
            "name": path.stem,
            "base": path.name,
            "extension": path.suffix.lstrip("."),
            "size": file_ref.size,
            "contentType": file_ref.content_type,
        }
        node = Node(
            id=file_ref.id,
            parent=parent_id,
            children=[],
            internal=NodeInternal(
                type=FILE_NODE_TYPE,
                content=serialize(data),
                content_digest=hashlib.sha256(body).hexdigest(),
                media_type=file_ref.content_type,
            ),
            data=data,
        )
        self.store.create_node(node.to_record())
