"""
Flamelink source backed by the Firebase Realtime Database REST API.

Flamelink keeps its data under the `/flamelink` root of the Realtime
Database. This source reads schemas, locales, content, navigation, globals
and media file records from there with httpx.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence
from urllib.parse import quote

import httpx

from ..exceptions import RemoteFetchError
from ..models import FieldType, Schema, SchemaField
from .base import BaseSource, keyed_records

STORAGE_DOWNLOAD_URL = "https://firebasestorage.googleapis.com/v0/b/{bucket}/o/{path}?alt=media"
MEDIA_FOLDER = "flamelink/media"


class FlamelinkRestSource(BaseSource):
    """
    Source reading Flamelink data over the Realtime Database REST API.
    """

    def __init__(self, database_url: str, storage_bucket: str, auth_token: Optional[str] = None,
                 environment: str = "production", timeout: float = 30.0,
                 client: Optional[httpx.AsyncClient] = None):
        """
        Initialize the source.

        Args:
            database_url: Realtime Database URL (https://<project>.firebaseio.com)
            storage_bucket: Storage bucket media files live in
            auth_token: Database secret or ID token sent as the `auth` parameter
            environment: Flamelink environment to read from
            timeout: Request timeout in seconds
            client: Optional preconfigured client (mainly for tests)
        """
        super().__init__()
        self.database_url = database_url.rstrip("/")
        self.storage_bucket = storage_bucket
        self.environment = environment
        self._auth_token = auth_token
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None
        self._media_files: Optional[Dict[str, Any]] = None

    async def __aenter__(self) -> "FlamelinkRestSource":
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
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout))
        return self._client

    @property
    def _env_path(self) -> str:
        return f"flamelink/environments/{self.environment}"

    async def _get(self, call: str, path: str) -> Any:
        """
        GET a Realtime Database path as JSON.

        Raises:
            RemoteFetchError: If the request fails or the body is not JSON
        """
        client = await self._ensure_client()
        params = {"auth": self._auth_token} if self._auth_token else {}

        try:
            response = await client.get(f"{self.database_url}/{path}.json", params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise RemoteFetchError(call, f"request for '{path}' failed with HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            raise RemoteFetchError(call, f"request for '{path}' failed: {e}")
        except ValueError as e:
            raise RemoteFetchError(call, f"response for '{path}' is not valid JSON: {e}")

    async def _fetch_schemas(self) -> List[Schema]:
        schemas_data = await self._get("get_schemas", f"{self._env_path}/schemas")

        if not schemas_data:
            logging.warning("It seems like you do not have any available schemas set up just yet.")
            return []

        schemas = []
        for key, schema_data in keyed_records(schemas_data).items():
            if not isinstance(schema_data, Mapping):
                continue
            schemas.append(Schema.model_validate({"id": key, **schema_data}))
        return schemas

    async def _fetch_locales(self) -> List[str]:
        locales = await self._get("get_locales", "flamelink/settings/locales")

        if isinstance(locales, Mapping):
            return list(locales.keys())
        if isinstance(locales, list):
            return [locale for locale in locales if locale]
        return []

    async def get_globals(self) -> Optional[Dict[str, Any]]:
        return await self._get("get_globals", f"{self._env_path}/settings/globals")

    async def get_content_entry(self, schema_key: str, locale: Optional[str] = None,
                                populate: bool = True) -> Any:
        locale = self._resolve_locale(locale)
        content = await self._get(
            "get_content_entry", f"{self._env_path}/content/{schema_key}/{locale}"
        )

        if content is None or not populate:
            return content

        schema = next((s for s in await self.get_schemas() if s.id == schema_key), None)
        if schema is None:
            return content

        files = await self._get_media_files()
        if schema.is_single:
            return self._populate_media(schema.fields, content, files)
        return {
            entry_id: self._populate_media(schema.fields, entry, files)
            for entry_id, entry in keyed_records(content).items()
        }

    async def get_navigation(self, key: Optional[str] = None, locale: Optional[str] = None) -> Any:
        locale = self._resolve_locale(locale)

        if key is not None:
            return await self._get("get_navigation", f"{self._env_path}/navigation/{key}/{locale}")

        navigation = await self._get("get_navigation", f"{self._env_path}/navigation")
        return {
            nav_key: per_locale[locale]
            for nav_key, per_locale in keyed_records(navigation).items()
            if isinstance(per_locale, Mapping) and locale in per_locale
        }

    async def _get_media_files(self) -> Dict[str, Any]:
        if self._media_files is None:
            self._media_files = keyed_records(await self._get("get_media", "flamelink/media/files"))
        return self._media_files

    def file_url(self, file_name: str) -> str:
        """Public download URL of a file stored in the Flamelink media folder."""
        return STORAGE_DOWNLOAD_URL.format(
            bucket=self.storage_bucket,
            path=quote(f"{MEDIA_FOLDER}/{file_name}", safe=""),
        )

    def _populate_media(self, fields: Sequence[SchemaField], entry: Any, files: Mapping[str, Any]) -> Any:
        """Replace media file ids with file records carrying a download URL."""
        if not isinstance(entry, Mapping):
            return entry

        populated = dict(entry)
        for field in fields:
            value = populated.get(field.key)
            field_type = field.field_type

            if field_type is FieldType.MEDIA and isinstance(value, list):
                populated[field.key] = [self._file_record(item, files) for item in value]
            elif field_type is FieldType.FIELDSET and isinstance(value, Mapping):
                populated[field.key] = self._populate_media(field.options, value, files)
            elif field_type is FieldType.REPEATER and isinstance(value, list):
                populated[field.key] = [self._populate_media(field.options, item, files) for item in value]

        return populated

    def _file_record(self, file_id: Any, files: Mapping[str, Any]) -> Any:
        if not isinstance(file_id, (str, int)):
            return file_id

        record = files.get(str(file_id))
        if not isinstance(record, Mapping):
            logging.warning(f"Media file {file_id} referenced in content does not exist")
            return file_id

        populated = {"id": str(file_id), **record}
        if record.get("file"):
            populated["url"] = self.file_url(record["file"])
        return populated
