"""Remote media materialization."""

from .materializer import BaseMaterializer, RemoteFileMaterializer, file_name_from_url

__all__ = ["BaseMaterializer", "RemoteFileMaterializer", "file_name_from_url"]
