"""
DuckDB persistence for Flamenode.

This module keeps the node store and the media cache in a single DuckDB file
so that repeated runs can reuse downloaded media and detect stale nodes.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import duckdb

from .base import BaseCache, BaseNodeStore, json_default


class DatabaseManager:
    """
    Manages the DuckDB connection and tables shared by the node store and cache.
    """

    def __init__(self, db_path: str = "flamenode.db"):
        """
        Initialize the database manager.

        Args:
            db_path: Path to the DuckDB database file (":memory:" for a transient one)
        """
        self.db_path = db_path
        self.connection = None

    def connect(self):
        """Establish connection to the database."""
        self.connection = duckdb.connect(self.db_path)

    def disconnect(self):
        """Close the database connection."""
        if self.connection:
            self.connection.close()
            self.connection = None

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()

    def initialize_database(self):
        """
        Create all necessary tables if they don't exist.
        """
        if not self.connection:
            raise RuntimeError("Database connection not established")

        self.connection.execute("""
            CREATE TABLE IF NOT EXISTS nodes (
                node_id VARCHAR PRIMARY KEY,
                node_type VARCHAR NOT NULL,
                parent_id VARCHAR,
                content_digest VARCHAR NOT NULL,
                record TEXT NOT NULL,
                touched_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        self.connection.execute("""
            CREATE TABLE IF NOT EXISTS cache_entries (
                cache_key VARCHAR PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    def _require_connection(self):
        if not self.connection:
            raise RuntimeError("Database connection not established")
        return self.connection


class DuckDBNodeStore(BaseNodeStore):
    """
    Node store persisting flattened node records in DuckDB.
    """

    def __init__(self, db: DatabaseManager):
        self.db = db

    def create_node(self, record: Dict[str, Any]) -> None:
        connection = self.db._require_connection()
        internal = record.get("internal", {})
        connection.execute("""
            INSERT OR REPLACE INTO nodes (node_id, node_type, parent_id, content_digest, record, touched_at)
            VALUES (?, ?, ?, ?, ?, ?)
        """, [
            record["id"],
            internal.get("type", ""),
            record.get("parent"),
            internal.get("contentDigest", ""),
            json.dumps(record, default=json_default, ensure_ascii=False),
            datetime.now(),
        ])

    def get_node(self, node_id: str) -> Optional[Dict[str, Any]]:
        connection = self.db._require_connection()
        result = connection.execute(
            "SELECT record FROM nodes WHERE node_id = ?", [node_id]
        ).fetchone()

        if result:
            return json.loads(result[0])
        return None

    def touch_node(self, node_id: str) -> None:
        connection = self.db._require_connection()
        connection.execute(
            "UPDATE nodes SET touched_at = ? WHERE node_id = ?", [datetime.now(), node_id]
        )

    def list_nodes(self, node_type: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        List stored node records, optionally filtered by type.

        Args:
            node_type: Optional `internal.type` to filter by

        Returns:
            List of node records ordered by id
        """
        connection = self.db._require_connection()
        if node_type:
            results = connection.execute(
                "SELECT record FROM nodes WHERE node_type = ? ORDER BY node_id", [node_type]
            ).fetchall()
        else:
            results = connection.execute(
                "SELECT record FROM nodes ORDER BY node_id"
            ).fetchall()

        return [json.loads(row[0]) for row in results]

    def delete_stale_nodes(self, since: datetime) -> int:
        """
        Delete nodes that were neither created nor touched since `since`.

        Returns:
            Number of deleted nodes
        """
        connection = self.db._require_connection()
        stale = connection.execute(
            "SELECT COUNT(*) FROM nodes WHERE touched_at < ?", [since]
        ).fetchone()[0]
        connection.execute("DELETE FROM nodes WHERE touched_at < ?", [since])

        if stale:
            logging.info(f"Deleted {stale} stale nodes")
        return stale


class DuckDBCache(BaseCache):
    """
    Key/value cache storing JSON values in DuckDB.
    """

    def __init__(self, db: DatabaseManager):
        self.db = db

    async def get(self, key: str) -> Optional[Any]:
        connection = self.db._require_connection()
        result = connection.execute(
            "SELECT value FROM cache_entries WHERE cache_key = ?", [key]
        ).fetchone()

        if result:
            return json.loads(result[0])
        return None

    async def set(self, key: str, value: Any) -> None:
        connection = self.db._require_connection()
        connection.execute("""
            INSERT OR REPLACE INTO cache_entries (cache_key, value, updated_at)
            VALUES (?, ?, ?)
        """, [key, json.dumps(value, default=json_default), datetime.now()])
