"""
Puzzle Store for the Konnections game.

Key-value persistence for daily puzzles. One record per calendar day, stored under
"<YYYY-MM-DD>.json" with the JSON-serialised PuzzleBoard as its value.

Implementations:
    MemoryPuzzleStore    - process-local dict; used in tests and local development
    SupabasePuzzleStore  - one object per day in a Supabase Storage bucket

Public API (both implementations):
    exists(key)      → bool
    get(key)         → str | None
    put(key, value)  → None

Every failure talking to the backing store is raised as PuzzleStoreError so the
provider can tell store problems apart from its own bugs.
"""

import logging
import os
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class PuzzleStoreError(Exception):
    """Raised when the backing store cannot be read from or written to."""
    pass


def puzzle_key(date_key: str) -> str:
    """Maps a YYYY-MM-DD date key to the record key used in the store."""
    return f"{date_key}.json"


class PuzzleStore(ABC):

    @abstractmethod
    def exists(self, key: str) -> bool:
        ...

    @abstractmethod
    def get(self, key: str) -> "str | None":
        """Returns the stored value, or None when no record exists for key."""
        ...

    @abstractmethod
    def put(self, key: str, value: str) -> None:
        """Writes value under key, replacing any existing record (last write wins)."""
        ...


class MemoryPuzzleStore(PuzzleStore):
    """Keeps records in a dict for the lifetime of the process."""

    def __init__(self, records: "dict | None" = None):
        self._records = dict(records or {})

    def exists(self, key: str) -> bool:
        return key in self._records

    def get(self, key: str) -> "str | None":
        return self._records.get(key)

    def put(self, key: str, value: str) -> None:
        self._records[key] = value

    def __len__(self):
        return len(self._records)


class SupabasePuzzleStore(PuzzleStore):
    """
    Stores one JSON object per day in a Supabase Storage bucket.

    The Supabase client is created on first use. Pass client= to inject one (tests do this);
    otherwise SUPABASE_URL and SUPABASE_KEY are read from the environment. The service_role
    key is expected since these are server-to-server calls.
    """

    def __init__(self, bucket: str = "puzzles", client=None, url: "str | None" = None, key: "str | None" = None):
        self.bucket = bucket
        self._client = client
        self._url = url
        self._key = key

    def _get_client(self):
        """Returns the Supabase client, creating it on first call."""
        if self._client is None:
            try:
                from supabase import create_client
            except ImportError:
                raise RuntimeError(
                    "supabase package is not installed. "
                    "Run: pip install 'supabase>=2.0.0'"
                )
            url = self._url or os.getenv("SUPABASE_URL")
            key = self._key or os.getenv("SUPABASE_KEY")
            if not url or not key:
                raise RuntimeError(
                    "SUPABASE_URL and SUPABASE_KEY environment variables must be set. "
                    "Add them to backend/.env (use .env.example as a template)."
                )
            self._client = create_client(url, key)
        return self._client

    def _bucket(self):
        return self._get_client().storage.from_(self.bucket)

    def exists(self, key: str) -> bool:
        # Records live at the bucket root, so a name search at "" is enough.
        bucket = self._bucket()
        try:
            entries = bucket.list("", {"search": key})
        except Exception as exc:
            raise PuzzleStoreError(f"Could not list {key} in bucket '{self.bucket}': {exc}") from exc
        return any(entry.get("name") == key for entry in entries or [])

    def get(self, key: str) -> "str | None":
        if not self.exists(key):
            return None

        bucket = self._bucket()
        try:
            content = bucket.download(key)
            text = content.decode("utf-8") if isinstance(content, bytes) else content
        except Exception as exc:
            raise PuzzleStoreError(f"Could not download {key} from bucket '{self.bucket}': {exc}") from exc

        logger.debug("Downloaded %s from bucket %s (%d bytes)", key, self.bucket, len(content))
        return text

    def put(self, key: str, value: str) -> None:
        bucket = self._bucket()
        try:
            bucket.upload(
                path=key,
                file=value.encode("utf-8"),
                file_options={"content-type": "application/json", "upsert": "true"},
            )
        except Exception as exc:
            raise PuzzleStoreError(f"Could not upload {key} to bucket '{self.bucket}': {exc}") from exc

        logger.info("Stored %s in bucket %s", key, self.bucket)
