"""Chat history and presentation persistence.

Session records go to a remote key-value store (Redis) when one is
configured and reachable; otherwise a local JSON history file keeps a
reduced copy of the conversation.
"""

from __future__ import annotations

import fnmatch
import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

import redis

from .models import Deck

LOGGER = logging.getLogger(__name__)

CHAT_PREFIX = "chat:"
PRESENTATION_PREFIX = "presentation:"
DEFAULT_SESSION_ID = "default"
MAX_TITLE_CHARS = 50


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(slots=True)
class ChatMessage:
    """One entry of the chat transcript shown in the UI."""

    content: str
    is_bot: bool = False
    timestamp: int = field(default_factory=_now_ms)
    slide_data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": self.content,
            "is_bot": self.is_bot,
            "timestamp": self.timestamp,
            "slide_data": self.slide_data,
        }

    def to_history_entry(self) -> Dict[str, Any]:
        """Reduced projection kept in the local history file."""

        return {
            "content": self.content,
            "is_bot": self.is_bot,
            "timestamp": self.timestamp,
            "has_slide_data": self.slide_data is not None,
            "slide_title": (self.slide_data or {}).get("title"),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChatMessage":
        return cls(
            content=data.get("content", ""),
            is_bot=bool(data.get("is_bot", False)),
            timestamp=int(data.get("timestamp") or _now_ms()),
            slide_data=data.get("slide_data"),
        )


def session_title(messages: Sequence[ChatMessage]) -> str:
    """Derive a sidebar title from the transcript."""

    if not messages:
        return "New Chat"
    for message in messages:
        if message.slide_data and message.slide_data.get("title"):
            return message.slide_data["title"]
    for message in messages:
        if not message.is_bot and message.content:
            text = message.content
            if len(text) > MAX_TITLE_CHARS:
                return text[:MAX_TITLE_CHARS] + "..."
            return text
    return "Untitled Chat"


# ----------------------------------------------------------------------
# Key-value backends
# ----------------------------------------------------------------------

class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[Any]:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def keys(self, pattern: str) -> List[str]:
        ...

    def close(self) -> None:
        ...


class InMemoryStore:
    """Dictionary backed store used for tests and the stub app mode."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value, ensure_ascii=False)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self, pattern: str) -> List[str]:
        return [key for key in self._data if fnmatch.fnmatchcase(key, pattern)]

    def close(self) -> None:
        pass


class RedisStore:
    """JSON values stored in Redis under plain string keys."""

    def __init__(self, url: str, *, client: Optional[redis.Redis] = None) -> None:
        self.url = url
        self._client = client

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.Redis.from_url(self.url, decode_responses=True)
        return self._client

    def get(self, key: str) -> Optional[Any]:
        raw = self.client.get(key)
        return json.loads(raw) if raw else None

    def set(self, key: str, value: Any) -> None:
        self.client.set(key, json.dumps(value, ensure_ascii=False))

    def delete(self, key: str) -> None:
        self.client.delete(key)

    def keys(self, pattern: str) -> List[str]:
        return list(self.client.scan_iter(match=pattern))

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


class LocalHistoryStore:
    """Append-only style chat history in a JSON file, capped at ``max_messages``."""

    def __init__(self, path: Path, *, max_messages: int = 1000) -> None:
        self.path = Path(path)
        self.max_messages = max_messages

    def save(self, messages: Sequence[ChatMessage]) -> None:
        entries = [message.to_history_entry() for message in messages[-self.max_messages:]]
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(entries, ensure_ascii=False, indent=2), encoding="utf-8")

    def load(self) -> List[ChatMessage]:
        if not self.path.exists():
            return []
        try:
            entries = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            LOGGER.warning("Ignoring unreadable chat history %s: %s", self.path, exc)
            return []
        return [
            ChatMessage(
                content=entry.get("content", ""),
                is_bot=bool(entry.get("is_bot", False)),
                timestamp=int(entry.get("timestamp") or 0),
                slide_data={"title": entry["slide_title"]} if entry.get("slide_title") else None,
            )
            for entry in entries
            if isinstance(entry, dict)
        ]

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()


# ----------------------------------------------------------------------
# Session facade
# ----------------------------------------------------------------------

class SessionStore:
    """Save and restore chat sessions, preferring the remote store."""

    def __init__(
        self,
        remote: Optional[KeyValueStore] = None,
        local: Optional[LocalHistoryStore] = None,
    ) -> None:
        self.remote = remote
        self.local = local

    @classmethod
    def from_settings(cls, settings) -> "SessionStore":
        remote = RedisStore(settings.redis_url) if settings.redis_url else None
        return cls(remote=remote, local=LocalHistoryStore(settings.history_path))

    def close(self) -> None:
        if self.remote is not None:
            self.remote.close()

    # ------------------------------------------------------------------
    # Chat transcripts
    # ------------------------------------------------------------------
    def save_messages(
        self, messages: Sequence[ChatMessage], session_id: str = DEFAULT_SESSION_ID
    ) -> bool:
        """Return ``True`` when the remote store accepted the record."""

        record = {
            "messages": [message.to_dict() for message in messages],
            "last_modified": _now_ms(),
            "title": session_title(messages),
            "session_id": session_id,
        }
        saved_remotely = self._remote_call("set", f"{CHAT_PREFIX}{session_id}", record)
        if self.local is not None:
            self.local.save(messages)
        return saved_remotely

    def load_messages(self, session_id: str = DEFAULT_SESSION_ID) -> List[ChatMessage]:
        record = self._remote_get(f"{CHAT_PREFIX}{session_id}")
        if record and isinstance(record.get("messages"), list):
            return [ChatMessage.from_dict(item) for item in record["messages"]]
        if self.local is not None:
            return self.local.load()
        return []

    # ------------------------------------------------------------------
    # Presentations
    # ------------------------------------------------------------------
    def save_presentation(self, deck: Deck, session_id: str = DEFAULT_SESSION_ID) -> bool:
        record = {
            "presentation": deck.to_dict(),
            "last_modified": _now_ms(),
            "session_id": session_id,
        }
        return self._remote_call("set", f"{PRESENTATION_PREFIX}{session_id}", record)

    def load_presentation(self, session_id: str = DEFAULT_SESSION_ID) -> Optional[Deck]:
        record = self._remote_get(f"{PRESENTATION_PREFIX}{session_id}")
        if not record or not record.get("presentation"):
            return None
        try:
            return Deck.from_dict(record["presentation"])
        except (TypeError, ValueError) as exc:
            LOGGER.warning("Stored presentation for %s is unusable: %s", session_id, exc)
            return None

    def delete_session(self, session_id: str) -> None:
        self._remote_call("delete", f"{CHAT_PREFIX}{session_id}")
        self._remote_call("delete", f"{PRESENTATION_PREFIX}{session_id}")
        if self.local is not None and session_id == DEFAULT_SESSION_ID:
            self.local.clear()

    def list_sessions(self) -> List[Dict[str, Any]]:
        """Session summaries, most recently modified first."""

        if self.remote is None:
            return []
        try:
            keys = self.remote.keys(f"{CHAT_PREFIX}*")
            sessions = []
            for key in keys:
                record = self.remote.get(key)
                if not record:
                    continue
                sessions.append(
                    {
                        "id": key[len(CHAT_PREFIX):],
                        "title": record.get("title") or "Untitled Chat",
                        "last_modified": record.get("last_modified") or 0,
                        "message_count": len(record.get("messages") or []),
                    }
                )
        except redis.RedisError as exc:
            LOGGER.warning("Could not list sessions: %s", exc)
            return []
        return sorted(sessions, key=lambda item: item["last_modified"], reverse=True)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _remote_call(self, method: str, *args: Any) -> bool:
        if self.remote is None:
            return False
        try:
            getattr(self.remote, method)(*args)
        except (redis.RedisError, OSError) as exc:
            LOGGER.warning("Remote store %s failed, using local history: %s", method, exc)
            return False
        return True

    def _remote_get(self, key: str) -> Optional[Dict[str, Any]]:
        if self.remote is None:
            return None
        try:
            record = self.remote.get(key)
        except (redis.RedisError, OSError) as exc:
            LOGGER.warning("Remote store read failed for %s: %s", key, exc)
            return None
        return record if isinstance(record, dict) else None
