"""
In-memory system event queue.

Events are short text lines addressed to an agent session. The agent runtime
drains them before its next turn. Each session keeps at most `max_events`
entries (oldest dropped first) and an event identical to the one queued just
before it is skipped.

Thread-safe: Bolt runs listeners on worker threads, so every queue operation
holds the lock.
"""

import threading
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import config


@dataclass
class SystemEvent:
    text: str
    ts: float
    context_key: Optional[str] = None


@dataclass
class _SessionQueue:
    events: List[SystemEvent] = field(default_factory=list)
    last_text: Optional[str] = None
    last_context_key: Optional[str] = None


def _normalize_context_key(context_key: Optional[str]) -> Optional[str]:
    if not context_key:
        return None
    trimmed = context_key.strip()
    return trimmed.lower() if trimmed else None


def _require_session_key(session_key: Optional[str]) -> str:
    key = (session_key or '').strip()
    if not key:
        raise ValueError("system events require a session_key")
    return key


class SystemEventQueue:
    """Per-session FIFO of pending system events."""

    def __init__(self, max_events: Optional[int] = None):
        self._max_events = max_events
        self._sessions: Dict[str, _SessionQueue] = {}
        self._lock = threading.Lock()

    @property
    def max_events(self) -> int:
        """Explicit cap, else SYSTEM_EVENT_MAX_QUEUED (read at call time)."""
        if self._max_events is not None:
            return self._max_events
        return config.get_max_queued_events()

    def enqueue(self, text: str, session_key: str, context_key: Optional[str] = None) -> bool:
        """
        Queue an event for a session.

        Args:
            text: Event text (stripped; blank text is ignored)
            session_key: Target session (required)
            context_key: Correlation key, recorded as the session's latest context

        Returns:
            True if the event was queued, False if it was blank or a repeat

        Raises:
            ValueError: If session_key is blank
        """
        key = _require_session_key(session_key)
        cleaned = (text or '').strip()
        if not cleaned:
            return False

        normalized_context = _normalize_context_key(context_key)
        with self._lock:
            entry = self._sessions.setdefault(key, _SessionQueue())
            entry.last_context_key = normalized_context
            if entry.last_text == cleaned:
                return False
            entry.last_text = cleaned
            entry.events.append(SystemEvent(text=cleaned, ts=time.time(), context_key=normalized_context))
            if len(entry.events) > self.max_events:
                entry.events.pop(0)
            return True

    def drain(self, session_key: str) -> List[SystemEvent]:
        """Return and clear everything queued for a session."""
        key = _require_session_key(session_key)
        with self._lock:
            entry = self._sessions.pop(key, None)
        return list(entry.events) if entry else []

    def peek(self, session_key: str) -> List[str]:
        key = _require_session_key(session_key)
        with self._lock:
            entry = self._sessions.get(key)
            return [event.text for event in entry.events] if entry else []

    def has_events(self, session_key: str) -> bool:
        key = _require_session_key(session_key)
        with self._lock:
            entry = self._sessions.get(key)
            return bool(entry and entry.events)

    def is_context_changed(self, session_key: str, context_key: Optional[str] = None) -> bool:
        """True if context_key differs from the session's most recent one."""
        key = _require_session_key(session_key)
        normalized = _normalize_context_key(context_key)
        with self._lock:
            entry = self._sessions.get(key)
            last = entry.last_context_key if entry else None
        return normalized != last

    def reset(self) -> None:
        with self._lock:
            self._sessions.clear()


_default_queue = SystemEventQueue()


def get_default_queue() -> SystemEventQueue:
    return _default_queue


def enqueue_system_event(text: str, session_key: str, context_key: Optional[str] = None) -> bool:
    return _default_queue.enqueue(text, session_key=session_key, context_key=context_key)


def drain_system_events(session_key: str) -> List[str]:
    return [event.text for event in _default_queue.drain(session_key)]


def peek_system_events(session_key: str) -> List[str]:
    return _default_queue.peek(session_key)


def has_system_events(session_key: str) -> bool:
    return _default_queue.has_events(session_key)


def reset_system_events() -> None:
    _default_queue.reset()
