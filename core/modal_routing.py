"""
Routing for modal (view) events.

Modals are not attached to a channel message, so whoever opens one stores
routing hints in the view's private_metadata as JSON:

    {"sessionKey": "agent:main:slack:channel:C99"}        pinned session
    {"channelId": "D123", "channelType": "im"}            re-derive from channel

When neither is present the resolver is asked with no hints and falls back
to the main session.
"""

import json
from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass
class ModalPrivateMetadata:
    session_key: Optional[str] = None
    channel_id: Optional[str] = None
    channel_type: Optional[str] = None


@dataclass
class SessionRouting:
    session_key: str
    channel_id: Optional[str] = None
    channel_type: Optional[str] = None


def _non_blank(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def parse_modal_private_metadata(raw: Any) -> ModalPrivateMetadata:
    """
    Decode a view's private_metadata string.

    Args:
        raw: private_metadata as received from Slack

    Returns:
        ModalPrivateMetadata; empty if raw is blank, not JSON, or not an object
    """
    if not isinstance(raw, str) or not raw.strip():
        return ModalPrivateMetadata()
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return ModalPrivateMetadata()
    if not isinstance(parsed, dict):
        return ModalPrivateMetadata()

    return ModalPrivateMetadata(
        session_key=_non_blank(parsed.get('sessionKey')),
        channel_id=_non_blank(parsed.get('channelId')),
        channel_type=_non_blank(parsed.get('channelType')),
    )


def resolve_modal_session_routing(resolve_session_key: Callable[..., str], private_metadata: Any) -> SessionRouting:
    """
    Pick the session for a modal event.

    Order: embedded sessionKey as-is, then the resolver with the embedded
    channel, then the resolver with no hints.
    """
    metadata = parse_modal_private_metadata(private_metadata)
    if metadata.session_key:
        return SessionRouting(session_key=metadata.session_key)

    if metadata.channel_id:
        return SessionRouting(
            session_key=resolve_session_key(
                channel_id=metadata.channel_id,
                channel_type=metadata.channel_type,
            ),
            channel_id=metadata.channel_id,
            channel_type=metadata.channel_type,
        )

    return SessionRouting(session_key=resolve_session_key())
