"""
Session key resolution for Slack system events.

Maps a Slack channel (and optional channel type hint) onto the agent session
that should receive events from it:

    no channel          -> agent:<agent>:main
    DM (im)             -> agent:<agent>:main, or agent:<agent>:slack:dm:<id> with per-channel DM scope
    group DM (mpim)     -> agent:<agent>:slack:group:<id>
    channel / group     -> agent:<agent>:slack:channel:<id>
"""

from typing import Optional

import config

CHANNEL_TYPES = ('im', 'mpim', 'channel', 'group')


def infer_slack_channel_type(channel_id: Optional[str]) -> Optional[str]:
    """Guess the channel type from Slack's id prefix (D, C, G)."""
    normalized = (channel_id or '').strip().upper()
    if normalized.startswith('D'):
        return 'im'
    if normalized.startswith('C'):
        return 'channel'
    if normalized.startswith('G'):
        return 'group'
    return None


def normalize_slack_channel_type(channel_type: Optional[str], channel_id: Optional[str]) -> str:
    """
    Settle on one of im / mpim / channel / group.

    A valid hint wins, except that a D-prefixed id is always a DM. Without a
    valid hint the id prefix decides, defaulting to channel.
    """
    normalized = (channel_type or '').strip().lower()
    inferred = infer_slack_channel_type(channel_id)
    if normalized in CHANNEL_TYPES:
        if inferred == 'im' and normalized != 'im':
            return 'im'
        return normalized
    return inferred or 'channel'


class SlackSessionKeyResolver:
    """
    Callable resolver: resolver(channel_id=..., channel_type=...) -> session key.
    """

    def __init__(self, agent_id: str = "main", dm_scope: str = "main"):
        self.agent_id = agent_id
        self.dm_scope = dm_scope

    @classmethod
    def from_config(cls) -> "SlackSessionKeyResolver":
        return cls(agent_id=config.get_agent_id(), dm_scope=config.get_dm_scope())

    @property
    def main_session_key(self) -> str:
        return f"agent:{self.agent_id}:main"

    def __call__(self, channel_id: Optional[str] = None, channel_type: Optional[str] = None) -> str:
        channel_id = (channel_id or '').strip()
        if not channel_id:
            return self.main_session_key

        kind = normalize_slack_channel_type(channel_type, channel_id)
        if kind == 'im':
            if self.dm_scope == 'per-channel':
                return f"agent:{self.agent_id}:slack:dm:{channel_id}"
            return self.main_session_key
        if kind == 'mpim':
            return f"agent:{self.agent_id}:slack:group:{channel_id}"
        return f"agent:{self.agent_id}:slack:channel:{channel_id}"
