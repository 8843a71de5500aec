"""
Configuration for the Slack interaction adapter.

Values come from environment variables, falling back to DEFAULT_CONFIG.
The listener entry point loads a .env file from the project root before
any of these helpers are called.

Environment Variables:
    SLACK_INTERACTION_PREFIX - action_id / callback_id prefix handled by the adapter (default: openclaw:)
    SLACK_AGENT_ID - agent id used when building session keys (default: main)
    SLACK_DM_SCOPE - "main" routes DMs to the main session, "per-channel" gives each DM its own (default: main)
    SYSTEM_EVENT_MAX_QUEUED - max events held per session before the oldest is dropped (default: 20)
"""

import os
from typing import Any, Optional


DEFAULT_CONFIG = {
    'action_prefix': 'openclaw:',
    'agent_id': 'main',
    'dm_scope': 'main',
    'max_queued_events': 20,
}

ENV_VARS = {
    'action_prefix': 'SLACK_INTERACTION_PREFIX',
    'agent_id': 'SLACK_AGENT_ID',
    'dm_scope': 'SLACK_DM_SCOPE',
    'max_queued_events': 'SYSTEM_EVENT_MAX_QUEUED',
}

DM_SCOPES = ('main', 'per-channel')


def get_config_value(key: str, default: Optional[Any] = None) -> Any:
    """
    Look up a config value, environment first.

    Args:
        key: Config key (see DEFAULT_CONFIG)
        default: Returned when the key is unknown

    Returns:
        The env var value if set and non-blank, else the DEFAULT_CONFIG value
    """
    env_var = ENV_VARS.get(key)
    if env_var:
        env_value = os.environ.get(env_var)
        if env_value is not None and env_value.strip():
            return env_value.strip()
    return DEFAULT_CONFIG.get(key, default)


def get_action_prefix() -> str:
    """Prefix that scopes which action_ids and callback_ids we handle."""
    return str(get_config_value('action_prefix'))


def get_agent_id() -> str:
    return str(get_config_value('agent_id'))


def get_dm_scope() -> str:
    """DM session scope; unknown values fall back to the default."""
    scope = str(get_config_value('dm_scope')).lower()
    if scope not in DM_SCOPES:
        return DEFAULT_CONFIG['dm_scope']
    return scope


def get_max_queued_events() -> int:
    value = get_config_value('max_queued_events')
    try:
        max_events = int(value)
    except (TypeError, ValueError):
        return DEFAULT_CONFIG['max_queued_events']
    if max_events < 1:
        return DEFAULT_CONFIG['max_queued_events']
    return max_events
