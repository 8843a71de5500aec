#!/usr/bin/env python3
"""
Slack Interaction Listener - Runs the interaction adapter over Socket Mode

Connects to Slack, registers the interaction listeners and feeds every
button click, select change, modal submission and modal close into the
system event queue for the agent runtime to drain.

Usage:
    python3 interaction_listener.py
    slack-interaction-listener          (when installed)

Environment Variables:
    SLACK_BOT_TOKEN - Bot User OAuth Token (required)
    SLACK_APP_TOKEN - App-Level Token for Socket Mode (required)
    SLACK_INTERACTION_PREFIX - action_id / callback_id prefix (default: openclaw:)
    SLACK_AGENT_ID, SLACK_DM_SCOPE - session key routing (see config.py)
"""

import os
import sys
from typing import Optional

from dotenv import load_dotenv
from slack_bolt import App
from slack_bolt.adapter.socket_mode import SocketModeHandler

import config
from session_keys import SlackSessionKeyResolver
from slack_interactions import register_slack_interaction_events
from system_events import SystemEventQueue, get_default_queue

# Load environment variables from .env file (in parent directory)
env_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env')
load_dotenv(env_path)


def create_app(token: Optional[str] = None, queue: Optional[SystemEventQueue] = None) -> App:
    """
    Build a Bolt app with the interaction listeners registered.

    Args:
        token: Bot token (default: SLACK_BOT_TOKEN)
        queue: Event queue to feed (default: the process-wide queue)

    Returns:
        Configured slack_bolt.App
    """
    app = App(token=token or os.environ["SLACK_BOT_TOKEN"])
    queue = queue or get_default_queue()
    resolver = SlackSessionKeyResolver.from_config()

    registered = register_slack_interaction_events(
        app,
        resolve_session_key=resolver,
        enqueue_event=queue.enqueue,
        action_prefix=config.get_action_prefix(),
    )
    print(f"🔌 Registered interaction listeners: {', '.join(registered) or 'none'}", file=sys.stderr)
    return app


def main():
    """Start the interaction listener in Socket Mode"""
    bot_token = os.environ.get("SLACK_BOT_TOKEN")
    if not bot_token:
        print("❌ Error: SLACK_BOT_TOKEN environment variable not set", file=sys.stderr)
        print("   Create a .env file from .env.example and set your tokens", file=sys.stderr)
        sys.exit(1)

    app_token = os.environ.get("SLACK_APP_TOKEN")
    if not app_token:
        print("❌ Error: SLACK_APP_TOKEN environment variable not set", file=sys.stderr)
        print("   Socket Mode requires an app-level token", file=sys.stderr)
        sys.exit(1)

    print("🚀 Starting Slack interaction listener...")
    app = create_app(token=bot_token)

    print(f"🏷️  Action prefix: {config.get_action_prefix()}")
    print(f"🧭 Agent: {config.get_agent_id()} (DM scope: {config.get_dm_scope()})")
    print("")
    print("   Listening for:")
    print("   - Button clicks and select menus")
    print("   - Modal submissions")
    print("   - Modal closes")
    print("")
    print("   Press Ctrl+C to stop")

    handler = SocketModeHandler(app, app_token)
    try:
        handler.start()
    except KeyboardInterrupt:
        print("\n👋 Interaction listener stopped")
        sys.exit(0)


if __name__ == "__main__":
    main()
