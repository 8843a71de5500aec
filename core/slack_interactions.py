"""
Slack Interactions - Forwards Block Kit interactions to the agent as system events

Registers three Bolt listeners, each scoped to action_ids / callback_ids that
start with our prefix (default "openclaw:") so other integrations in the same
workspace are left alone:

1. Block actions (button clicks, selects, pickers on a posted message)
2. View submissions (modal "Submit")
3. View closed (modal "Cancel" / X, when the app exposes view_closed)

Every listener:
    1. Acknowledges immediately (Slack shows a warning icon after 3 seconds)
    2. Flattens the payload into one summary shape
    3. Resolves the session key the event belongs to
    4. Enqueues "Slack interaction: <json>" for that session

Button clicks additionally rewrite the original message so the clicked row
shows a confirmation. If chat.update fails an ephemeral message is sent to
the clicker instead; if that fails too the click is still delivered to the
agent, only the visual confirmation is lost.

Usage:
    from slack_interactions import register_slack_interaction_events
    from session_keys import SlackSessionKeyResolver

    register_slack_interaction_events(app, resolve_session_key=SlackSessionKeyResolver())
"""

import json
import re
import sys
import traceback
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from slack_sdk.errors import SlackApiError

import config
from block_rewriter import rewrite_blocks_for_button
from interaction_summary import ActionKind, summarize_action, summarize_view_state
from modal_routing import resolve_modal_session_routing
from system_events import enqueue_system_event

EVENT_TEXT_PREFIX = "Slack interaction: "


class UiUpdateOutcome(Enum):
    """What happened when confirming a button click in the UI"""
    UPDATED = "updated"                        # chat.update succeeded
    EPHEMERAL_FALLBACK = "ephemeral_fallback"  # chat.update failed, ephemeral reply sent
    FAILED = "failed"                          # neither worked


def _print_log(message: str) -> None:
    print(message, file=sys.stderr)


def _emit_log(log: Callable[[str], None], message: str) -> None:
    """Best-effort diagnostic; a broken log sink must not break the handler."""
    try:
        log(message)
    except Exception as e:
        print(f"⚠️  Interaction log sink failed: {e}", file=sys.stderr)


def _get_id(container: Any, key: str) -> Optional[str]:
    """body[key]["id"] when both levels are dicts, else None."""
    if not isinstance(container, dict):
        return None
    value = container.get(key)
    if not isinstance(value, dict):
        return None
    return value.get('id')


def _or_unknown(value: Any) -> Any:
    """Default only absent values; an empty string is passed through."""
    return "unknown" if value is None else value


def _join_context_key(*parts: Any) -> str:
    return ":".join(str(part) for part in parts if part)


def _without_none(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


def format_event_text(payload: Dict[str, Any]) -> str:
    return EVENT_TEXT_PREFIX + json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def _describe_error(error: Exception) -> str:
    if isinstance(error, SlackApiError):
        response = error.response
        code = response.get('error') if hasattr(response, 'get') else None
        if code:
            return f"Slack API error: {code}"
    return str(error)


def _enqueue(enqueue_event, log, text: str, session_key: str, context_key: Optional[str]) -> None:
    """Fire-and-forget; queue failures are logged, never raised."""
    try:
        enqueue_event(text, session_key=session_key, context_key=context_key)
    except Exception as e:
        _emit_log(log, f"⚠️  Could not enqueue interaction event for {session_key}: {e}")


def apply_button_confirmation(
    client,
    respond,
    *,
    channel_id: str,
    message_ts: str,
    message_text: str,
    blocks: List[Any],
    block_id: Optional[str],
    button_label: str,
    action_id: str,
    log: Callable[[str], None] = _print_log,
) -> UiUpdateOutcome:
    """
    Rewrite a message after one of its buttons was clicked.

    Tries chat.update with the rewritten blocks; on failure falls back to an
    ephemeral reply to the clicker. Never raises.

    Args:
        client: Slack WebClient
        respond: Bolt respond() for the interaction, or None
        channel_id: Channel of the original message
        message_ts: ts of the original message
        message_text: Original fallback text (kept as-is)
        blocks: Original message blocks
        block_id: block_id of the clicked button's row
        button_label: Text for the confirmation line
        action_id: Clicked action_id (used in the ephemeral fallback)
        log: Diagnostic sink

    Returns:
        UiUpdateOutcome describing which step succeeded
    """
    updated_blocks = rewrite_blocks_for_button(blocks, block_id, button_label)

    try:
        client.chat_update(
            channel=channel_id,
            ts=message_ts,
            text=message_text,
            blocks=updated_blocks,
        )
        return UiUpdateOutcome.UPDATED
    except Exception as e:
        _emit_log(log, f"⚠️  Could not update interaction message {channel_id}/{message_ts}: {_describe_error(e)}")

    if respond is None:
        return UiUpdateOutcome.FAILED

    try:
        respond(text=f'Button "{action_id}" clicked!', response_type="ephemeral")
        return UiUpdateOutcome.EPHEMERAL_FALLBACK
    except Exception as e:
        # Click was already acked and enqueued; only the confirmation is lost
        _emit_log(log, f"⚠️  Could not send ephemeral confirmation either: {_describe_error(e)}")
        return UiUpdateOutcome.FAILED


def register_slack_interaction_events(
    app,
    resolve_session_key: Callable[..., str],
    enqueue_event: Callable[..., Any] = enqueue_system_event,
    action_prefix: Optional[str] = None,
    log: Optional[Callable[[str], None]] = None,
) -> List[str]:
    """
    Register the interaction listeners on a Bolt app.

    Slots the app does not provide (e.g. no view_closed) are skipped.

    Args:
        app: slack_bolt.App (or anything with action/view/view_closed decorators)
        resolve_session_key: resolver(channel_id=None, channel_type=None) -> session key
        enqueue_event: enqueue(text, session_key=..., context_key=...)
        action_prefix: action_id / callback_id prefix (default: config.get_action_prefix())
        log: Diagnostic sink (default: print to stderr)

    Returns:
        Names of the registered slots ("action", "view", "view_closed")
    """
    prefix = action_prefix if action_prefix is not None else config.get_action_prefix()
    pattern = re.compile("^" + re.escape(prefix))
    log = log or _print_log
    registered = []

    def handle_block_action(ack, body, action, client, respond=None):
        # Acknowledge immediately (Slack requires response within 3 seconds)
        ack()

        try:
            body = body if isinstance(body, dict) else {}
            action = action if isinstance(action, dict) else {}
            message = body.get('message') if isinstance(body.get('message'), dict) else {}

            action_id = _or_unknown(action.get('action_id'))
            block_id = action.get('block_id')
            user_id = _or_unknown(_get_id(body, 'user'))
            channel_id = _get_id(body, 'channel')
            message_ts = message.get('ts')

            summary = summarize_action(action)
            payload = _without_none({
                'interactionType': 'block_action',
                'actionId': action_id,
                'blockId': block_id,
                **summary.to_payload(),
                'userId': user_id,
                'channelId': channel_id,
                'messageTs': message_ts,
            })

            _emit_log(
                log,
                f"🔘 slack:interaction action={action_id} type={summary.action_type or 'unknown'} "
                f"user={user_id} channel={channel_id}",
            )

            # Raw channel id (None, not "unknown") so the resolver can fall back to main
            session_key = resolve_session_key(channel_id=channel_id, channel_type="channel")
            context_key = _join_context_key("slack:interaction", channel_id, message_ts, action_id)
            _enqueue(enqueue_event, log, format_event_text(payload), session_key, context_key)

            original_blocks = message.get('blocks')
            if not isinstance(original_blocks, list) or not channel_id or not message_ts:
                return
            if summary.kind is not ActionKind.BUTTON:
                return

            button_text = action.get('text')
            button_label = button_text.get('text') if isinstance(button_text, dict) else None

            apply_button_confirmation(
                client,
                respond,
                channel_id=channel_id,
                message_ts=message_ts,
                message_text=message.get('text') or "",
                blocks=original_blocks,
                block_id=block_id,
                button_label=button_label or action_id,
                action_id=action_id,
                log=log,
            )

        except Exception as e:
            print(f"❌ Error handling interaction action: {e}", file=sys.stderr)
            traceback.print_exc(file=sys.stderr)

    def _handle_view_event(body, interaction_type: str, context_prefix: str) -> None:
        body = body if isinstance(body, dict) else {}
        view = body.get('view') if isinstance(body.get('view'), dict) else {}
        state = view.get('state') if isinstance(view.get('state'), dict) else {}

        callback_id = _or_unknown(view.get('callback_id'))
        user_id = _or_unknown(_get_id(body, 'user'))
        view_id = view.get('id')
        private_metadata = view.get('private_metadata')
        inputs = summarize_view_state(state.get('values'))
        routing = resolve_modal_session_routing(resolve_session_key, private_metadata)

        payload = {
            'interactionType': interaction_type,
            'actionId': f"view:{callback_id}",
            'callbackId': callback_id,
            'viewId': view_id,
            'userId': user_id,
            'teamId': _get_id(body, 'team'),
        }
        if interaction_type == 'view_closed':
            is_cleared = body.get('is_cleared') is True
            payload['isCleared'] = is_cleared
            _emit_log(
                log,
                f"🚪 slack:interaction view_closed callback={callback_id} user={user_id} "
                f"cleared={str(is_cleared).lower()}",
            )
        else:
            _emit_log(
                log,
                f"📝 slack:interaction view_submission callback={callback_id} user={user_id} "
                f"inputs={len(inputs)}",
            )
        payload.update({
            'privateMetadata': private_metadata,
            'routedChannelId': routing.channel_id,
            'routedChannelType': routing.channel_type,
            'inputs': [entry.to_payload() for entry in inputs],
        })

        context_key = _join_context_key(context_prefix, callback_id, view_id, user_id)
        _enqueue(enqueue_event, log, format_event_text(_without_none(payload)), routing.session_key, context_key)

    def handle_view_submission(ack, body):
        ack()
        try:
            _handle_view_event(body, 'view_submission', "slack:interaction:view")
        except Exception as e:
            print(f"❌ Error handling view submission: {e}", file=sys.stderr)
            traceback.print_exc(file=sys.stderr)

    def handle_view_closed(ack, body):
        ack()
        try:
            _handle_view_event(body, 'view_closed', "slack:interaction:view-closed")
        except Exception as e:
            print(f"❌ Error handling view closed: {e}", file=sys.stderr)
            traceback.print_exc(file=sys.stderr)

    if not callable(getattr(app, 'action', None)):
        return registered
    app.action(pattern)(handle_block_action)
    registered.append('action')

    if not callable(getattr(app, 'view', None)):
        return registered
    app.view(pattern)(handle_view_submission)
    registered.append('view')

    if not callable(getattr(app, 'view_closed', None)):
        return registered
    app.view_closed(pattern)(handle_view_closed)
    registered.append('view_closed')

    return registered
