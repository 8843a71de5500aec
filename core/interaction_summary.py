"""
Interaction summaries for Slack Block Kit elements.

Slack delivers a different shape for every interactive element: buttons carry
a `value`, static selects a `selected_option`, multi selects a
`selected_options` list, pickers a `selected_user` / `selected_channels` /
etc. This module flattens all of them into one InteractionSummary so the
agent sees a single shape regardless of which element was used.

Example:
    >>> summary = summarize_action({
    ...     "type": "static_select",
    ...     "selected_option": {"text": {"text": "Canary"}, "value": "canary"},
    ... })
    >>> summary.to_payload()
    {'actionType': 'static_select', 'selectedValues': ['canary']}
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ActionKind(Enum):
    """Element variants we know how to summarize"""
    BUTTON = "button"
    STATIC_SELECT = "static_select"
    MULTI_SELECT = "multi_select"
    USER_PICKER = "user_picker"
    CHANNEL_PICKER = "channel_picker"
    CONVERSATION_PICKER = "conversation_picker"
    DATE_TIME_PICKER = "date_time_picker"
    PLAIN_TEXT_INPUT = "plain_text_input"
    OTHER = "other"


# Slack element type -> variant
ACTION_KINDS = {
    'button': ActionKind.BUTTON,
    'static_select': ActionKind.STATIC_SELECT,
    'external_select': ActionKind.STATIC_SELECT,
    'overflow': ActionKind.STATIC_SELECT,
    'radio_buttons': ActionKind.STATIC_SELECT,
    'multi_static_select': ActionKind.MULTI_SELECT,
    'multi_external_select': ActionKind.MULTI_SELECT,
    'checkboxes': ActionKind.MULTI_SELECT,
    'users_select': ActionKind.USER_PICKER,
    'multi_users_select': ActionKind.USER_PICKER,
    'channels_select': ActionKind.CHANNEL_PICKER,
    'multi_channels_select': ActionKind.CHANNEL_PICKER,
    'conversations_select': ActionKind.CONVERSATION_PICKER,
    'multi_conversations_select': ActionKind.CONVERSATION_PICKER,
    'datepicker': ActionKind.DATE_TIME_PICKER,
    'timepicker': ActionKind.DATE_TIME_PICKER,
    'datetimepicker': ActionKind.DATE_TIME_PICKER,
    'plain_text_input': ActionKind.PLAIN_TEXT_INPUT,
    'email_text_input': ActionKind.PLAIN_TEXT_INPUT,
    'url_text_input': ActionKind.PLAIN_TEXT_INPUT,
    'number_input': ActionKind.PLAIN_TEXT_INPUT,
}


def classify_action_type(action_type: Any) -> ActionKind:
    """Map a Slack element `type` to its ActionKind (OTHER if unknown)."""
    if not isinstance(action_type, str):
        return ActionKind.OTHER
    return ACTION_KINDS.get(action_type, ActionKind.OTHER)


@dataclass
class InteractionSummary:
    """Flattened view of one interactive element's state."""
    action_type: Optional[str] = None
    value: Optional[str] = None
    selected_values: Optional[List[str]] = None
    selected_labels: Optional[List[str]] = None
    selected_date: Optional[str] = None
    selected_time: Optional[str] = None
    selected_date_time: Optional[float] = None
    input_value: Optional[str] = None
    kind: ActionKind = field(default=ActionKind.OTHER, compare=False)

    def to_payload(self) -> Dict[str, Any]:
        """camelCase dict for the system event; unset fields are left out."""
        payload = {
            'actionType': self.action_type,
            'value': self.value,
            'selectedValues': self.selected_values,
            'selectedLabels': self.selected_labels,
            'selectedDate': self.selected_date,
            'selectedTime': self.selected_time,
            'selectedDateTime': self.selected_date_time,
            'inputValue': self.input_value,
        }
        return {key: value for key, value in payload.items() if value is not None}


@dataclass
class ModalInputSummary:
    """One (block_id, action_id) entry from a submitted modal."""
    block_id: str
    action_id: str
    summary: InteractionSummary

    def to_payload(self) -> Dict[str, Any]:
        payload = {'blockId': self.block_id, 'actionId': self.action_id}
        payload.update(self.summary.to_payload())
        return payload


def _is_non_blank_string(value: Any) -> bool:
    return isinstance(value, str) and len(value.strip()) > 0


def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, list) else []


def _single(value: Any) -> List[Any]:
    return [value] if value else []


def read_option_values(options: Any) -> Optional[List[str]]:
    """Values of a `selected_options` list, or None if there are none."""
    if not isinstance(options, list):
        return None
    values = [
        option.get('value') if isinstance(option, dict) else None
        for option in options
    ]
    values = [value for value in values if _is_non_blank_string(value)]
    return values or None


def read_option_labels(options: Any) -> Optional[List[str]]:
    """Display text of a `selected_options` list, or None if there is none."""
    if not isinstance(options, list):
        return None
    labels = []
    for option in options:
        if not isinstance(option, dict):
            continue
        text = option.get('text')
        label = text.get('text') if isinstance(text, dict) else None
        if _is_non_blank_string(label):
            labels.append(label)
    return labels or None


def summarize_action(action: Any) -> InteractionSummary:
    """
    Flatten a raw Slack action (or modal state leaf) into an InteractionSummary.

    Selections from every picker variant end up in `selected_values`, in a
    fixed order: single option, multi options, user(s), channel(s),
    conversation(s). Labels are only read from multi-option selections.

    Args:
        action: Raw action dict from a block_actions body or view state

    Returns:
        InteractionSummary; missing or malformed fields are simply unset
    """
    if not isinstance(action, dict):
        return InteractionSummary()

    action_type = action.get('type') if isinstance(action.get('type'), str) else None

    selected_option = action.get('selected_option')
    single_option_value = selected_option.get('value') if isinstance(selected_option, dict) else None

    selected_values = [
        *_single(single_option_value),
        *(read_option_values(action.get('selected_options')) or []),
        *_single(action.get('selected_user')),
        *_as_list(action.get('selected_users')),
        *_single(action.get('selected_channel')),
        *_as_list(action.get('selected_channels')),
        *_single(action.get('selected_conversation')),
        *_as_list(action.get('selected_conversations')),
    ]
    selected_values = [entry for entry in selected_values if _is_non_blank_string(entry)]

    selected_date_time = action.get('selected_date_time')
    if isinstance(selected_date_time, bool) or not isinstance(selected_date_time, (int, float)):
        selected_date_time = None

    value = action.get('value') if isinstance(action.get('value'), str) else None

    return InteractionSummary(
        action_type=action_type,
        value=value,
        selected_values=selected_values or None,
        selected_labels=read_option_labels(action.get('selected_options')),
        selected_date=action.get('selected_date') if isinstance(action.get('selected_date'), str) else None,
        selected_time=action.get('selected_time') if isinstance(action.get('selected_time'), str) else None,
        selected_date_time=selected_date_time,
        input_value=value,
        kind=classify_action_type(action_type),
    )


def summarize_view_state(values: Any) -> List[ModalInputSummary]:
    """
    Flatten a modal's `view.state.values` into one entry per input.

    Args:
        values: Mapping of block_id -> action_id -> raw action state

    Returns:
        List of ModalInputSummary in the mapping's own order ([] for bad input)
    """
    if not isinstance(values, dict):
        return []

    entries = []
    for block_id, block_value in values.items():
        if not isinstance(block_value, dict):
            continue
        for action_id, raw_action in block_value.items():
            if not isinstance(raw_action, dict):
                continue
            entries.append(ModalInputSummary(
                block_id=block_id,
                action_id=action_id,
                summary=summarize_action(raw_action),
            ))
    return entries
