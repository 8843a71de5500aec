"""
Block rewriting for messages whose buttons have been clicked.

When a button in one of our messages is clicked, the row it lived in is
replaced with a context line confirming the choice. Messages often carry
"bulk" rows (approve all / deny all) below the per-item rows; once every
per-item row has been answered the bulk rows and the dividers above them are
removed so the message collapses to its confirmations.
"""

from typing import Any, Dict, List, Optional

BULK_ACTION_MARKER = "_all_"


def is_bulk_actions_block(block: Any) -> bool:
    """True for an actions block whose every element's action_id contains _all_."""
    if not isinstance(block, dict) or block.get('type') != 'actions':
        return False
    elements = block.get('elements')
    if not isinstance(elements, list) or not elements:
        return False
    return all(
        isinstance(element, dict)
        and isinstance(element.get('action_id'), str)
        and BULK_ACTION_MARKER in element['action_id']
        for element in elements
    )


def has_individual_action_rows(blocks: List[Any]) -> bool:
    return any(
        isinstance(block, dict) and block.get('type') == 'actions' and not is_bulk_actions_block(block)
        for block in blocks
    )


def build_confirmation_block(label: str) -> Dict[str, Any]:
    return {
        "type": "context",
        "elements": [{"type": "mrkdwn", "text": f":white_check_mark: *{label}* selected"}],
    }


def rewrite_blocks_for_button(blocks: List[Any], block_id: Optional[str], button_label: str) -> List[Any]:
    """
    Replace the clicked button's row with a confirmation and prune bulk rows.

    Args:
        blocks: Original message blocks (not modified)
        block_id: block_id of the row containing the clicked button
        button_label: Text shown in the confirmation line

    Returns:
        New block list to send with chat.update
    """
    updated = []
    for block in blocks:
        if isinstance(block, dict) and block.get('type') == 'actions' and block.get('block_id') == block_id:
            updated.append(build_confirmation_block(button_label))
        else:
            updated.append(block)

    if has_individual_action_rows(updated):
        return updated

    pruned = []
    for index, block in enumerate(updated):
        if is_bulk_actions_block(block):
            continue
        if isinstance(block, dict) and block.get('type') == 'divider':
            next_block = updated[index + 1] if index + 1 < len(updated) else None
            if next_block is not None and is_bulk_actions_block(next_block):
                continue
        pruned.append(block)
    return pruned
