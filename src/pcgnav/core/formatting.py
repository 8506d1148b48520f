"""One-line renderings of actions for navigator lists and inline CFG tables."""

import json
from typing import Any, Optional

from .types import ActionKind, PcgAction

CAPABILITY_LETTERS = {
    "Read": "R",
    "Write": "W",
    "Exclusive": "E",
    "ShallowExclusive": "e",
    "None": "⦰",
}

_PASSTHROUGH_KINDS = frozenset({
    "AddEdge", "RemoveEdge", "Restore", "LabelPlace", "LabelLifetimeProjection",
})


def capability_letter(capability: str) -> str:
    return CAPABILITY_LETTERS.get(capability, capability)


def _as_text(data: Any) -> str:
    return data if isinstance(data, str) else json.dumps(data)


def action_line(kind: ActionKind) -> str:
    """Render an action kind the way the navigator lists it."""
    data = kind.data
    if kind.type == "Expand":
        return f"Unpack {data['from']}"
    if kind.type == "Collapse":
        return f"Pack {data['to']}"
    if kind.type == "Weaken":
        if isinstance(data, str):
            return data
        to: Optional[str] = data.get("to")
        target = capability_letter(to) if to else "None"
        return f"{data['place']}: {capability_letter(data['from'])} -> {target}"
    if kind.type == "RegainLoanedCapability":
        return f"Restore capability {capability_letter(data['capability'])} to {data['place']}"
    if kind.type in _PASSTHROUGH_KINDS:
        return _as_text(data)
    return json.dumps(kind.model_dump())


def describe_action(action: PcgAction) -> str:
    """Action line, falling back to the change summary when one was recorded."""
    try:
        return action_line(action.data.kind)
    except (KeyError, TypeError, AttributeError):
        return action.change_summary or json.dumps(action.data.kind.model_dump())
