"""
Key bindings shared by `navigate` and `explore`.

a / q     next / previous step (crossing into neighbouring statements)
j / k     next / previous statement
0-9       first statement of that block
"""

from typing import Optional

from ..core.navigation import Direction
from ..core.session import ExplorerSession, PointView

STEP_KEYS = {"a": Direction.FORWARD, "q": Direction.BACKWARD}
STATEMENT_KEYS = {"j": Direction.FORWARD, "k": Direction.BACKWARD}


def is_bound(key: str) -> bool:
    return key in STEP_KEYS or key in STATEMENT_KEYS or key.isdigit()


async def apply_key(session: ExplorerSession, key: str) -> Optional[PointView]:
    """Apply one key; unbound keys leave the selection unchanged."""
    if key in STEP_KEYS:
        return await session.step(STEP_KEYS[key])
    if key in STATEMENT_KEYS:
        return await session.move(STATEMENT_KEYS[key])
    if len(key) == 1 and key.isdigit():
        return await session.jump(int(key))
    return session.view
