"""One-shot user-facing messages carried across a single redirect.

Messages live in the session in two generations. Whatever the previous
request stored becomes the *current* generation the first time this request
touches the flash, and is removed from the session at that point. Messages
set during this request go to the *next* generation, which stays in the
session until the following request picks it up.
"""
from typing import Dict, Iterator, MutableMapping, Optional, Tuple

from fastapi import Request

SESSION_KEY = "_flash"

NOTICE = "notice"
SUCCESS = "success"
ERROR = "error"


class Flash:
    def __init__(self, session: MutableMapping) -> None:
        self._session = session
        self._current: Dict[str, str] = dict(session.pop(SESSION_KEY, None) or {})

    def set(self, key: str, message: str) -> None:
        """Store ``message`` for the next response only."""
        pending = dict(self._session.get(SESSION_KEY) or {})
        pending[key] = message
        self._session[SESSION_KEY] = pending

    def now(self, key: str, message: str) -> None:
        """Store ``message`` for the response being built right now."""
        self._current[key] = message

    def get(self, key: str) -> Optional[str]:
        return self._current.get(key)

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(list(self._current.items()))

    def pending(self) -> Dict[str, str]:
        return dict(self._session.get(SESSION_KEY) or {})

    def __bool__(self) -> bool:
        return bool(self._current)


def get_flash(request: Request) -> Flash:
    flash = getattr(request.state, "flash", None)
    if flash is None:
        flash = Flash(request.session)
        request.state.flash = flash
    return flash
