"""Session tagging for log output of one "new booking" dialog.

Every log line emitted while a :class:`BookingCreationFlow` method runs
carries that dialog's ``NB-xxxxxxxx`` id, including lines logged by the
slot fetcher, the slot sources and the submitters it awaits. Outside a
dialog the id is ``-``.

``load_config`` puts ``%(session_id)s`` in the log format and installs
:class:`SessionIdFilter` on the root handlers, so the id is filled in
for records from every module.
"""

import asyncio
import functools
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterable, Iterator

NO_SESSION = "-"

_session_id: ContextVar[str] = ContextVar("session_id", default=NO_SESSION)


@contextmanager
def session_scope(session_id: str) -> Iterator[None]:
    """Tag log records with ``session_id`` until the block exits."""
    token = _session_id.set(session_id)
    try:
        yield
    finally:
        _session_id.reset(token)


def bind_session(method):
    """Run a flow method inside ``session_scope(self.session_id)``."""
    if asyncio.iscoroutinefunction(method):
        @functools.wraps(method)
        async def async_wrapper(self, *args, **kwargs):
            with session_scope(self.session_id):
                return await method(self, *args, **kwargs)
        return async_wrapper

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with session_scope(self.session_id):
            return method(self, *args, **kwargs)
    return wrapper


class SessionIdFilter(logging.Filter):
    """Sets ``record.session_id`` unless the caller passed one in ``extra``."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "session_id"):
            record.session_id = _session_id.get()  # type: ignore[attr-defined]
        return True


def install_session_filter(handlers: Iterable[logging.Handler]) -> None:
    for handler in handlers:
        if not any(isinstance(f, SessionIdFilter) for f in handler.filters):
            handler.addFilter(SessionIdFilter())
