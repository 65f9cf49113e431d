"""Routing of validated messages to per-kind handlers.

The :class:`Dispatcher` holds exactly one handler per kind. It does not
deduplicate: the message id is handed to every handler, which is free to
implement its own correlation or idempotence.

A :class:`Channel` represents a single logical connection. Frames put on a
channel are decoded, validated and dispatched strictly in arrival order by
one worker thread; independent channels run in parallel.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Callable, Dict, Iterable, Optional

from ..errors import DuplicateKind, NoHandler, RECOVERABLE, UnknownKind
from . import frame
from . import kind as kindmodule
from .message import Codec
from .validator import TypedMessage

logger = logging.getLogger(__name__)

Handler = Callable[[bytes, Any], Any]


class Dispatcher:
    """Invoke the handler registered for the kind of each message."""

    def __init__(self):
        self._handlers: Dict[bytes, Handler] = {}
        self._lock = threading.Lock()

    def on(self, kind, handler: Handler, replace: bool = False) -> None:
        """Register *handler* for *kind*.

        The handler is called as ``handler(id, payload)``. A second handler
        for the same kind raises DuplicateKind unless *replace* is True.
        """

        code = kindmodule.code(kind)

        with self._lock:
            if code in self._handlers and not replace:
                raise DuplicateKind(code, 'handler')

            handlers = dict(self._handlers)
            handlers[code] = handler
            self._handlers = handlers

    def remove(self, kind) -> None:
        code = kindmodule.code(kind)

        with self._lock:
            if code not in self._handlers:
                raise NoHandler(code)

            handlers = dict(self._handlers)
            del handlers[code]
            self._handlers = handlers

    def handles(self, kind) -> bool:
        return kindmodule.code(kind) in self._handlers

    def route(self, kind, id: bytes, message: TypedMessage) -> Any:
        """Invoke the handler for *kind* once and return its result.

        Raises NoHandler rather than dropping the message.
        """

        code = kindmodule.code(kind)

        try:
            handler = self._handlers[code]
        except KeyError:
            raise NoHandler(code)

        return handler(id, message.payload)

    def dispatch(self, message: TypedMessage) -> Any:
        return self.route(message.kind, message.id, message)


# Marks the end of the inbound queue for a Channel worker.
_closed = object()


class Channel:
    """Ordered inbound processing for one logical connection.

    Frames handed to :func:`put` are processed one at a time, in order, by a
    dedicated worker thread. Errors concerning a single message are logged
    and reported to *on_error* as ``on_error(error, data)``; processing then
    continues with the next frame. If *on_unknown* is given, frames of an
    unregistered kind are passed to it as a :class:`frame.Frame` instead of
    being reported as errors, so that they can be relayed unchanged.

    If *kinds* is given, frames of any other kind are counted in
    :attr:`ignored` and dropped after reading only their kind.
    """

    def __init__(
        self,
        codec: Codec,
        dispatcher: Dispatcher,
        on_error: Optional[Callable[[Exception, bytes], None]] = None,
        on_unknown: Optional[Callable[[frame.Frame], None]] = None,
        name: Optional[str] = None,
        kinds: Optional[Iterable] = None,
    ):
        self.codec = codec
        self.dispatcher = dispatcher
        self.on_error = on_error
        self.on_unknown = on_unknown
        self.name = name or f"channel.{id(self)}"

        if kinds is None:
            self.kinds = None
        else:
            self.kinds = frozenset(kindmodule.code(kind) for kind in kinds)

        self.processed = 0
        self.failed = 0
        self.ignored = 0

        self._inbox: queue.SimpleQueue = queue.SimpleQueue()
        self._closed = False
        self._lock = threading.Lock()
        self._thread = threading.Thread(target=self.run, name=self.name, daemon=True)
        self._thread.start()

    def put(self, data: bytes) -> None:
        """Queue the raw bytes of one frame for processing.

        Raises RuntimeError once the channel is closed; a frame accepted
        here is always processed before the worker stops.
        """

        with self._lock:
            if self._closed:
                raise RuntimeError(f"{self.name} is closed")

            self._inbox.put(data)

    def _split(self, data: bytes) -> Optional[frame.Frame]:
        # The kind is read first; frames of no interest are dropped before
        # the message id is looked at.

        kind, remainder = frame.split_kind(data)

        if kind not in self.kinds:
            self.ignored += 1
            logger.debug("%s: ignored frame of kind %s", self.name, kindmodule.format(kind))
            return None

        id, payload = frame.split_uuid(remainder)
        return frame.Frame(kind, id, payload)

    def process(self, data: bytes) -> Any:
        """Decode, validate and dispatch one frame on the calling thread.

        Returns the handler result, or None if the frame was rejected,
        ignored or relayed.
        """

        try:
            if self.kinds is None:
                decoded = frame.decode(data)
            else:
                decoded = self._split(data)
                if decoded is None:
                    return None

            try:
                message = self.codec.validate(decoded)
            except UnknownKind:
                if self.on_unknown is None:
                    raise
                self.on_unknown(decoded)
                return None

            result = self.dispatcher.dispatch(message)

        except RECOVERABLE as error:
            self.failed += 1
            logger.warning("%s: rejected frame: %s", self.name, error)
            self._report(error, data)
            return None

        except Exception as error:
            self.failed += 1
            logger.exception("%s: handler failed", self.name)
            self._report(error, data)
            return None

        self.processed += 1
        return result

    def _report(self, error: Exception, data: bytes) -> None:
        if self.on_error is None:
            return

        try:
            self.on_error(error, data)
        except Exception:
            logger.exception("%s: error callback failed", self.name)

    def run(self) -> None:
        while True:
            data = self._inbox.get()
            if data is _closed:
                break
            self.process(data)

    def close(self, timeout: Optional[float] = None) -> bool:
        """Stop accepting frames, finish the queued ones, stop the worker.

        Returns True if the worker exited within *timeout* seconds.
        """

        with self._lock:
            if not self._closed:
                self._closed = True
                self._inbox.put(_closed)

        if threading.current_thread() is not self._thread:
            self._thread.join(timeout)

        return not self._thread.is_alive()
