"""ZeroMQ transport for bus frames.

Each ZeroMQ message carries exactly one frame, which supplies the message
boundary the frame codec relies on. A ROUTER socket prepends identity
parts to everything it receives; those are stripped here, and the most
recent identity is remembered so that a reply can be routed back.
"""

from __future__ import annotations

import atexit
import logging
import threading
import time
from typing import Iterable, Optional, Sequence, Union

import zmq

from .base import Transport, TransportClosed, TransportError, TransportTimeout

logger = logging.getLogger(__name__)

zmq_context = zmq.Context()


class Socket(Transport):
    """A single ZeroMQ socket moving one frame per message.

    The socket connects to each of *addresses*, or binds to them if *bind*
    is True. SUB sockets subscribe to every frame; filtering by kind is
    left to the receiver.
    """

    poll_slice = 0.1

    def __init__(
        self,
        socket_type: int,
        addresses: Union[str, Iterable[str]],
        bind: bool = False,
        context: Optional[zmq.Context] = None,
    ):
        if isinstance(addresses, str):
            addresses = (addresses,)

        self.addresses = tuple(addresses)
        self.socket_type = socket_type
        self.context = context or zmq_context

        self.socket = self.context.socket(socket_type)
        self.socket.setsockopt(zmq.LINGER, 0)

        # The lock around the ZeroMQ socket is necessary in a multithreaded
        # application; sockets are not thread safe, and concurrent sends
        # from different threads can interleave message parts.

        self.socket_lock = threading.Lock()
        self.recv_lock = threading.Lock()
        self.last_identity: Optional[bytes] = None
        self._closed = False

        for address in self.addresses:
            try:
                if bind:
                    self.socket.bind(address)
                else:
                    self.socket.connect(address)
            except zmq.ZMQError as exc:
                self.socket.close()
                verb = "bind to" if bind else "connect to"
                raise TransportError(f"failed to {verb} {address}: {exc}") from exc

            logger.debug("%s %s %s", self._type_name(), "bound to" if bind else "connected to", address)

        if socket_type == zmq.SUB:
            self.socket.setsockopt(zmq.SUBSCRIBE, b"")

    def _type_name(self) -> str:
        try:
            return zmq.SocketType(self.socket_type).name
        except ValueError:
            return str(self.socket_type)

    @property
    def is_open(self) -> bool:
        return not self._closed

    def send(self, data: bytes, identity: Optional[bytes] = None) -> None:
        """Send one frame.

        On a ROUTER socket the frame goes to *identity*, or to the peer that
        sent the most recent frame if no identity is given.
        """

        if self._closed:
            raise TransportClosed("socket is closed")

        parts = [bytes(data)]

        if self.socket_type == zmq.ROUTER:
            if identity is None:
                identity = self.last_identity
            if identity is None:
                raise TransportError("ROUTER socket has no peer to reply to")
            parts.insert(0, identity)

        with self.socket_lock:
            self.socket.send_multipart(parts)

    def recv(self, timeout: Optional[float] = None) -> bytes:
        # Polling in short slices lets close() interrupt a blocking receive;
        # a socket must never be closed while another thread is using it.

        if timeout is None:
            deadline = None
        else:
            deadline = time.monotonic() + timeout

        with self.recv_lock:
            while True:
                if self._closed:
                    raise TransportClosed("socket is closed")

                if deadline is None:
                    wait = self.poll_slice
                else:
                    wait = min(self.poll_slice, max(deadline - time.monotonic(), 0))

                if self.socket.poll(int(wait * 1000), zmq.POLLIN):
                    break

                if deadline is not None and time.monotonic() >= deadline:
                    raise TransportTimeout(f"no frame received in {timeout:.2f} sec")

            parts: Sequence[bytes] = self.socket.recv_multipart()

        if self.socket_type == zmq.ROUTER and len(parts) > 1:
            self.last_identity = parts[-2]

        return parts[-1]

    def close(self) -> None:
        if self._closed:
            return

        self._closed = True
        with self.recv_lock, self.socket_lock:
            self.socket.close()


def dealer(address: str, **kwargs) -> Socket:
    return Socket(zmq.DEALER, address, **kwargs)


def router(address: str, bind: bool = True, **kwargs) -> Socket:
    return Socket(zmq.ROUTER, address, bind=bind, **kwargs)


def publisher(address: str, bind: bool = True, **kwargs) -> Socket:
    return Socket(zmq.PUB, address, bind=bind, **kwargs)


def subscriber(addresses: Union[str, Iterable[str]], **kwargs) -> Socket:
    return Socket(zmq.SUB, addresses, **kwargs)


def pump(transport: Transport, channel, poll_interval: float = 0.5) -> threading.Thread:
    """Feed every frame received on *transport* into *channel*.

    Runs on a daemon thread until the transport is closed; returns the
    thread.
    """

    def run() -> None:
        while transport.is_open:
            try:
                data = transport.recv(poll_interval)
            except TransportTimeout:
                continue
            except (TransportClosed, zmq.ZMQError):
                break

            logger.debug("< %r", data)
            channel.put(data)

        logger.debug("receiver loop finished")

    thread = threading.Thread(target=run, name="busmsg.pump", daemon=True)
    thread.start()
    return thread


def _cleanup() -> None:
    try:
        zmq_context.destroy(linger=0)
    except zmq.ZMQError:
        pass


atexit.register(_cleanup)
