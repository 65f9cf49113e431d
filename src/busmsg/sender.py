""" A bus service that issues value multiplication requests and checks the
    responses. Requests are sent in groups through a DEALER socket connected
    to the bus router; responses arrive through SUB sockets connected to the
    bus publishers. Every request is tracked by its message id, and any
    request left unanswered for longer than the resend interval is sent
    again, with the same id, ahead of new requests.
"""

import argparse
import collections
import logging
import random
import sys
import time

from . import config
from . import identifier
from .correlate import Tracker
from .errors import ProtocolError
from .protocol import catalog
from .protocol.dispatch import Channel, Dispatcher
from .protocol.message import Codec
from .protocol.registry import Registry
from .transport import TransportError
from .transport import zeromq

logger = logging.getLogger(__name__)


class Sender:
    """ Send :class:`catalog.ValueMultiplicationRequest` messages through
        the *outbound* transport, tracking each one in *tracker*. Responses
        are expected to be routed to :func:`handle_response`. The *rng* is
        the source of the random operands.
    """

    def __init__(self, codec, outbound, tracker, group_size=1000, rng=None):

        if rng is None:
            rng = random.Random()

        self.codec = codec
        self.outbound = outbound
        self.tracker = tracker
        self.group_size = int(group_size)
        self.rng = rng

        self.sent = 0
        self.received = 0
        self.mismatched = 0
        self.last_resend_check = time.monotonic()
        self.backlog = False


    def handle_response(self, id, response):
        """ Dispatcher handler for :class:`catalog.ValueMultiplicationResponse`
            messages. A response for an unknown id, or one with the wrong
            result, is logged as an error; either way, the request is no
            longer outstanding.
        """

        pending = self.tracker.get(id)

        if pending is None:
            logger.error('received message with unexpected id: %s', identifier.format(id))
            return

        if pending.expected != response.result:
            self.mismatched += 1
            logger.error('received message with unexpected payload: %d != %d', response.result, pending.expected)
        else:
            self.received += 1

        self.tracker.complete(id, response)
        logger.debug('request %s completed', identifier.format(id))

        if self.received and self.received % self.group_size == 0:
            logger.info('total received %d messages', self.received)


    def step(self, limit=None, now=None):
        """ Send one group of requests: any requests due for resending
            first, then new ones, up to the group size or *limit*,
            whichever is smaller. Returns the number of messages sent.
        """

        if now is None:
            now = time.monotonic()

        size = self.group_size
        if limit is not None:
            size = min(size, limit)

        resend = collections.deque()

        # Overdue requests beyond one group stay overdue in the tracker; the
        # next step looks for them again without waiting another interval.

        overdue = now - self.last_resend_check > self.tracker.resend_interval

        if size > 0 and (self.backlog or overdue):
            self.last_resend_check = now
            resend.extend(self.tracker.due(now, size))
            self.backlog = len(resend) == size
            logger.debug('resend %d requests', len(resend))

        sent = 0

        while sent < size:
            if resend:
                id, pending = resend.popleft()
                request = pending.request
                is_resend = True
            else:
                value = self.rng.randrange(256)
                multiplier = self.rng.randrange(256)
                request = catalog.ValueMultiplicationRequest(value=value, multiplier=multiplier)
                id = self.codec.identifiers.generate()
                is_resend = False

            try:
                data = self.codec.encode(request, id=id)
            except ProtocolError as e:
                logger.error('failed to encode message: %s', e)
                self.backlog = self.backlog or is_resend or bool(resend)
                break

            try:
                self.outbound.send(data)
            except TransportError as e:
                logger.error('failed to send message: %s', e)
                self.backlog = self.backlog or is_resend or bool(resend)
                break

            logger.debug('> %r', data)
            sent += 1

            if is_resend:
                self.tracker.resent(id, now)
            else:
                expected = request.value * request.multiplier
                self.tracker.add(id, request, expected, now)

        self.sent += sent

        if sent and self.sent % self.group_size == 0:
            logger.info('total sent %d messages', self.sent)

        return sent


    def run(self, count=None):
        """ Send requests until *count* have been sent, or forever if
            *count* is None.
        """

        while count is None or self.sent < count:
            if count is None:
                limit = None
            else:
                limit = count - self.sent

            if self.step(limit) == 0:
                # Nothing could be sent; back off before trying again.
                time.sleep(0.1)


    def drain(self, timeout):
        """ Wait up to *timeout* seconds for every outstanding request to be
            answered, resending as needed. Returns True if none remain.
        """

        deadline = time.monotonic() + timeout

        while len(self.tracker) > 0 and time.monotonic() < deadline:
            for id, pending in self.tracker.due():
                try:
                    self.outbound.send(self.codec.encode(pending.request, id=id))
                except (ProtocolError, TransportError) as e:
                    logger.error('failed to resend message: %s', e)
                else:
                    self.tracker.resent(id)
            time.sleep(0.05)

        return len(self.tracker) == 0


# end of class Sender



def build(settings, outbound, inbound=None, rng=None):
    """ Assemble a :class:`Sender` from *settings*. If an *inbound*
        transport is given, responses received on it are routed to the
        sender; the inbound :class:`Channel` is returned alongside.
    """

    outbound_registry = Registry()
    catalog.register(outbound_registry)

    identifiers = identifier.Provider(strict=settings.strict_ids)
    codec = Codec(outbound_registry, identifiers)
    tracker = Tracker(settings.resend_interval)
    sender = Sender(codec, outbound, tracker, settings.group_size, rng)

    if inbound is None:
        return sender, None

    # Only responses are of interest on the receiving side; every other
    # kind published on the bus is ignored.

    inbound_registry = Registry()
    inbound_registry.register(catalog.VALUE_MULTIPLICATION_RESPONSE, catalog.ValueMultiplicationResponse, 'ValueMultiplicationResponse')

    dispatcher = Dispatcher()
    dispatcher.on(catalog.VALUE_MULTIPLICATION_RESPONSE, sender.handle_response)

    inbound_codec = Codec(inbound_registry, identifiers)
    kinds = (catalog.VALUE_MULTIPLICATION_RESPONSE,)
    channel = Channel(inbound_codec, dispatcher, name='sender.receiver', kinds=kinds)
    zeromq.pump(inbound, channel)

    return sender, channel



def arguments(argv=None):

    settings = config.settings()

    parser = argparse.ArgumentParser(description='Send value multiplication requests over the message bus.')
    parser.add_argument('--router', default=settings.router, help='bus router address for outgoing requests (default: %(default)s)')
    parser.add_argument('--publisher', action='append', dest='publishers', help='bus publisher address for incoming responses; may be repeated')
    parser.add_argument('--count', type=int, default=None, help='stop after sending this many requests (default: run forever)')
    parser.add_argument('--group-size', type=int, default=settings.group_size, help='requests per send group (default: %(default)s)')
    parser.add_argument('--resend-interval', type=float, default=settings.resend_interval, help='seconds before an unanswered request is resent (default: %(default)s)')
    parser.add_argument('--log-level', default=None, help='logging level (default: %s)' % (settings.log_level))

    parsed = parser.parse_args(argv)

    if not parsed.publishers:
        parsed.publishers = list(settings.publishers)

    return parsed



def main(argv=None):

    parsed = arguments(argv)
    config.configure_logging(parsed.log_level)

    defaults = config.settings()
    settings = config.Settings(
        router=parsed.router,
        publishers=parsed.publishers,
        log_level=logging.getLevelName(logging.getLogger().getEffectiveLevel()),
        group_size=parsed.group_size,
        resend_interval=parsed.resend_interval,
        strict_ids=defaults.strict_ids,
    )

    try:
        outbound = zeromq.dealer(settings.router)
        inbound = zeromq.subscriber(settings.publishers)
    except TransportError as e:
        logger.error('%s', e)
        return 1

    logger.debug('sender connected to %s, receiving from %s', settings.router, ', '.join(settings.publishers))

    sender, channel = build(settings, outbound, inbound)

    try:
        sender.run(parsed.count)
        if parsed.count is not None:
            sender.drain(settings.resend_interval * 3)
    except KeyboardInterrupt:
        pass
    finally:
        inbound.close()
        outbound.close()
        channel.close(1)

    logger.info('sent %d, received %d, mismatched %d, outstanding %d', sender.sent, sender.received, sender.mismatched, len(sender.tracker))
    return 0


if __name__ == '__main__':
    sys.exit(main())


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
