""" Bookkeeping for requests awaiting a response. Each request is tracked
    by its message id until the matching response arrives; requests that
    go unanswered for longer than the resend interval are handed back to
    the sender so that it can put them on the wire again.
"""

import threading
import time


class Pending:
    """ A single outstanding request. The *request* is the payload that was
        sent, and *expected* is whatever the sender wants to check the
        eventual response against.

        :ivar attempts: How many times the request has been sent.
        :ivar last_attempt: The monotonic time of the most recent send.
        :ivar response: The response payload, once received.
    """

    def __init__(self, request, expected=None, now=None):

        if now is None:
            now = time.monotonic()

        self.request = request
        self.expected = expected
        self.attempts = 1
        self.last_attempt = now
        self.response = None

        self.event = threading.Event()


    def __repr__(self):
        return 'Pending(%r, attempts=%d)' % (self.request, self.attempts)


    def _complete(self, response):
        """ Locally store the response and signal any callers blocking via
            :func:`wait` to proceed.
        """

        self.response = response
        self.event.set()


    def poll(self):
        """ Return True if the request is complete, otherwise return False.
        """

        return self.event.is_set()


    def wait(self, timeout=None):
        """ Block until the request has been answered. The response is always
            returned; it will be None if the request is still pending after
            *timeout* seconds.
        """

        self.event.wait(timeout)
        return self.response


# end of class Pending



class Tracker:
    """ Thread-safe storage of :class:`Pending` requests, keyed by message
        id. A request becomes due for resending once *resend_interval*
        seconds have passed since it was last sent.
    """

    def __init__(self, resend_interval=5):

        self.resend_interval = float(resend_interval)
        self._pending = dict()
        self._lock = threading.Lock()


    def __contains__(self, id):
        with self._lock:
            return bytes(id) in self._pending


    def __len__(self):
        with self._lock:
            return len(self._pending)


    def add(self, id, request, expected=None, now=None):
        """ Start tracking *request*, sent with message *id*. Returns the
            new :class:`Pending` instance.
        """

        pending = Pending(request, expected, now)

        with self._lock:
            self._pending[bytes(id)] = pending

        return pending


    def get(self, id):
        with self._lock:
            return self._pending.get(bytes(id))


    def complete(self, id, response=None):
        """ Stop tracking the request with message *id*, and wake up anyone
            waiting on it. Returns the :class:`Pending` instance, or None if
            no request with that id was outstanding.
        """

        with self._lock:
            pending = self._pending.pop(bytes(id), None)

        if pending is not None:
            pending._complete(response)

        return pending


    def due(self, now=None, limit=None):
        """ Return a list of ``(id, pending)`` tuples, in the order the
            requests were added, for up to *limit* requests not sent within
            the resend interval. The requests are not modified; call
            :func:`resent` once a request has actually been put on the wire
            again.
        """

        if now is None:
            now = time.monotonic()

        due = list()

        with self._lock:
            for id, pending in self._pending.items():
                if limit is not None and len(due) >= limit:
                    break
                if now - pending.last_attempt > self.resend_interval:
                    due.append((id, pending))

        return due


    def resent(self, id, now=None):
        """ Record another send of the request with message *id*. Returns the
            :class:`Pending` instance, or None if the request is no longer
            outstanding.
        """

        if now is None:
            now = time.monotonic()

        with self._lock:
            pending = self._pending.get(bytes(id))

            if pending is not None:
                pending.last_attempt = now
                pending.attempts += 1

        return pending


# end of class Tracker


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
