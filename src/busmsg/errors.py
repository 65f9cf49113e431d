""" Exceptions raised by the busmsg protocol layer. Every error is specific
    enough for a caller to tell transport corruption (a short frame) apart
    from payload problems (bad JSON, wrong shape) and from configuration
    mistakes (a kind registered twice).
"""


def _format_kind(kind):

    if kind is None:
        return '<none>'

    try:
        return '0x%08x' % (int.from_bytes(kind, 'big'))
    except TypeError:
        return repr(kind)



class ProtocolError(Exception):
    """ Base class for all protocol-layer errors. The *kind*, if known, is
        retained as the raw 4-byte code.
    """

    def __init__(self, message, kind=None):
        Exception.__init__(self, message)
        self.kind = kind



class FrameError(ProtocolError, ValueError):
    """ The byte layout of a frame is wrong. """


class InvalidKindLength(FrameError):
    """ A kind code handed to the encoder is not exactly four bytes. """


class InvalidUuidLength(FrameError):
    """ A message id handed to the encoder is not exactly sixteen bytes. """


class FrameTooShort(FrameError):
    """ The transport delivered fewer bytes than a frame header requires. """


class PayloadError(ProtocolError, ValueError):
    """ A payload could not be converted between JSON bytes and a typed
        message.
    """


class MalformedJson(PayloadError):
    """ The payload is not syntactically valid JSON. """


class SchemaMismatch(PayloadError):
    """ The payload is valid JSON, but not the shape the kind expects. """


class UnencodablePayload(PayloadError):
    """ The payload could not be serialized as JSON. """



class UnknownKind(ProtocolError, LookupError):
    """ No decoder is registered for the kind code. """

    def __init__(self, kind, message=None):
        if message is None:
            message = 'unknown message kind: ' + _format_kind(kind)
        ProtocolError.__init__(self, message, kind)



class NoHandler(ProtocolError, LookupError):
    """ No handler is registered with the dispatcher for the kind code. """

    def __init__(self, kind):
        message = 'no handler for message kind: ' + _format_kind(kind)
        ProtocolError.__init__(self, message, kind)



class DuplicateKind(ProtocolError):
    """ A kind code (or a handler for it) is already registered, or a
        payload type maps to more than one kind.
    """

    def __init__(self, kind, what='kind', message=None):
        if message is None:
            message = '%s already registered: %s' % (what, _format_kind(kind))
        ProtocolError.__init__(self, message, kind)



class InvalidMessageId(ProtocolError, ValueError):
    """ The message id of a decoded frame failed validation. """

    def __init__(self, id, kind=None):
        message = 'invalid message id %s for kind %s' % (bytes(id).hex(), _format_kind(kind))
        ProtocolError.__init__(self, message, kind)
        self.id = id



# These errors concern a single message; processing of subsequent frames on
# the same connection is expected to continue after any of them.

RECOVERABLE = (
    FrameTooShort,
    UnknownKind,
    MalformedJson,
    SchemaMismatch,
    InvalidMessageId,
    NoHandler,
)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
