""" Byte-exact encoding and decoding of a single frame. This is the only
    module aware of the on-the-wire layout::

        offset 0,  length 4  : kind
        offset 4,  length 16 : message id
        offset 20, length N  : payload (N = remaining bytes)

    There is no length prefix; the transport is responsible for delivering
    exactly one frame per :func:`decode` call. The payload is never
    inspected here, which allows a router to relay frames of a kind it
    does not understand.
"""

import collections
import uuid

from ..errors import FrameTooShort, InvalidKindLength, InvalidUuidLength

kind_length = 4
uuid_length = 16
header_length = kind_length + uuid_length


class Frame(collections.namedtuple('Frame', ('kind', 'uuid', 'payload'))):
    """ A decoded frame. Being a tuple, a :class:`Frame` compares equal to
        the plain ``(kind, uuid, payload)`` triple it was built from.
    """

    __slots__ = ()

    def encode(self):
        """ Return the bytes for this frame, unchanged.
        """

        return encode(self.kind, self.uuid, self.payload)


# end of class Frame



def _as_bytes(value, what):

    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)

    raise TypeError('%s must be bytes, not %s' % (what, type(value).__name__))



def encode(kind, id, payload=b''):
    """ Concatenate the *kind*, the message *id*, and the *payload*, in
        that order, and return the resulting bytes. The *id* may be a
        :class:`uuid.UUID` instance. Any payload length is acceptable,
        including zero.
    """

    kind = _as_bytes(kind, 'kind')

    if len(kind) != kind_length:
        raise InvalidKindLength('kind must be %d bytes, got %d' % (kind_length, len(kind)))

    if isinstance(id, uuid.UUID):
        id = id.bytes
    else:
        id = _as_bytes(id, 'message id')

    if len(id) != uuid_length:
        raise InvalidUuidLength('message id must be %d bytes, got %d' % (uuid_length, len(id)), kind)

    if payload is None:
        payload = b''
    else:
        payload = _as_bytes(payload, 'payload')

    return kind + id + payload



def decode(data):
    """ Slice *data* into a :class:`Frame`. A FrameTooShort exception is
        raised if *data* cannot hold a complete header; otherwise decoding
        always succeeds.
    """

    data = _as_bytes(data, 'frame')

    if len(data) < header_length:
        raise FrameTooShort('frame must be at least %d bytes, got %d' % (header_length, len(data)))

    kind = data[:kind_length]
    id = data[kind_length:header_length]
    payload = data[header_length:]

    return Frame(kind, id, payload)



def split_kind(data):
    """ Decode only the kind from the front of *data*, returning a
        ``(kind, remainder)`` tuple. This allows a receiver to discard
        frames it is not interested in before looking at the message
        id. The same FrameTooShort condition applies as for :func:`decode`.
    """

    data = _as_bytes(data, 'frame')

    if len(data) < header_length:
        raise FrameTooShort('frame must be at least %d bytes, got %d' % (header_length, len(data)))

    return data[:kind_length], data[kind_length:]



def split_uuid(remainder):
    """ Decode the message id from the *remainder* returned by
        :func:`split_kind`, returning a ``(id, payload)`` tuple.
    """

    remainder = _as_bytes(remainder, 'frame')

    if len(remainder) < uuid_length:
        raise FrameTooShort('frame remainder must be at least %d bytes, got %d' % (uuid_length, len(remainder)))

    return remainder[:uuid_length], remainder[uuid_length:]


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
