""" Kind codes identify the schema of a payload and where it gets routed.
    On the wire a kind is always four opaque bytes; for convenience the
    registry and dispatcher also accept an unsigned 32-bit integer, or a
    four character ASCII string, and normalize it with :func:`code`.
"""

from ..errors import InvalidKindLength

length = 4
maximum = 0xFFFFFFFF


def code(value):
    """ Return the 4-byte kind code corresponding to *value*. Integers are
        packed big-endian; strings must be ASCII. An InvalidKindLength
        exception is raised if the result would not be exactly four bytes,
        a TypeError if *value* is not a recognized type.
    """

    if isinstance(value, bool):
        raise TypeError('kind code cannot be a boolean')

    if isinstance(value, int):
        if value < 0 or value > maximum:
            raise InvalidKindLength('kind code out of 32-bit range: ' + str(value))
        return value.to_bytes(length, 'big')

    if isinstance(value, str):
        value = value.encode('ascii')

    if isinstance(value, (bytes, bytearray, memoryview)):
        value = bytes(value)
    else:
        raise TypeError('kind code must be bytes, int, or str, not ' + type(value).__name__)

    if len(value) != length:
        raise InvalidKindLength('kind code must be %d bytes, got %d' % (length, len(value)))

    return value



def format(value):
    """ Return a display string for a kind code, such as ``0x00000001``.
    """

    return '0x%08x' % (int.from_bytes(code(value), 'big'))



class Kind:
    """ A registered kind: the 4-byte *code*, a display *name*, and the
        *decoder* used to turn raw payload bytes into a typed payload. The
        *type*, if known, is the Python type produced by the decoder; it
        enables the reverse lookup from payload to kind. If *nil_id* is
        True the all-zero message id is acceptable for this kind, meaning
        no correlation is expected.
    """

    __slots__ = ('code', 'name', 'decoder', 'type', 'nil_id')

    def __init__(self, code, name, decoder, type=None, nil_id=False):
        self.code = code
        self.name = name
        self.decoder = decoder
        self.type = type
        self.nil_id = nil_id


    def __repr__(self):
        return 'Kind(%s, %r)' % (format(self.code), self.name)


# end of class Kind


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
