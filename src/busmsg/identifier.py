""" Generation and validation of the 16-byte message identifiers carried in
    every frame. Identifiers follow the UUID version 4 layout: 122 random
    bits, plus the version and variant bits in their standard positions.

    The random source is explicit process-wide state. :func:`initialize`
    establishes it once at startup; components that need identifiers are
    handed a :class:`Provider` rather than reaching for the global, which
    keeps them testable with a deterministic seed.
"""

import random
import threading
import uuid

length = 16
nil = bytes(length)

_default = None
_default_lock = threading.Lock()


class Provider:
    """ Produce and check message identifiers. The *source* is any random
        generator exposing ``getrandbits()``; the default is a
        :class:`random.SystemRandom` instance. A seeded :class:`random.Random`
        yields a repeatable sequence of identifiers.

        If *strict* is True, :func:`validate` also checks the fixed
        version and variant bits.
    """

    def __init__(self, source=None, strict=True):

        if source is None:
            source = random.SystemRandom()

        self.source = source
        self.strict = strict

        # random.Random instances share internal state across calls; the
        # lock keeps concurrent generate() calls from interleaving.

        self.lock = threading.Lock()


    def generate(self):
        """ Return a fresh identifier as 16 raw bytes.
        """

        with self.lock:
            bits = self.source.getrandbits(128)

        return uuid.UUID(int=bits, version=4).bytes


    def validate(self, value, allow_nil=False, strict=None):
        """ Return True if *value* is acceptable as a message identifier,
            otherwise return False; this method does not raise on malformed
            input. The all-zero identifier is only acceptable if *allow_nil*
            is True. The *strict* argument overrides the instance default
            for version/variant checking.
        """

        if isinstance(value, uuid.UUID):
            value = value.bytes

        if not isinstance(value, (bytes, bytearray, memoryview)):
            return False

        value = bytes(value)

        if len(value) != length:
            return False

        if value == nil:
            return allow_nil

        if strict is None:
            strict = self.strict

        if strict:
            version = value[6] >> 4
            variant = value[8] & 0xC0

            if version != 4 or variant != 0x80:
                return False

        return True


# end of class Provider



def initialize(seed=None, strict=True):
    """ Establish the process-wide :class:`Provider`. If *seed* is not None
        the provider draws from a deterministic :class:`random.Random`
        seeded with it; this is only appropriate for testing. Returns the
        new provider.
    """

    global _default

    if seed is None:
        source = None
    else:
        source = random.Random(seed)

    with _default_lock:
        _default = Provider(source, strict)

    return _default



def provider():
    """ Return the process-wide :class:`Provider`, initializing it with
        default settings if :func:`initialize` has not been called.
    """

    global _default

    current = _default

    if current is None:
        with _default_lock:
            if _default is None:
                _default = Provider()
            current = _default

    return current



def generate():
    return provider().generate()


def validate(value, allow_nil=False, strict=None):
    return provider().validate(value, allow_nil, strict)


def format(value):
    """ Return the canonical hyphenated string form of an identifier.
    """

    return str(uuid.UUID(bytes=bytes(value)))


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
