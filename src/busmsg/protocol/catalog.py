""" A small catalogue of message kinds. The set of kinds is versioned and
    distributed independently of the protocol; applications register the
    kinds they understand, and may use :func:`register` to pick up the ones
    defined here.
"""

from typing import Annotated

import msgspec

from . import kind as kindmodule


class Ping(msgspec.Struct):
    """ Liveness check; *seq* lets the sender match up the replies. """

    seq: Annotated[int, msgspec.Meta(ge=0)]


class ValueMultiplicationRequest(msgspec.Struct):
    """ Ask a service to multiply *value* by *multiplier*. """

    value: int
    multiplier: int


class ValueMultiplicationResponse(msgspec.Struct):
    """ The product computed in answer to a ValueMultiplicationRequest. """

    result: int


PING = kindmodule.code(0x00000001)
VALUE_MULTIPLICATION_REQUEST = kindmodule.code(0x00000002)
VALUE_MULTIPLICATION_RESPONSE = kindmodule.code(0x00000003)

kinds = (
    (PING, Ping, 'Ping'),
    (VALUE_MULTIPLICATION_REQUEST, ValueMultiplicationRequest, 'ValueMultiplicationRequest'),
    (VALUE_MULTIPLICATION_RESPONSE, ValueMultiplicationResponse, 'ValueMultiplicationResponse'),
)


def register(registry, replace=False):
    """ Register every kind in this catalogue with the supplied *registry*.
    """

    for code, decoder, name in kinds:
        registry.register(code, decoder, name, replace=replace)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
