""" Turn the raw payload of a frame into a typed message, according to the
    decoder registered for its kind. Validation is separate from framing:
    a frame can be decoded (and relayed) without its payload ever being
    parsed.

    A decoder is anything with a ``decode(raw)`` method. The registry will
    adapt two other forms via :func:`adapt`: a type, typically a
    :class:`msgspec.Struct` subclass, is decoded strictly by msgspec, so
    that an integer field will not accept a string; and a plain callable,
    which receives the parsed JSON document and returns the typed payload,
    raising TypeError, ValueError, LookupError or AttributeError if the
    document does not have the expected shape.

    Payloads are UTF-8 JSON. Invalid UTF-8 anywhere in the payload is a
    syntax error, even inside a field the decoder would otherwise ignore.
"""

import msgspec

from .. import json
from ..errors import MalformedJson, SchemaMismatch
from . import kind as kindmodule


class FunctionDecoder:
    """ Adapt a callable accepting a parsed JSON document into a decoder.
    """

    def __init__(self, function):
        self.function = function


    def decode(self, raw):

        document = json.loads(raw)

        try:
            return self.function(document)
        except SchemaMismatch:
            raise
        except (TypeError, ValueError, LookupError, AttributeError, msgspec.ValidationError) as e:
            raise SchemaMismatch(str(e))


# end of class FunctionDecoder



def adapt(decoder):
    """ Return a ``(decoder, type)`` tuple for the supplied *decoder*. The
        returned decoder has a ``decode(raw)`` method; the type is the
        Python type of the decoded payload, or None if it is not known.
    """

    if isinstance(decoder, type):
        return msgspec.json.Decoder(decoder, strict=True), decoder

    try:
        decode = decoder.decode
    except AttributeError:
        decode = None

    if callable(decode):
        payload_type = getattr(decoder, 'type', None)
        if not isinstance(payload_type, type):
            payload_type = None
        return decoder, payload_type

    if callable(decoder):
        return FunctionDecoder(decoder), None

    raise TypeError('decoder must be a type, a callable, or have a decode() method')



def _well_formed(raw):

    try:
        json.loads(raw)
    except msgspec.DecodeError:
        return False

    return True



class TypedMessage:
    """ A decoded, validated message: the 4-byte *kind* code, the display
        *name* of the kind, the typed *payload*, and the message *id*.
        The kind travels with the payload so that dispatch never has to
        guess from the payload type.
    """

    __slots__ = ('kind', 'name', 'payload', 'id')

    def __init__(self, kind, name, payload, id=None):
        self.kind = kind
        self.name = name
        self.payload = payload
        self.id = id


    def __eq__(self, other):
        if not isinstance(other, TypedMessage):
            return NotImplemented

        mine = (self.kind, self.name, self.payload, self.id)
        theirs = (other.kind, other.name, other.payload, other.id)
        return mine == theirs


    def __repr__(self):
        return 'TypedMessage(%s %s, %r)' % (kindmodule.format(self.kind), self.name, self.payload)


# end of class TypedMessage



class Validator:
    """ Validate raw payloads against the decoders held by a *registry*.
        The registry is only ever read.
    """

    def __init__(self, registry):
        self.registry = registry


    def validate(self, kind, raw):
        """ Return a :class:`TypedMessage` for the *raw* payload bytes of
            the given *kind*. Raises UnknownKind if no decoder is
            registered, MalformedJson if *raw* is not valid JSON, or
            SchemaMismatch if it is valid JSON of the wrong shape.
        """

        registered = self.registry.lookup(kind)

        if isinstance(raw, (bytearray, memoryview)):
            raw = bytes(raw)

        if isinstance(raw, bytes):
            try:
                raw.decode('utf-8')
            except UnicodeDecodeError as e:
                raise MalformedJson('payload is not valid UTF-8: ' + str(e), registered.code) from e

        try:
            payload = registered.decoder.decode(raw)
        except (MalformedJson, SchemaMismatch) as e:
            if e.kind is None:
                e.kind = registered.code
            raise
        except msgspec.ValidationError as e:

            # msgspec stops at the first type error, which may come before
            # a syntax error later in the document.

            if _well_formed(raw):
                raise SchemaMismatch(str(e), registered.code) from e
            else:
                raise MalformedJson(str(e), registered.code) from e
        except (msgspec.DecodeError, UnicodeDecodeError) as e:
            raise MalformedJson(str(e), registered.code) from e

        return TypedMessage(registered.code, registered.name, payload)


# end of class Validator



def validate(registry, kind, raw):
    """ Convenience wrapper for :func:`Validator.validate`.
    """

    return Validator(registry).validate(kind, raw)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
