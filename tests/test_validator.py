import busmsg
import msgspec
import pytest

from busmsg.errors import MalformedJson, SchemaMismatch, UnknownKind
from busmsg.protocol import catalog
from busmsg.protocol.validator import TypedMessage, Validator


class Note(msgspec.Struct):
    text: str


@pytest.mark.parametrize('payload', (b'', b'{"seq": 42}', b'{"a":', b'\xff\xfe', b'null'))
def test_unknown_kind(registry, payload):
    """ An unregistered kind is reported as such, whatever the payload.
    """

    validator = Validator(registry)

    with pytest.raises(UnknownKind):
        validator.validate(b'\x00\x00\x00\x00', payload)

    with pytest.raises(UnknownKind):
        busmsg.protocol.validator.validate(registry, 0x7F, payload)


@pytest.mark.parametrize('payload', (b'{"a":', b'', b'{"seq": 42', b'{seq: 42}', b"{'seq': 42}", b'\xff\xfe', b'{"seq": "x", '))
def test_malformed(registry, payload):

    with pytest.raises(MalformedJson) as raised:
        Validator(registry).validate(catalog.PING, payload)

    assert raised.value.kind == catalog.PING


@pytest.mark.parametrize('payload', (b'{"seq": 1, "x": "\xff"}', b'{"seq": 1, "\xc3\x28": 2}', b'{"seq": 1}\xff'))
def test_invalid_utf8(registry, payload):
    """ Invalid UTF-8 is a syntax error, even where the schema would ignore
        the field holding it.
    """

    with pytest.raises(MalformedJson) as raised:
        Validator(registry).validate(catalog.PING, payload)

    assert raised.value.kind == catalog.PING


def test_invalid_utf8_string_field():

    registry = busmsg.Registry()
    registry.register(b'NOTE', Note, 'Note')

    assert busmsg.protocol.validator.validate(registry, b'NOTE', '{"text": "café"}'.encode('utf-8')).payload.text == 'café'

    with pytest.raises(MalformedJson) as raised:
        busmsg.protocol.validator.validate(registry, b'NOTE', b'{"text": "\xff"}')

    assert raised.value.kind == b'NOTE'


@pytest.mark.parametrize('payload', (
    b'{}',
    b'{"sequence": 42}',
    b'{"seq": "42"}',
    b'{"seq": 42.5}',
    b'{"seq": true}',
    b'{"seq": null}',
    b'{"seq": -1}',
    b'[42]',
    b'42',
    b'"seq"',
))
def test_schema_mismatch(registry, payload):

    with pytest.raises(SchemaMismatch) as raised:
        Validator(registry).validate(catalog.PING, payload)

    assert raised.value.kind == catalog.PING


def test_valid(registry):

    message = Validator(registry).validate(catalog.PING, b'{"seq": 42}')

    assert isinstance(message, TypedMessage)
    assert message.kind == catalog.PING
    assert message.name == 'Ping'
    assert message.payload == catalog.Ping(seq=42)
    assert message.payload.seq == 42
    assert message.id is None

    # Fields not part of the schema are ignored.

    message = Validator(registry).validate(catalog.PING, b'{"seq": 7, "comment": "hi"}')
    assert message.payload.seq == 7


def test_multiplication(registry):

    validator = Validator(registry)

    request = validator.validate(catalog.VALUE_MULTIPLICATION_REQUEST, b'{"value": 6, "multiplier": 7}')
    assert request.payload.value * request.payload.multiplier == 42

    with pytest.raises(SchemaMismatch):
        validator.validate(catalog.VALUE_MULTIPLICATION_REQUEST, b'{"value": 6}')

    response = validator.validate(catalog.VALUE_MULTIPLICATION_RESPONSE, b'{"result": 42}')
    assert response.payload.result == 42


def test_function_decoder():

    def temperature(document):
        value = document['kelvin']
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise TypeError('kelvin must be a number')
        if value < 0:
            raise ValueError('kelvin cannot be negative')
        return float(value)

    registry = busmsg.Registry()
    registry.register(b'TEMP', temperature, 'Temperature')
    validator = Validator(registry)

    assert validator.validate(b'TEMP', b'{"kelvin": 300}').payload == 300.0

    for payload in (b'{}', b'{"kelvin": "hot"}', b'{"kelvin": -4}', b'[]'):
        with pytest.raises(SchemaMismatch) as raised:
            validator.validate(b'TEMP', payload)
        assert raised.value.kind == b'TEMP'

    with pytest.raises(MalformedJson):
        validator.validate(b'TEMP', b'{"kelvin": ')


def test_function_decoder_shapes():
    """ Any lookup or attribute failure on a document of the wrong shape is
        a schema mismatch.
    """

    registry = busmsg.Registry()
    registry.register(b'FRST', lambda document: document[0], 'First')
    registry.register(b'GETX', lambda document: document.get('x'), 'GetX')
    validator = Validator(registry)

    assert validator.validate(b'FRST', b'[5]').payload == 5
    assert validator.validate(b'GETX', b'{"x": 6}').payload == 6

    for kind, payload in ((b'FRST', b'[]'), (b'FRST', b'{}'), (b'GETX', b'[1]'), (b'GETX', b'3')):
        with pytest.raises(SchemaMismatch) as raised:
            validator.validate(kind, payload)
        assert raised.value.kind == kind


def test_pure(registry):
    """ Validation never changes the registry, whether it succeeds or not.
    """

    before = registry.names()
    validator = Validator(registry)

    validator.validate(catalog.PING, b'{"seq": 1}')

    for payload in (b'{"seq": "1"}', b'{"seq":'):
        with pytest.raises(busmsg.errors.PayloadError):
            validator.validate(catalog.PING, payload)

    with pytest.raises(UnknownKind):
        validator.validate(b'NEW!', b'{}')

    assert registry.names() == before
    assert b'NEW!' not in registry


def test_equality():

    one = TypedMessage(catalog.PING, 'Ping', catalog.Ping(seq=1), b'i' * 16)
    same = TypedMessage(catalog.PING, 'Ping', catalog.Ping(seq=1), b'i' * 16)
    other = TypedMessage(catalog.PING, 'Ping', catalog.Ping(seq=2), b'i' * 16)

    assert one == same
    assert one != other
    assert '0x00000001' in repr(one)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
