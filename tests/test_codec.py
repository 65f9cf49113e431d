""" End-to-end behavior of the protocol layer: typed payloads are encoded
    into frames, and frames are decoded, validated, and dispatched.
"""

import uuid

import busmsg
import msgspec
import pytest

from busmsg.errors import InvalidMessageId, UnencodablePayload, UnknownKind
from busmsg.protocol import catalog
from busmsg.protocol import frame


class PingSchema(msgspec.Struct):
    seq: int


def test_ping_scenario(provider):

    registry = busmsg.Registry()
    registry.register(0x00000001, PingSchema, 'Ping')
    codec = busmsg.Codec(registry, provider)

    id = provider.generate()
    data = codec.encode({'seq': 42}, kind=0x00000001, id=id)

    assert data[:4] == b'\x00\x00\x00\x01'
    assert data[4:20] == id
    assert busmsg.json.loads(data[20:]) == {'seq': 42}

    message = codec.decode(data)
    assert message.kind == b'\x00\x00\x00\x01'
    assert message.name == 'Ping'
    assert message.id == id
    assert message.payload.seq == 42

    calls = list()

    def ping_handler(id, payload):
        calls.append((id, payload.seq))

    dispatcher = busmsg.Dispatcher()
    dispatcher.on(0x00000001, ping_handler)
    dispatcher.route(message.kind, message.id, message)

    assert calls == [(id, 42)]


def test_zero_frame(codec):
    """ Twenty zero bytes decode structurally; kind zero is not registered,
        so validation reports an unknown kind rather than a bad id.
    """

    decoded = frame.decode(bytes(20))
    assert decoded == (bytes(4), bytes(16), b'')

    with pytest.raises(UnknownKind):
        codec.validate(decoded)

    with pytest.raises(UnknownKind):
        codec.decode(bytes(20))


def test_encode_infers_kind(codec):

    request = catalog.ValueMultiplicationRequest(value=3, multiplier=4)
    data = codec.encode(request)

    decoded = frame.decode(data)
    assert decoded.kind == catalog.VALUE_MULTIPLICATION_REQUEST
    assert codec.identifiers.validate(decoded.uuid)

    message = codec.decode(data)
    assert message.payload == request

    with pytest.raises(UnknownKind):
        codec.encode({'value': 3, 'multiplier': 4})


def test_unencodable(codec):

    with pytest.raises(UnencodablePayload) as raised:
        codec.encode(object(), kind=catalog.PING)

    assert raised.value.kind == catalog.PING
    assert isinstance(raised.value, busmsg.errors.PayloadError)
    assert isinstance(raised.value, busmsg.errors.ProtocolError)

    with pytest.raises(UnencodablePayload):
        codec.encode({'seq': {1, object()}}, kind=catalog.PING)


def test_fresh_ids(codec):

    ping = catalog.Ping(seq=1)
    ids = set()

    for count in range(100):
        ids.add(frame.decode(codec.encode(ping)).uuid)

    assert len(ids) == 100


def test_uuid_instance(codec):

    id = uuid.uuid4()
    data = codec.encode(catalog.Ping(seq=5), id=id)

    assert codec.decode(data).id == id.bytes


def test_invalid_ids(registry, provider):

    codec = busmsg.Codec(registry, provider)

    nil = frame.encode(catalog.PING, bytes(16), b'{"seq": 1}')
    with pytest.raises(InvalidMessageId) as raised:
        codec.decode(nil)
    assert raised.value.kind == catalog.PING

    version_one = frame.encode(catalog.PING, uuid.uuid1().bytes, b'{"seq": 1}')
    with pytest.raises(InvalidMessageId):
        codec.decode(version_one)

    # A relaxed codec accepts both.

    relaxed = busmsg.Codec(registry, provider, check_ids=False)
    assert relaxed.decode(nil).payload.seq == 1
    assert relaxed.decode(version_one).payload.seq == 1


def test_nil_id_kind(provider):
    """ A kind may declare that it expects no correlation, in which case the
        nil message id is acceptable.
    """

    registry = busmsg.Registry()
    registry.register(b'BEAT', catalog.Ping, 'Heartbeat', nil_id=True)
    codec = busmsg.Codec(registry, provider)

    data = codec.encode(catalog.Ping(seq=9), kind=b'BEAT', id=busmsg.identifier.nil)
    message = codec.decode(data)

    assert message.id == bytes(16)
    assert message.payload.seq == 9


def test_default_provider(registry, restore_identifiers):

    busmsg.identifier.initialize(seed=77)
    codec = busmsg.Codec(registry)

    assert codec.identifiers is busmsg.identifier.provider()

    first = frame.decode(codec.encode(catalog.Ping(seq=1))).uuid

    busmsg.identifier.initialize(seed=77)
    second = busmsg.identifier.generate()

    assert first == second


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
