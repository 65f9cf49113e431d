from . import kind
from . import frame
from . import validator
from . import registry
from . import message
from . import dispatch
from . import catalog

from .frame import Frame
from .registry import Registry
from .validator import TypedMessage, Validator
from .message import Codec
from .dispatch import Channel, Dispatcher


"""
busmsg Protocol Layer
=====================

This package defines the framing of bus messages and the machinery that
turns frames into typed, routed messages. It performs no I/O and MUST NOT
depend on any transport implementation (e.g. ZeroMQ).

---------------------------------------------------------------------

Layer Architecture Overview
---------------------------

Handler Code
    ▲
    │
Dispatcher (dispatch.py)
    Routes a TypedMessage to the single handler for its kind
    - Dispatcher.on() / route()
    - Channel: per-connection ordering, error isolation

    ▲
    │
Codec Facade (message.py)
    Payload <-> bytes for registered kinds
    - generates message ids on encode
    - checks message ids on decode

    ▲
    │
Validator (validator.py)
    Raw JSON payload -> TypedMessage
    - UnknownKind / MalformedJson / SchemaMismatch

    ▲
    │
Kind Registry (registry.py, kind.py)
    4-byte kind code -> decoder + display name
    Open set, registered at runtime

    ▲
    │
Frame Codec (frame.py)
    The only module aware of the byte layout
    [kind:4][uuid:16][payload:N]

---------------------------------------------------------------------

Below the Protocol Layer (for context)
--------------------------------------

Transport Layer
    Moves one frame per message
    - ZeroMQ (busmsg.transport.zeromq)

---------------------------------------------------------------------

Design Principles
-----------------

1. Transport Agnostic
   A frame is just bytes; the transport supplies message boundaries.

2. Framing Before Meaning
   A frame decodes without its payload being parsed, so frames of unknown
   kinds can still be relayed.

3. Open Kind Set
   Kinds are registered, never enumerated by the codec.

4. Named Failures
   Every rejection is a specific exception from busmsg.errors.

---------------------------------------------------------------------
"""


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
