""" Python implementation of the busmsg framing protocol. Every message on
    the bus is a frame holding a 4-byte kind code, a 16-byte message id, and
    a JSON payload whose shape is determined by the kind. This package
    encodes and decodes frames, validates payloads against registered
    kinds, and routes the resulting messages to handlers.
"""

# Utility components.

from . import json
from . import errors
from . import config
from . import identifier

# The protocol proper, with no transport awareness.

from . import protocol

Codec = protocol.Codec
Dispatcher = protocol.Dispatcher
Channel = protocol.Channel
Registry = protocol.Registry

# Optional collaborators: transport and request correlation.

from . import correlate
from . import transport

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
