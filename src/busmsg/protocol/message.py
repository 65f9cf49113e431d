""" The :class:`Codec` ties the frame codec, the kind registry, the
    validator, and an identifier provider together: typed payloads go in
    one side and bytes come out, bytes go in the other side and typed
    messages come out.
"""

from .. import identifier
from .. import json
from ..errors import InvalidMessageId, UnencodablePayload
from . import frame
from . import kind as kindmodule
from .validator import Validator


class Codec:
    """ Encode and decode complete messages for the kinds held by a
        *registry*. Message ids are drawn from *identifiers*, a
        :class:`identifier.Provider`; the process-wide provider is used
        if none is given. If *check_ids* is True, decoded messages must
        carry a valid message id.
    """

    def __init__(self, registry, identifiers=None, check_ids=True):

        if identifiers is None:
            identifiers = identifier.provider()

        self.registry = registry
        self.identifiers = identifiers
        self.check_ids = check_ids
        self.validator = Validator(registry)


    def encode(self, payload, kind=None, id=None):
        """ Serialize *payload* as JSON and return the bytes of the complete
            frame. If *kind* is not specified it is looked up from the
            registered type of the payload. If *id* is not specified a
            fresh one is generated; callers expecting a correlated response
            should generate the id themselves, so that they know it.
            UnencodablePayload is raised if the payload cannot be serialized.
        """

        if kind is None:
            kind = self.registry.kind_of(payload)
        else:
            kind = kindmodule.code(kind)

        if id is None:
            id = self.identifiers.generate()

        try:
            payload = json.dumps(payload)
        except (TypeError, OverflowError, json.EncodeError) as e:
            raise UnencodablePayload(str(e), kind) from e

        return frame.encode(kind, id, payload)


    def decode(self, data):
        """ Decode and validate the frame in *data*, returning a
            :class:`validator.TypedMessage`.
        """

        return self.validate(frame.decode(data))


    def validate(self, decoded):
        """ Validate an already decoded :class:`frame.Frame`, returning a
            :class:`validator.TypedMessage`. The kind is looked up before
            the message id is checked, so that a frame of an unknown kind
            is always reported as such.
        """

        kind, id, payload = decoded
        registered = self.registry.lookup(kind)

        if self.check_ids:
            if not self.identifiers.validate(id, allow_nil=registered.nil_id):
                raise InvalidMessageId(id, registered.code)

        message = self.validator.validate(kind, payload)
        message.id = id
        return message


# end of class Codec


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
