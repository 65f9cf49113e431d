""" The kind registry maps 4-byte kind codes to payload decoders and
    display names. The set of kinds is open: new kinds are registered at
    runtime, and neither the frame codec nor the validator needs to change.

    Registration is expected to happen during startup, before decode
    traffic begins, but runtime registration is safe: every change swaps
    in a new dictionary, so a concurrent :func:`Registry.lookup` sees
    either the old mapping or the new one, never a partial update.
"""

import logging
import threading

from ..errors import DuplicateKind, UnknownKind
from . import kind as kindmodule
from . import validator

logger = logging.getLogger(__name__)


def _drop_type(types, payload_type, code):
    """ Remove *code* from the tuple of codes registered for *payload_type*
        in the *types* dictionary, which is modified in place.
    """

    if payload_type is None:
        return

    codes = tuple(other for other in types.get(payload_type, ()) if other != code)

    if codes:
        types[payload_type] = codes
    else:
        types.pop(payload_type, None)


class Registry:
    """ A mutable mapping from kind code to :class:`kind.Kind`.

        Registering a kind code that is already present raises a
        DuplicateKind exception. Silently replacing a registration hides
        configuration mistakes; a caller that deliberately reloads a kind
        must say so by passing ``replace=True``.
    """

    def __init__(self):
        self._kinds = dict()
        self._types = dict()
        self._lock = threading.Lock()


    def __contains__(self, kind):
        try:
            code = kindmodule.code(kind)
        except (TypeError, ValueError):
            return False

        return code in self._kinds


    def __iter__(self):
        return iter(sorted(self._kinds))


    def __len__(self):
        return len(self._kinds)


    def register(self, kind, decoder, name, nil_id=False, replace=False):
        """ Associate the *kind* code with a payload *decoder* and a display
            *name*. See :func:`validator.adapt` for the accepted decoder
            forms. If *nil_id* is True, frames of this kind may carry the
            all-zero message id. Returns the new :class:`kind.Kind`.
        """

        code = kindmodule.code(kind)
        decoder, payload_type = validator.adapt(decoder)
        registered = kindmodule.Kind(code, str(name), decoder, payload_type, nil_id)

        with self._lock:
            previous = self._kinds.get(code)

            if previous is not None and not replace:
                raise DuplicateKind(code)

            kinds = dict(self._kinds)
            kinds[code] = registered

            types = dict(self._types)
            if previous is not None:
                _drop_type(types, previous.type, code)
            if payload_type is not None:
                types[payload_type] = types.get(payload_type, ()) + (code,)

            self._kinds = kinds
            self._types = types

        if previous is None:
            logger.debug('registered kind %s as %s', kindmodule.format(code), registered.name)
        else:
            logger.info('replaced kind %s (%s) with %s', kindmodule.format(code), previous.name, registered.name)

        return registered


    def unregister(self, kind):
        """ Remove the registration for *kind*. Raises UnknownKind if it is
            not registered.
        """

        code = kindmodule.code(kind)

        with self._lock:
            try:
                previous = self._kinds[code]
            except KeyError:
                raise UnknownKind(code)

            kinds = dict(self._kinds)
            del kinds[code]

            types = dict(self._types)
            _drop_type(types, previous.type, code)

            self._kinds = kinds
            self._types = types

        logger.debug('unregistered kind %s', kindmodule.format(code))
        return previous


    def lookup(self, kind):
        """ Return the :class:`kind.Kind` registered for *kind*, or raise
            UnknownKind.
        """

        code = kindmodule.code(kind)

        try:
            return self._kinds[code]
        except KeyError:
            raise UnknownKind(code)


    def kind_of(self, payload):
        """ Return the kind code registered for the type of *payload*. Raises
            UnknownKind if the type was not registered as a decoder, or
            DuplicateKind if it was registered for more than one kind; the
            caller must then name the kind explicitly.
        """

        payload_type = type(payload)

        try:
            codes = self._types[payload_type]
        except KeyError:
            raise UnknownKind(None, 'no kind registered for payload type ' + payload_type.__name__)

        if len(codes) > 1:
            formatted = ', '.join(kindmodule.format(code) for code in codes)
            message = 'payload type %s is registered for more than one kind: %s' % (payload_type.__name__, formatted)
            raise DuplicateKind(codes[0], message=message)

        return codes[0]


    def names(self):
        """ Return a dictionary mapping each registered kind code to its
            display name.
        """

        kinds = self._kinds
        return dict((code, kinds[code].name) for code in sorted(kinds))


# end of class Registry


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
