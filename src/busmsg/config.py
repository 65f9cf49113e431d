""" Runtime settings for busmsg services. Every setting can be overridden
    with an environment variable; the environment is read once, on the
    first call to :func:`settings`. Note that changes to the environment
    will be ignored after that point unless :func:`reset` is called.
"""

import logging
import os
import threading

log_format = '%(asctime)s [%(levelname)s] (%(name)s) %(message)s'

_cache = None
_cache_lock = threading.Lock()


def _text(value):
    return str(value).strip()


def _addresses(value):
    addresses = list()

    for address in str(value).split(','):
        address = address.strip()
        if address:
            addresses.append(address)

    return addresses


def _positive_int(value):
    value = int(value)
    if value < 1:
        raise ValueError('must be at least 1')
    return value


def _positive_float(value):
    value = float(value)
    if value <= 0:
        raise ValueError('must be greater than zero')
    return value


def _boolean(value):
    value = str(value).strip().lower()

    if value in ('1', 'true', 'yes', 'on'):
        return True
    if value in ('0', 'false', 'no', 'off'):
        return False

    raise ValueError('not a boolean: ' + repr(value))


def _level(value):
    value = str(value).strip().upper()
    if isinstance(logging.getLevelName(value), int):
        return value
    raise ValueError('unknown logging level: ' + repr(value))


# Attribute name, environment variable, default, parser.

variables = (
    ('router', 'BUSMSG_ROUTER', 'tcp://127.0.0.1:5555', _text),
    ('publishers', 'BUSMSG_PUBLISHERS', 'tcp://127.0.0.1:5556', _addresses),
    ('log_level', 'BUSMSG_LOG_LEVEL', 'INFO', _level),
    ('group_size', 'BUSMSG_GROUP_SIZE', '1000', _positive_int),
    ('resend_interval', 'BUSMSG_RESEND_INTERVAL', '5', _positive_float),
    ('strict_ids', 'BUSMSG_STRICT_IDS', '1', _boolean),
)



class Settings:
    """ A plain container for the settings enumerated in :data:`variables`.
        Keyword arguments are expected to be already parsed values.
    """

    def __init__(self, **kwargs):

        for attribute, variable, default, parse in variables:
            try:
                value = kwargs.pop(attribute)
            except KeyError:
                value = parse(default)

            setattr(self, attribute, value)

        if kwargs:
            raise TypeError('unknown settings: ' + ', '.join(sorted(kwargs)))


    def __repr__(self):
        fields = list()
        for attribute, variable, default, parse in variables:
            fields.append('%s=%r' % (attribute, getattr(self, attribute)))

        return 'Settings(' + ', '.join(fields) + ')'


# end of class Settings



def load(environ=None):
    """ Parse the settings from *environ*, which defaults to
        :data:`os.environ`, and return a new :class:`Settings` instance.
        A ValueError naming the offending variable is raised for any
        value that cannot be parsed.
    """

    if environ is None:
        environ = os.environ

    parsed = dict()

    for attribute, variable, default, parse in variables:
        raw = environ.get(variable, default)

        try:
            parsed[attribute] = parse(raw)
        except ValueError as e:
            raise ValueError('invalid %s=%r: %s' % (variable, raw, e))

    return Settings(**parsed)



def settings():
    """ Return the cached :class:`Settings` for this process, loading them
        from the environment on first use.
    """

    global _cache

    found = _cache

    if found is not None:
        return found

    with _cache_lock:
        if _cache is None:
            _cache = load()
        found = _cache

    return found



def reset():
    """ Discard the cached settings; the next call to :func:`settings` will
        read the environment again.
    """

    global _cache

    with _cache_lock:
        _cache = None



def configure_logging(level=None):
    """ Configure the root logger for a busmsg service. The *level* defaults
        to the ``BUSMSG_LOG_LEVEL`` setting. This is for use by entry points
        only; library code never configures logging.
    """

    if level is None:
        level = settings().log_level
    else:
        level = _level(level)

    logging.basicConfig(level=level, format=log_format)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
