import random

import pytest

import busmsg


@pytest.fixture
def provider():
    """ An identifier provider with a deterministic random source, so that
        test failures are repeatable.
    """

    return busmsg.identifier.Provider(random.Random(1234))


@pytest.fixture
def registry():

    registry = busmsg.Registry()
    busmsg.protocol.catalog.register(registry)
    return registry


@pytest.fixture
def codec(registry, provider):
    return busmsg.Codec(registry, provider)


@pytest.fixture
def restore_identifiers():
    """ Tests that replace the process-wide identifier provider put a fresh
        default one back in place afterwards.
    """

    yield
    busmsg.identifier.initialize()


@pytest.fixture
def restore_settings():
    yield
    busmsg.config.reset()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
