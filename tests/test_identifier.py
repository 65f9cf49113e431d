import random
import threading
import uuid

import busmsg
import pytest


def test_generate(provider):

    id = provider.generate()

    assert isinstance(id, bytes)
    assert len(id) == 16

    as_uuid = uuid.UUID(bytes=id)
    assert as_uuid.version == 4
    assert as_uuid.variant == uuid.RFC_4122

    assert provider.validate(id) == True


def test_deterministic_seed():
    """ Two providers drawing from identically seeded sources produce the
        same sequence; this is what makes the provider testable.
    """

    first = busmsg.identifier.Provider(random.Random(99))
    second = busmsg.identifier.Provider(random.Random(99))

    for trial in range(10):
        assert first.generate() == second.generate()

    other = busmsg.identifier.Provider(random.Random(100))
    assert first.generate() != other.generate()


def test_no_collisions():
    """ A sanity check of collision resistance: one million identifiers
        from the default random source, no repeats.
    """

    provider = busmsg.identifier.Provider()
    trials = 10 ** 6

    seen = set()
    for trial in range(trials):
        seen.add(provider.generate())

    assert len(seen) == trials


def test_concurrent_generation(provider):

    results = list()
    results_lock = threading.Lock()

    def worker():
        generated = [provider.generate() for trial in range(2000)]
        with results_lock:
            results.extend(generated)

    threads = [threading.Thread(target=worker) for count in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 16000
    assert len(set(results)) == 16000


@pytest.mark.parametrize('length', (0, 1, 4, 15, 17, 20, 32))
def test_validate_length(provider, length):
    assert provider.validate(b'\x40' * length) == False


def test_validate_types(provider):

    for bad in (None, 12345, 'a string of len16', ['a'] * 16, 3.5):
        assert provider.validate(bad) == False

    good = provider.generate()
    assert provider.validate(bytearray(good)) == True
    assert provider.validate(memoryview(good)) == True
    assert provider.validate(uuid.UUID(bytes=good)) == True


def test_validate_nil(provider):

    nil = busmsg.identifier.nil
    assert nil == bytes(16)

    assert provider.validate(nil) == False
    assert provider.validate(nil, allow_nil=True) == True
    assert provider.validate(nil, strict=False) == False


def test_validate_strict():

    strict = busmsg.identifier.Provider(strict=True)
    relaxed = busmsg.identifier.Provider(strict=False)

    version_one = uuid.uuid1().bytes
    assert strict.validate(version_one) == False
    assert relaxed.validate(version_one) == True

    # Correct version nibble, wrong variant bits.

    wrong_variant = bytearray(uuid.uuid4().bytes)
    wrong_variant[8] = wrong_variant[8] & 0x3F
    assert strict.validate(wrong_variant) == False
    assert relaxed.validate(wrong_variant) == True

    # The per-call argument overrides the instance default.

    assert strict.validate(version_one, strict=False) == True
    assert relaxed.validate(version_one, strict=True) == False


def test_process_wide(restore_identifiers):

    busmsg.identifier.initialize(seed=5)
    first = busmsg.identifier.generate()

    busmsg.identifier.initialize(seed=5)
    second = busmsg.identifier.generate()

    assert first == second
    assert busmsg.identifier.validate(first) == True
    assert busmsg.identifier.provider() is busmsg.identifier.provider()


def test_format(provider):

    id = provider.generate()
    formatted = busmsg.identifier.format(id)

    assert formatted == str(uuid.UUID(bytes=id))
    assert len(formatted) == 36


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
