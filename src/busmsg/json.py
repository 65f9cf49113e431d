''' Wrapper module providing the equivalent of :func:`json.loads` and
    :func:`json.dumps`, backed by msgspec. Both directions deal in bytes,
    since that is what goes on the wire.
'''

import msgspec

encoder = msgspec.json.Encoder()
decoder = msgspec.json.Decoder()

DecodeError = msgspec.DecodeError
EncodeError = msgspec.EncodeError
dumps = encoder.encode
loads = decoder.decode

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
