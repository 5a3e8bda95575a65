''' JSON decoding for configuration files. msgspec is used when it is
    installed, otherwise orjson. :func:`loads` accepts bytes or str, and a
    malformed document raises :class:`DecodeError`.
'''

try:
    import msgspec
except ImportError:
    msgspec = None

import orjson


if msgspec is not None:
    backend = 'msgspec'
    loads = msgspec.json.Decoder().decode
    DecodeError = msgspec.DecodeError
else:
    backend = 'orjson'
    loads = orjson.loads
    DecodeError = orjson.JSONDecodeError


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
