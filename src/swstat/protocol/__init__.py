""" The SwUDP statistics protocol: wire constants, the frame codec, and
    the client-side session state. Nothing in this package touches a
    socket; see :mod:`swstat.transport` for that.
"""

from . import fields
from . import frame
from . import session

from .frame import decode_reply, encode_connect, encode_poll
from .session import Session


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
