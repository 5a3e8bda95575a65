""" Diagnostic client for SwUDP game servers. A :class:`Client` performs the
    session handshake and then either polls the server for live statistics
    or issues a single remote command.
"""

# Utility components.

from . import json
from . import poll

# Submodules used by multiple other components.

from . import protocol
from . import config
home = config.directory

from . import render
from . import transport

# Primary public-facing interfaces.

from .client import Client
from .protocol import Session
from .render import Renderer
from .transport import Transport, TransportError

__version__ = '0.1.0'

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
