""" Session state for one SwUDP connection: the session identifier chosen
    by the client at startup, and the per-message sequence id.
"""

import random

from . import fields


reserved = frozenset((fields.syn, fields.error_ack))


def next_id(current):
    """ Return the sequence id that follows *current*. The counter is a
        single byte; on wraparound the reserved values 0 (SYN) and 1
        (error ack) are skipped, so the result is always in 2..255.
    """

    result = (current + 1) % 256

    while result in reserved:
        result = (result + 1) % 256

    return result



class Session:
    """ A :class:`Session` owns the 32-bit *session_id* sent with every frame
        and the 8-bit *sequence_id* of the most recent frame. The session id
        is built from two independent 16-bit draws from *source*, which
        defaults to a fresh :class:`random.Random` instance; tests may pass
        a seeded one.

        Only :func:`advance` changes the sequence id; other threads may read
        either attribute at any time.

        :ivar session_id: The 32-bit identifier for this connection.
        :ivar sequence_id: The id of the most recently issued frame.
    """

    def __init__(self, source=None):

        if source is None:
            source = random.Random()

        self.source = source
        self.session_id = None
        self.sequence_id = None
        self.initialize()


    def initialize(self):
        """ Reset the sequence id to the SYN value and draw a new session id.
            This happens once, before the connect frame is sent.
        """

        high = self.source.getrandbits(16)
        low = self.source.getrandbits(16)

        self.sequence_id = fields.syn
        self.session_id = (high << 16) | low


    def advance(self):
        """ Move to the next sequence id and return it.
        """

        self.sequence_id = next_id(self.sequence_id)
        return self.sequence_id


    def __repr__(self):
        return 'Session(session_id=%08x, sequence_id=%d)' % (self.session_id, self.sequence_id)


# end of class Session


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
