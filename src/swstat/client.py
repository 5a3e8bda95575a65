""" The statistics client: one SwUDP session against one server, either
    polling for statistics on an interval or issuing a single remote
    command. A :class:`Client` owns its :class:`swstat.protocol.Session`,
    :class:`swstat.transport.Transport` and :class:`swstat.render.Renderer`;
    nothing here is shared at module scope.
"""

import logging
import threading

from . import poll
from . import render
from . import transport
from .protocol import fields
from .protocol import frame
from .protocol.session import Session


logger = logging.getLogger(__name__)


class Client:
    """ Talk to the statistics service at *address*. If a *command* is
        provided the client runs in one-shot mode: a single remote call is
        sent, and the session is over once its response code is rendered.
        Otherwise a statistics request goes out every *interval* seconds
        until :func:`stop` is called or the server disconnects.

        Typical use::

            with Client('game.example.org') as client:
                client.run()
                client.wait()

        :ivar done: Event set when the session is over, for any reason.
        :ivar error: The fatal transport error that ended the session, if any.
        :ivar disconnected: True if the server closed the session. Only a
            one-shot session ends there; polling carries on until stopped.
    """

    def __init__(self, address, command=None, port=fields.default_port,
                 interval=3.0, maximum=fields.maximum_size, renderer=None,
                 session=None):

        self.address = address
        self.command = command
        self.port = int(port)
        self.interval = float(interval)
        self.maximum = int(maximum)

        if self.maximum < fields.header_size or self.maximum > fields.maximum_size:
            raise ValueError('maximum frame size must be between %d and %d bytes' % (fields.header_size, fields.maximum_size))

        if renderer is None:
            renderer = render.Renderer(one_shot=self.one_shot)

        if session is None:
            session = Session()

        self.renderer = renderer
        self.session = session
        self.transport = None
        self.pending = None

        self.done = threading.Event()
        self.error = None
        self.disconnected = False
        self.sent = 0
        self.shutdown = False


    @property
    def one_shot(self):
        return self.command is not None


    def __enter__(self):
        self.connect()
        return self


    def __exit__(self, *exc):
        self.stop()


    def connect(self):
        """ Open the transport, start the receive thread, and send the
            connect frame carrying the session id. The server starts
            tracking the session from here; any ack for the connect frame
            is absorbed by the generic ack handling.
        """

        if self.transport is not None:
            raise RuntimeError('client already connected')

        self.transport = transport.Transport(self.address, self.port)
        self.transport.start(on_ack=self._on_ack,
                             on_data=self._on_data,
                             on_disconnect=self._on_disconnect,
                             on_error=self._on_error)

        connect = frame.encode_connect(self.session.session_id)

        try:
            self.pending = self.transport.send(connect)
        except transport.TransportError:
            self.transport.stop()
            raise

        logger.info('connecting to %s:%d, session %08x', self.address, self.port, self.session.session_id)


    def run(self):
        """ Begin the request cycle. In polling mode a background poller
            issues a statistics request every interval; in one-shot mode a
            single command frame is sent after one interval. Returns
            immediately; use :func:`wait` to block.
        """

        if self.transport is None:
            self.connect()

        poll.start(self._cycle, self.interval)


    def poll_once(self):
        """ Advance the sequence id, encode a request, and send it. Returns
            the encoded frame.
        """

        sequence_id = self.session.advance()
        datagram = frame.encode_poll(sequence_id, self.session.session_id,
                                     self.command, self.maximum)

        self.pending = self.transport.send(datagram)
        self.sent += 1
        return datagram


    def wait(self, timeout=None):
        """ Block until the session is over: the one-shot response has been
            rendered, the server ended a one-shot session, :func:`stop` was
            called, or a fatal error occurred.
            Returns False if *timeout* expired first. Fatal transport errors
            are re-raised here.
        """

        finished = self.done.wait(timeout)

        if self.error is not None:
            raise self.error

        return finished


    def wait_ack(self, timeout=None):
        """ Wait for the most recently sent frame to be acknowledged. There
            is no retransmission; a missing ack only means False here.
        """

        pending = self.pending
        if pending is None:
            return False

        return pending.wait_ack(timeout)


    def stop(self):
        """ End the session: stop polling and shut down the transport.
        """

        self.shutdown = True
        poll.stop(self._cycle)

        if self.transport is not None:
            self.transport.stop()

        self.done.set()


    def _cycle(self):
        """ One tick of the poller. Send failures end the session.
        """

        if self.shutdown == True or self.done.is_set():
            poll.stop(self._cycle)
            return

        try:
            self.poll_once()
        except transport.TransportError as e:
            self._on_error(e)
            return

        if self.one_shot:
            poll.stop(self._cycle)


    def _on_ack(self, reply, pending):

        session_id = int.from_bytes(reply.raw[1:5], 'big')

        if len(reply.raw) == fields.ack_size and session_id != self.session.session_id:
            logger.debug('ack for session %08x, ours is %08x', session_id, self.session.session_id)

        if pending is None:
            logger.debug('unmatched ack for sequence id %d', reply.sequence_id)


    def _on_data(self, reply):

        self.renderer.render(reply)

        if self.renderer.finished.is_set():
            self.done.set()


    def _on_disconnect(self):
        """ The receive loop has ended. A one-shot session is over; in
            polling mode requests keep going out until the client is stopped.
        """

        self.renderer.console.write(['Disconnected!'])
        self.disconnected = True

        if self.one_shot:
            poll.stop(self._cycle)
            self.done.set()


    def _on_error(self, error):
        if self.shutdown == True:
            # The socket was closed underneath an in-flight send.
            logger.debug('ignoring error after shutdown: %s', error)
            return

        if self.error is None:
            self.error = error
        poll.stop(self._cycle)
        self.done.set()


# end of class Client


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
