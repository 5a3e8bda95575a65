"""UDP transport for the SwUDP statistics protocol.

A :class:`Transport` owns one datagram socket aimed at a single server. The
caller sends frames with :meth:`Transport.send`; a background thread reads
inbound datagrams, acknowledges anything longer than an ack, and hands the
classified reply to the callbacks given to :meth:`Transport.start`.

There is no retry layer. Any socket error is fatal for the transport: it is
raised to the caller on the send path, and recorded and reported through
``on_error`` on the receive path.
"""

from __future__ import annotations

import logging
import socket
import threading
import time
import traceback
from typing import Callable, Optional

from .protocol import fields
from .protocol import frame


logger = logging.getLogger(__name__)


class TransportError(Exception):
    """Base class for all transport-layer errors."""


class TransportConnectionError(TransportError):
    """The server address could not be resolved, or no socket could be created."""


def resolve(address: str, port: int):
    """
    Return the IPv4 socket address for *address* and *port*. Only the first
    address returned by the resolver is used.
    """

    try:
        found = socket.getaddrinfo(address, port, socket.AF_INET, socket.SOCK_DGRAM)
    except (socket.gaierror, UnicodeError) as e:
        raise TransportConnectionError("cannot resolve address %r: %s" % (address, e))

    if not found:
        raise TransportConnectionError("cannot resolve address %r" % (address))

    return found[0][4]


class Pending:
    """The single outbound frame waiting to be acknowledged."""

    def __init__(self, datagram: bytes):
        self.sequence_id = datagram[0]
        self.sent = time.time()
        self.acked = None
        self.ack_event = threading.Event()

    def wait_ack(self, timeout: Optional[float]) -> bool:
        return self.ack_event.wait(timeout)

    def _complete_ack(self) -> None:
        self.acked = time.time()
        self.ack_event.set()


class Transport:
    """
    Datagram channel to the server at *address*:*port*.

    The socket carries a short timeout so that the receive thread can notice
    :meth:`stop` without depending on the socket being closed underneath it.

    :ivar server: The resolved (host, port) socket address.
    :ivar error: The exception that ended the receive loop, if any.
    :ivar finished: Event set when the receive loop exits for any reason.
    """

    buffer_size = fields.maximum_size
    receive_timeout = 0.25

    def __init__(self, address: str, port: int = fields.default_port):
        self.address = address
        self.port = int(port)
        self.server = resolve(address, self.port)

        try:
            self.socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        except OSError as e:
            raise TransportConnectionError("cannot create socket: %s" % (e))

        self.socket.settimeout(self.receive_timeout)

        # Sends originate from two threads: the caller's requests and the
        # receive thread's acks.
        self.socket_lock = threading.Lock()

        self.pending: Optional[Pending] = None
        self.error: Optional[BaseException] = None
        self.finished = threading.Event()
        self.shutdown = threading.Event()
        self.thread: Optional[threading.Thread] = None

        self.counters = {"sent": 0, "received": 0, "acks": 0, "anomalous": 0}

        self.on_ack: Optional[Callable] = None
        self.on_data: Optional[Callable] = None
        self.on_disconnect: Optional[Callable] = None
        self.on_anomalous: Optional[Callable] = None
        self.on_error: Optional[Callable] = None

    def send(self, datagram: bytes) -> Pending:
        """
        Send *datagram* to the server. The frame becomes the one pending
        acknowledgment, replacing any earlier one. Raises
        :class:`TransportError` if the send fails.
        """

        pending = Pending(datagram)
        self.pending = pending
        self._sendto(datagram, self.server)
        self.counters["sent"] += 1

        logger.debug("sent %d bytes, sequence id %d", len(datagram), pending.sequence_id)
        return pending

    def start(self, on_ack=None, on_data=None, on_disconnect=None,
              on_anomalous=None, on_error=None) -> None:
        """
        Start the background receive thread. Each callback receives the
        decoded reply (:mod:`swstat.protocol.frame` types); ``on_ack`` also
        receives the :class:`Pending` frame it acknowledged, or None.
        ``on_error`` receives the exception that ended the loop.
        """

        if self.thread is not None:
            raise RuntimeError("transport already started")

        self.on_ack = on_ack
        self.on_data = on_data
        self.on_disconnect = on_disconnect
        self.on_anomalous = on_anomalous
        self.on_error = on_error

        self.thread = threading.Thread(target=self.run, name="swstat-receive")
        self.thread.daemon = True
        self.thread.start()

    def stop(self, timeout: float = 2) -> None:
        """Ask the receive thread to exit, wait for it, and close the socket."""

        self.shutdown.set()

        if self.thread is not None and self.thread is not threading.current_thread():
            self.thread.join(timeout)

        self.close()

    def close(self) -> None:
        try:
            self.socket.close()
        except OSError:
            pass

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the receive loop exits. Returns False on timeout;
        re-raises the fatal error if one ended the loop.
        """

        done = self.finished.wait(timeout)
        if self.error is not None:
            raise self.error
        return done

    def stats(self) -> dict:
        return dict(self.counters)

    @property
    def is_running(self) -> bool:
        return self.thread is not None and self.thread.is_alive()

    def _sendto(self, datagram: bytes, destination) -> None:
        try:
            with self.socket_lock:
                self.socket.sendto(datagram, destination)
        except OSError as e:
            raise TransportError("send socket error: %s" % (e))

    def run(self) -> None:

        try:
            self._receive_loop()
        except TransportError as e:
            self.error = e
            logger.error("%s", e)
        finally:
            self.finished.set()

        if self.error is not None and self.on_error is not None:
            self.on_error(self.error)

    def _receive_loop(self) -> None:

        while not self.shutdown.is_set():
            try:
                datagram, sender = self.socket.recvfrom(self.buffer_size)
            except socket.timeout:
                continue
            except OSError as e:
                if self.shutdown.is_set():
                    break
                raise TransportError("receive socket error: %s" % (e))

            self.counters["received"] += 1

            if len(datagram) > fields.ack_size:
                self._sendto(frame.encode_ack(datagram), sender)
                self.counters["acks"] += 1

            reply = frame.decode_reply(datagram)

            if isinstance(reply, frame.Disconnected):
                logger.info("disconnected by %s:%d", sender[0], sender[1])
                self._dispatch(self.on_disconnect)
                break

            self._handle(reply)

    def _handle(self, reply) -> None:

        if isinstance(reply, frame.AckOnly):
            pending = self.pending
            if pending is not None and pending.sequence_id == reply.sequence_id:
                pending._complete_ack()
                self.pending = None
            else:
                pending = None
            self._dispatch(self.on_ack, reply, pending)

        elif isinstance(reply, frame.Anomalous):
            self.counters["anomalous"] += 1
            logger.warning("ignoring %d-byte datagram: %s", len(reply.raw), reply.raw.hex())
            self._dispatch(self.on_anomalous, reply)

        else:
            self._dispatch(self.on_data, reply)

    def _dispatch(self, callback, *args) -> None:
        """Invoke a callback; a failing callback must not stop the loop."""

        if callback is None:
            return

        try:
            callback(*args)
        except Exception:
            logger.error("exception in receive callback:\n%s", traceback.format_exc())
