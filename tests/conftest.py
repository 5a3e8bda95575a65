import pytest
import queue
import socket
import struct
import threading

import swstat


class FakeServer:
    """ A loopback stand-in for the statistics service. Every datagram it
        receives is queued in *received*; the *responder* callable, if set,
        returns a list of datagrams to send back to the client.
    """

    def __init__(self):
        self.socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.socket.bind(('127.0.0.1', 0))
        self.socket.settimeout(0.1)
        self.port = self.socket.getsockname()[1]

        self.received = queue.Queue()
        self.responder = None
        self.client = None
        self.shutdown = False

        self.thread = threading.Thread(target=self.run)
        self.thread.daemon = True
        self.thread.start()


    def run(self):
        while self.shutdown == False:
            try:
                data, address = self.socket.recvfrom(4096)
            except socket.timeout:
                continue
            except OSError:
                break

            self.client = address
            self.received.put(data)

            responder = self.responder
            if responder is None:
                continue

            for response in responder(data):
                self.socket.sendto(response, address)


    def send(self, data):
        self.socket.sendto(data, self.client)


    def next(self, timeout=2):
        return self.received.get(timeout=timeout)


    def stop(self):
        self.shutdown = True
        self.thread.join(1)
        self.socket.close()


def reply(request, status=0, entries=()):
    """ Build a data reply mirroring the header of *request*.
    """

    header = bytearray(request[:15])
    header[11] |= 1
    body = bytes((status,))
    for category, value in entries:
        body += struct.pack('>BH', category, value)

    return bytes(header) + body


@pytest.fixture
def server():
    instance = FakeServer()
    yield instance
    instance.stop()


@pytest.fixture
def make_reply():
    return reply


@pytest.fixture
def config_home(tmp_path, monkeypatch):
    """ Point the configuration directory at an empty temporary location.
    """

    monkeypatch.setenv('SWSTAT_HOME', str(tmp_path))
    monkeypatch.setattr(swstat.config.directory, 'found', None)
    yield tmp_path


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
