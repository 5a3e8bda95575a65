import pytest
import threading
import swstat

frame = swstat.protocol.frame


def collect():
    """ Return a dictionary of lists, and callbacks that append to them.
    """

    seen = dict(ack=list(), data=list(), disconnect=list(), anomalous=list(), error=list())
    event = threading.Event()

    def on_ack(reply, pending):
        seen['ack'].append((reply, pending))
        event.set()

    def on_data(reply):
        seen['data'].append(reply)
        event.set()

    def on_disconnect():
        seen['disconnect'].append(True)
        event.set()

    def on_anomalous(reply):
        seen['anomalous'].append(reply)
        event.set()

    def on_error(error):
        seen['error'].append(error)
        event.set()

    callbacks = dict(on_ack=on_ack, on_data=on_data, on_disconnect=on_disconnect,
                     on_anomalous=on_anomalous, on_error=on_error)

    return seen, event, callbacks


def test_unresolvable_address():

    with pytest.raises(swstat.transport.TransportConnectionError):
        swstat.Transport('no-such-host.invalid', 33996)


def test_send_reaches_server(server):

    transport = swstat.Transport('127.0.0.1', server.port)
    transport.start()

    request = frame.encode_poll(2, 42)
    pending = transport.send(request)

    assert server.next() == request
    assert pending.sequence_id == 2
    assert transport.stats()['sent'] == 1

    transport.stop()


def test_ack_pairs_with_pending(server):

    server.responder = lambda data: [data[:5]]

    seen, event, callbacks = collect()
    transport = swstat.Transport('127.0.0.1', server.port)
    transport.start(**callbacks)

    pending = transport.send(frame.encode_poll(9, 42))

    assert pending.wait_ack(2) == True
    assert event.wait(2) == True

    reply, matched = seen['ack'][0]
    assert reply.sequence_id == 9
    assert matched is pending
    assert transport.pending is None

    # No ack goes back for an ack.

    transport.stop()
    assert transport.stats()['acks'] == 0


def test_data_reply_is_acked(server, make_reply):

    request = frame.encode_poll(3, 0x0A0B0C0D)
    server.responder = lambda data: [make_reply(data, 0, [(1, 10)])]

    seen, event, callbacks = collect()
    transport = swstat.Transport('127.0.0.1', server.port)
    transport.start(**callbacks)
    transport.send(request)

    assert server.next() == request

    # The client acknowledges the data reply with its first five bytes.

    ack = server.next()
    assert ack == request[:5]

    assert event.wait(2) == True
    assert len(seen['data']) == 1
    assert seen['data'][0].entries == [(1, 10)]
    assert transport.stats()['acks'] == 1

    transport.stop()


def test_anomalous_is_acked_and_ignored(server):

    seen, event, callbacks = collect()
    transport = swstat.Transport('127.0.0.1', server.port)
    transport.start(**callbacks)
    transport.send(frame.encode_connect(1))
    server.next()

    server.send(b'\x04' * 10)

    assert server.next() == b'\x04' * 5
    assert event.wait(2) == True
    assert len(seen['anomalous']) == 1
    assert seen['data'] == []
    assert transport.is_running == True

    transport.stop()


def test_disconnect(server):

    seen, event, callbacks = collect()
    transport = swstat.Transport('127.0.0.1', server.port)
    transport.start(**callbacks)
    transport.send(frame.encode_connect(1))
    server.next()

    server.send(b'')

    assert transport.wait(2) == True
    assert seen['disconnect'] == [True]
    assert seen['error'] == []
    assert transport.error is None

    transport.stop()


def test_failing_callback_keeps_loop_alive(server, make_reply):

    received = list()

    def on_data(reply):
        received.append(reply)
        if len(received) == 1:
            raise RuntimeError('renderer failure')

    transport = swstat.Transport('127.0.0.1', server.port)
    transport.start(on_data=on_data)
    request = frame.encode_poll(2, 1)
    transport.send(request)
    server.next()

    server.send(make_reply(request))
    server.send(make_reply(request))

    server.next()
    server.next()

    transport.stop()
    assert len(received) == 2


def test_send_after_close():

    transport = swstat.Transport('127.0.0.1', 9)
    transport.close()

    with pytest.raises(swstat.TransportError):
        transport.send(frame.encode_connect(1))


def test_stop_is_prompt(server):

    transport = swstat.Transport('127.0.0.1', server.port)
    transport.start()
    transport.stop()

    assert transport.is_running == False
    assert transport.finished.is_set() == True
    assert transport.error is None


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
