""" Wire constants for the SwUDP statistics protocol.

    Keep these in one place; the codec, the transport, and the renderer all
    agree on frame sizes and opcodes through this module.
"""

default_port = 33996

# The largest datagram either side will produce or accept. Outbound frames
# are clamped to this size, inbound reads use it as the buffer size.

maximum_size = 256

ack_size = 5
header_size = 15
connect_size = 6

# Offsets within the 15-byte header.

status_offset = header_size
entries_offset = header_size + 1
flags_offset = 11
length_offset = 12
opcode_offset = 14

# The sequence id 0 is the SYN of the SwUDP handshake; 1 is the
# error-ack value and is never used for a real message.

syn = 0
error_ack = 1

connect_marker = 0xFD

# Fixed statistics token carried in every request header. The server
# compares it to its own token before answering a statistics request.

signature = b'\x21\x39\xff\xb2'

STATS = 0xF0
CALL = 0xF1

OK = 0

# Status codes returned by the server in place of a payload.

status_names = {
    OK: 'ok',
    240: 'not handled',
    241: 'incorrect length',
    242: 'not enough arguments',
    243: 'incorrect argument',
    244: 'incorrect auth type',
    245: 'user not found',
    246: 'incorrect token',
    247: 'enemy not found',
    248: 'waiting for enemy',
    249: 'incorrect name',
    250: 'incorrect password',
    251: 'incorrect email',
    252: 'name already exists',
    253: 'function code not found',
    254: 'server is going to stop',
}


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
