"""Frame codec for the SwUDP statistics protocol.

Outbound frames are built as bytes; inbound datagrams are classified by
length alone and, for data replies, parsed into category/value entries.
Decoding never raises: anything unexpected degrades to :class:`Anomalous`
or to an unknown category.
"""

from __future__ import annotations

import struct
from typing import List, NamedTuple, Optional, Union

from . import fields


# sequence id, session id, sid, token, flags, length, opcode: 15 bytes.

HEADER_FORMAT = ">BIH4sBHB"

CONNECT_FORMAT = ">BIB"


class Header(NamedTuple):
    sequence_id: int
    session_id: int
    sid: int
    token: bytes
    flags: int
    length: int
    opcode: int


class Entry(NamedTuple):
    category: int
    value: int


class AckOnly(NamedTuple):
    """ The remote side received our last frame. *raw* is the ack itself,
        normally the sequence id followed by the session id.
    """

    raw: bytes

    @property
    def sequence_id(self) -> int:
        return self.raw[0]


class Disconnected(NamedTuple):
    pass


class Anomalous(NamedTuple):
    """ Longer than an ack, too short to carry a status byte."""

    raw: bytes


class DataReply(NamedTuple):
    header: Header
    status: int
    entries: List[Entry]


Reply = Union[AckOnly, Disconnected, Anomalous, DataReply]


def encode_connect(session_id: int) -> bytes:
    """Build the 6-byte connect frame: SYN id, session id, connect marker."""

    return struct.pack(CONNECT_FORMAT, fields.syn, session_id & 0xFFFFFFFF,
                       fields.connect_marker)


def encode_poll(sequence_id: int, session_id: int,
                command: Optional[Union[str, bytes]] = None,
                maximum: int = fields.maximum_size) -> bytes:
    """
    Build a request frame.

    Without a *command* this is a statistics request (opcode 0xF0). With a
    command the frame becomes a remote call (opcode 0xF1) and the command
    bytes follow the header, truncated to whatever fits in *maximum* bytes.
    The length field counts the opcode plus the appended bytes. A *maximum*
    outside the header size and the 256-byte buffer raises ValueError.
    """

    if maximum < fields.header_size:
        raise ValueError("maximum frame size %d is smaller than the header" % (maximum))

    if maximum > fields.maximum_size:
        raise ValueError("maximum frame size %d exceeds %d bytes" % (maximum, fields.maximum_size))

    if command is None:
        opcode = fields.STATS
        payload = b""
    else:
        opcode = fields.CALL
        if isinstance(command, str):
            command = command.encode("utf-8")
        payload = bytes(command[:maximum - fields.header_size])

    header = struct.pack(HEADER_FORMAT,
                         sequence_id & 0xFF,
                         session_id & 0xFFFFFFFF,
                         0,
                         fields.signature,
                         0,
                         1 + len(payload),
                         opcode)

    return header + payload


def encode_ack(datagram: bytes) -> bytes:
    """The acknowledgment for *datagram* is its first five bytes."""

    return bytes(datagram[:fields.ack_size])


def decode_header(frame: bytes) -> Header:
    """Parse the first 15 bytes of *frame*. Raises ValueError if too short."""

    if len(frame) < fields.header_size:
        raise ValueError("frame too short for a header: %d bytes" % (len(frame)))

    return Header._make(struct.unpack_from(HEADER_FORMAT, frame))


def decode_entries(body: bytes) -> List[Entry]:
    """
    Split *body* into (category, value) entries. Each entry occupies three
    bytes: the category, then a big-endian 16-bit value. A trailing partial
    entry is dropped.
    """

    entries = []
    usable = len(body) - len(body) % 3

    for offset in range(0, usable, 3):
        category, value = struct.unpack_from(">BH", body, offset)
        entries.append(Entry(category, value))

    return entries


def decode_reply(datagram: bytes) -> Reply:
    """Classify an inbound datagram by its length and parse data replies."""

    length = len(datagram)

    if length == 0:
        return Disconnected()

    if length <= fields.ack_size:
        return AckOnly(bytes(datagram))

    if length <= fields.header_size:
        return Anomalous(bytes(datagram))

    header = decode_header(datagram)
    status = datagram[fields.status_offset]
    entries = decode_entries(datagram[fields.entries_offset:])

    return DataReply(header, status, entries)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
