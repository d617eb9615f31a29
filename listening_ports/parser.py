"""Parsing of `ss` socket-table text into socket records.

Accepts the tabular output of `ss -tln`/`ss -uln`, with or without the header
line (`-H`) and with or without the leading Netid column (`ss -tuln`):

    Netid State  Recv-Q Send-Q Local Address:Port Peer Address:Port Process
    tcp   LISTEN 0      4096         0.0.0.0:22        0.0.0.0:*
    udp   UNCONN 0      0      127.0.0.53%lo:53        0.0.0.0:*

Rows that do not look like data (headers, blank lines, truncated or garbled
rows) are skipped one by one instead of failing the whole table.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

from listening_ports.debug import log

TCP = 'tcp'
UDP = 'udp'
PROTOCOLS = (TCP, UDP)

# Socket states as printed by ss
SS_STATES = {
    'UNKNOWN',
    'ESTAB',
    'SYN-SENT',
    'SYN-RECV',
    'FIN-WAIT-1',
    'FIN-WAIT-2',
    'TIME-WAIT',
    'UNCONN',
    'CLOSE-WAIT',
    'LAST-ACK',
    'LISTEN',
    'CLOSING',
}

MAX_PORT = 65535

# ASCII digits only; int() would accept other Unicode digits
PORT_RE = re.compile(r'[0-9]{1,5}')

# State, Recv-Q and Send-Q precede the local address
LOCAL_ADDRESS_OFFSET = 3


@dataclass(frozen=True)
class SocketRecord:
    protocol: str
    local_port: int
    state: str


@dataclass(frozen=True)
class SocketTable:
    """Records parsed from one provider snapshot."""
    records: tuple
    skipped: int = 0

    @property
    def empty(self) -> bool:
        return not self.records


def check_protocol(protocol: str) -> str:
    if protocol not in PROTOCOLS:
        raise ValueError(f"Unknown protocol {protocol!r}, expected one of {PROTOCOLS}")
    return protocol


def _netid_protocol(token: str) -> Optional[str]:
    """Map a Netid column value (tcp, tcp6, udp, udp6) to a protocol."""
    token = token.lower()
    for protocol in PROTOCOLS:
        if token == protocol or token == protocol + '6':
            return protocol
    return None


def parse_port(local_address: str) -> Optional[int]:
    """
    Extract the port from an ss local address field.

    Handles `1.2.3.4:80`, `[::1]:80`, `*:80`, `[::]:80` and interface-scoped
    forms like `127.0.0.53%lo:53` or `[fe80::1]%eth0:546`. Returns None when
    there is no numeric port in range.
    """
    host, sep, port_str = local_address.rpartition(':')
    if not sep or not host or not PORT_RE.fullmatch(port_str):
        return None
    port = int(port_str)
    if port > MAX_PORT:
        return None
    return port


def parse_line(line: str, protocol: str) -> Optional[SocketRecord]:
    """Parse one line of ss output, or return None if it is not a data row."""
    tokens = line.split()
    if not tokens:
        return None

    state_index = 0
    netid = _netid_protocol(tokens[0])
    if netid is not None:
        protocol = netid
        state_index = 1

    if len(tokens) <= state_index + LOCAL_ADDRESS_OFFSET:
        return None

    state = tokens[state_index].upper()
    if state not in SS_STATES:
        return None

    port = parse_port(tokens[state_index + LOCAL_ADDRESS_OFFSET])
    if port is None:
        return None

    return SocketRecord(protocol=protocol, local_port=port, state=state)


def parse_table(text: str, protocol: str) -> SocketTable:
    """Parse a whole socket table, skipping lines that are not data rows."""
    check_protocol(protocol)
    records: List[SocketRecord] = []
    skipped = 0

    for line in text.splitlines():
        if not line.strip():
            continue
        record = parse_line(line, protocol)
        if record is None:
            skipped += 1
            log(f"Skipping non-data {protocol} socket line: {line.strip()!r}", 'debug')
            continue
        records.append(record)

    # A lone header line is what ss prints when nothing is listening
    if not records and skipped > 1:
        log(f"No data rows in {protocol} socket table ({skipped} lines skipped)", 'warn')

    return SocketTable(records=tuple(records), skipped=skipped)
