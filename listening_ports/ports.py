from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set

from listening_ports.parser import TCP, UDP, SocketRecord, check_protocol

# UDP has no listen state; bound receiving sockets show up as UNCONN
LISTENING_STATES = {
    TCP: {'LISTEN'},
    UDP: {'UNCONN', 'LISTEN'},
}


@dataclass(frozen=True)
class PortRange:
    first: int
    last: int

    @property
    def size(self) -> int:
        return self.last - self.first + 1

    def __contains__(self, port) -> bool:
        return self.first <= port <= self.last

    def ports(self) -> range:
        return range(self.first, self.last + 1)


PRIVILEGED = PortRange(1, 1023)
UNPRIVILEGED = PortRange(1024, 65535)

RANGES = {
    'privileged': PRIVILEGED,
    'unprivileged': UNPRIVILEGED,
}


def listening_ports(records: Iterable[SocketRecord], protocol: str) -> Set[int]:
    """Ports of the given protocol with at least one listening socket"""
    check_protocol(protocol)
    states = LISTENING_STATES[protocol]
    return {
        record.local_port
        for record in records
        if record.protocol == protocol
        and record.state in states
        and record.local_port != 0
    }


def partition(ports: Iterable[int]) -> Dict[str, Set[int]]:
    buckets = {name: set() for name in RANGES}
    for port in ports:
        for name, port_range in RANGES.items():
            if port in port_range:
                buckets[name].add(port)
                break
    return buckets


def _presence(port_range: PortRange, used: Iterable[int]) -> bytearray:
    present = bytearray(port_range.size)
    for port in used:
        if port in port_range:
            present[port - port_range.first] = 1
    return present


def _collect(port_range: PortRange, present: bytearray, flag: int) -> Optional[List[int]]:
    ports = [
        port for port, seen in zip(port_range.ports(), present) if seen == flag
    ]
    # Callers branch on presence: an empty selection is reported as None
    return ports or None


def used_ports(port_range: PortRange, used: Iterable[int]) -> Optional[List[int]]:
    """
    Ascending listening ports within port_range, or None if there are none.
    Ports outside the range are ignored.
    """
    return _collect(port_range, _presence(port_range, used), 1)


def free_ports(port_range: PortRange, used: Iterable[int]) -> Optional[List[int]]:
    """
    Ascending ports of port_range with no listener, or None when every port
    in the range is in use.
    """
    return _collect(port_range, _presence(port_range, used), 0)
