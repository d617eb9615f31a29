"""
Listening and free ports by protocol and range.

Every query takes a fresh snapshot from a socket-table provider, a callable
mapping a protocol name ('tcp' or 'udp') to raw `ss` text. When no provider
is given the configured one is used (see listening_ports.providers).

Results are an ascending list of ports, or None when the selection is empty.
Provider failures (ProviderUnavailable, ProviderExecutionFailure) propagate.
"""

from listening_ports.debug import debug, log
from listening_ports.parser import TCP, UDP, check_protocol, parse_table
from listening_ports.ports import (
    RANGES,
    free_ports,
    listening_ports,
    partition,
    used_ports,
)
from listening_ports.providers import get_provider


def _snapshot(protocol, provider=None):
    """Fetch one socket table and return the listening ports split by range."""
    check_protocol(protocol)
    if provider is None:
        provider = get_provider()
    text = provider(protocol)
    table = parse_table(text, protocol)
    if table.empty:
        log(f"No listening {protocol} sockets reported", 'debug')
    return partition(listening_ports(table.records, protocol))


def _used(protocol, name, provider):
    return used_ports(RANGES[name], _snapshot(protocol, provider)[name])


def _free(protocol, name, provider):
    return free_ports(RANGES[name], _snapshot(protocol, provider)[name])


@debug('privileged_tcp_used')
def privileged_tcp_used(provider=None):
    return _used(TCP, 'privileged', provider)

@debug('privileged_tcp_free')
def privileged_tcp_free(provider=None):
    return _free(TCP, 'privileged', provider)

@debug('unprivileged_tcp_used')
def unprivileged_tcp_used(provider=None):
    return _used(TCP, 'unprivileged', provider)

@debug('unprivileged_tcp_free')
def unprivileged_tcp_free(provider=None):
    return _free(TCP, 'unprivileged', provider)

@debug('privileged_udp_used')
def privileged_udp_used(provider=None):
    return _used(UDP, 'privileged', provider)

@debug('privileged_udp_free')
def privileged_udp_free(provider=None):
    return _free(UDP, 'privileged', provider)

@debug('unprivileged_udp_used')
def unprivileged_udp_used(provider=None):
    return _used(UDP, 'unprivileged', provider)

@debug('unprivileged_udp_free')
def unprivileged_udp_free(provider=None):
    return _free(UDP, 'unprivileged', provider)


@debug('port_report')
def port_report(protocol, provider=None):
    """
    Used and free ports for both ranges of one protocol, derived from a
    single snapshot so the four answers are consistent with each other.
    """
    buckets = _snapshot(protocol, provider)
    return {
        name: {
            'used': used_ports(port_range, buckets[name]),
            'free': free_ports(port_range, buckets[name]),
        }
        for name, port_range in RANGES.items()
    }
