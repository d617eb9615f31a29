"""
Socket-table providers.

A provider is any callable taking a protocol name ('tcp' or 'udp') and
returning the raw text of a socket table restricted to listening sockets, in
the format printed by `ss -ln`. The query functions accept any such callable;
the ones here talk to the running host.
"""

import os
import socket
import subprocess

import psutil

from listening_ports.debug import log
from listening_ports.env import command_timeout, provider_name, ss_command
from listening_ports.errors import ProviderExecutionFailure, ProviderUnavailable
from listening_ports.parser import TCP, UDP, check_protocol

# Environment variables that can interfere with system commands when running
# from a PyInstaller bundle. These point to bundled libraries which can
# conflict with the system libraries ss links against.
SANITIZE_ENV_VARS = [
    'LD_LIBRARY_PATH',
    'LD_PRELOAD',
    'LIBPATH',
    'DYLD_LIBRARY_PATH',
    'DYLD_FALLBACK_LIBRARY_PATH',
]

# -l listening only, -n numeric ports, -H no header
SS_FLAGS = {
    TCP: '-tlnH',
    UDP: '-ulnH',
}

# Max chars of stderr carried into error messages
STDERR_LIMIT = 500


def get_clean_env() -> dict:
    """Return a copy of the environment without injected library paths."""
    env = os.environ.copy()
    for var in SANITIZE_ENV_VARS:
        env.pop(var, None)
    return env


def ss_provider(protocol: str) -> str:
    """
    Run ss for one protocol and return its standard output.

    Raises ProviderUnavailable if ss cannot be started and
    ProviderExecutionFailure if it times out or exits non-zero.
    """
    check_protocol(protocol)
    cmd = [ss_command(), SS_FLAGS[protocol]]
    timeout = command_timeout()
    log(f"Running {' '.join(cmd)} (timeout {timeout}s)", 'debug')

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            timeout=timeout,
            env=get_clean_env(),
        )
    except subprocess.TimeoutExpired as e:
        raise ProviderExecutionFailure(f"`{cmd[0]}` timed out after {timeout}s") from e
    except OSError as e:
        # FileNotFoundError, PermissionError and friends
        raise ProviderUnavailable(f"Unable to run `{cmd[0]}`: {e}") from e

    if result.returncode != 0:
        stderr = result.stderr.decode('utf-8', errors='replace').strip()
        message = f"`{cmd[0]}` exited with status {result.returncode}"
        if stderr:
            message += f": {stderr[:STDERR_LIMIT]}"
        raise ProviderExecutionFailure(message)

    return result.stdout.decode('utf-8', errors='replace')


def _ss_address(ip, port):
    if ':' in ip:
        return f"[{ip}]:{port}"
    return f"{ip}:{port}"


def _ss_line(state, laddr, family):
    peer = '[::]:*' if family == socket.AF_INET6 else '0.0.0.0:*'
    return f"{state} 0 0 {_ss_address(laddr.ip, laddr.port)} {peer}"


def psutil_provider(protocol: str) -> str:
    """
    Render listening sockets from psutil as ss-style lines.

    Used on hosts without iproute2. Listing sockets of other users needs
    root on some platforms; a refusal raises ProviderUnavailable.
    """
    check_protocol(protocol)
    try:
        connections = psutil.net_connections(kind=protocol)
    except psutil.AccessDenied as e:
        raise ProviderUnavailable(f"Not allowed to list {protocol} sockets: {e}") from e
    except psutil.Error as e:
        raise ProviderExecutionFailure(f"Unable to list {protocol} sockets: {e}") from e

    lines = []
    for conn in connections:
        if not conn.laddr:
            continue
        if protocol == TCP and conn.status == psutil.CONN_LISTEN:
            lines.append(_ss_line('LISTEN', conn.laddr, conn.family))
        elif protocol == UDP and not conn.raddr:
            lines.append(_ss_line('UNCONN', conn.laddr, conn.family))
    return '\n'.join(lines) + '\n' if lines else ''


PROVIDERS = {
    'ss': ss_provider,
    'psutil': psutil_provider,
}


def get_provider(name=None):
    """Look up a provider by name, defaulting to the configured one."""
    if name is None:
        name = provider_name()
    try:
        return PROVIDERS[name]
    except KeyError:
        raise ValueError(
            f"Unknown socket-table provider {name!r}, expected one of {sorted(PROVIDERS)}"
        ) from None
