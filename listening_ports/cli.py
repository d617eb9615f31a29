"""Command-line interface and argument parsing for listening-ports."""

import argparse

VERSION = '0.3.0'

# Global args storage (set by parse_args)
_args = None


def parse_args(argv=None):
    """Parse command-line arguments. Handles --version and exits."""
    global _args
    parser = argparse.ArgumentParser(
        prog='listening-ports',
        description='Report listening and free TCP/UDP ports on this host',
    )
    parser.add_argument('--version', action='version', version=f'listening-ports {VERSION}')
    parser.add_argument('--debug', action='store_true', help='Log parsing and timing details to stderr')
    parser.add_argument('--provider', choices=['ss', 'psutil'],
                        help='Where socket tables come from (default: $PORTS_PROVIDER or ss)')
    parser.add_argument('--protocol', action='append', choices=['tcp', 'udp'],
                        help='Protocol to report, may be repeated (default: both)')
    parser.add_argument('--range', dest='ranges', action='append', choices=['privileged', 'unprivileged'],
                        help='Port range to report, may be repeated (default: both)')
    parser.add_argument('--used', action='store_true', help='Only report ports in use')
    parser.add_argument('--free', action='store_true', help='Only report free ports')
    parser.add_argument('--format', choices=['json', 'text'], default='json',
                        help='Output format (default: json)')
    _args = parser.parse_args(argv)
    return _args


def get_args():
    """Get parsed arguments. Returns None if parse_args() hasn't been called."""
    return _args
