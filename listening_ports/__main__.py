import json
import sys

from dotenv import load_dotenv

from listening_ports.cli import parse_args
from listening_ports.debug import log
from listening_ports.env import env_file
from listening_ports.errors import ProviderError
from listening_ports.providers import get_provider
from listening_ports.queries import port_report


def format_spans(ports):
    """Collapse an ascending port list into 'a-b' spans: [1, 2, 3, 7] -> '1-3,7'."""
    if not ports:
        return '-'
    spans = []
    start = prev = ports[0]
    for port in ports[1:]:
        if port == prev + 1:
            prev = port
            continue
        spans.append(f"{start}-{prev}" if start != prev else f"{start}")
        start = prev = port
    spans.append(f"{start}-{prev}" if start != prev else f"{start}")
    return ','.join(spans)


def build_report(args):
    provider = get_provider(args.provider)
    kinds = [kind for kind in ('used', 'free') if getattr(args, kind)] or ['used', 'free']
    report = {}
    for protocol in args.protocol or ['tcp', 'udp']:
        full = port_report(protocol, provider)
        report[protocol] = {
            name: {kind: full[name][kind] for kind in kinds}
            for name in args.ranges or ['privileged', 'unprivileged']
        }
    return report


def render_text(report):
    lines = []
    for protocol, ranges in report.items():
        for name, kinds in ranges.items():
            for kind, ports in kinds.items():
                lines.append(f"{protocol} {name} {kind}: {format_spans(ports)}")
    return '\n'.join(lines)


def start(argv=None):
    # Parse args first (handles --version and exits)
    args = parse_args(argv)
    load_dotenv(dotenv_path=env_file())

    try:
        report = build_report(args)
    except (ProviderError, ValueError) as e:
        log(str(e), 'error')
        sys.exit(1)

    if args.format == 'text':
        print(render_text(report))
    else:
        print(json.dumps(report))


if __name__ == '__main__':
    start()
