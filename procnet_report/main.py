from __future__ import annotations
import argparse, sys
from .config import SOURCES, init_cfg_from_args
from .collectors import CollectorError, PsutilProcessSource, get_socket_source
from .report import build_report

def parse_args(argv=None):
    ap = argparse.ArgumentParser(
        description='Print TCP and UDP sockets with their owning processes, sorted by local port',
        epilog='All flags are optional; without flags the socket backend is picked per platform '
               'and only the first owning process of each socket is shown.')
    ap.add_argument('--source', choices=SOURCES, default='auto',
                    help='socket table backend (auto: windows on Windows, ss on Linux, psutil elsewhere)')
    ap.add_argument('--all-owners', action='store_true', help='list every owning process instead of only the first')
    return ap.parse_args(argv)

def main(argv=None):
    args = parse_args(argv)
    cfg = init_cfg_from_args(args)

    try:
        sock_src = get_socket_source(cfg.source)
        lines = build_report(PsutilProcessSource(), sock_src, cfg.all_owners)
    except CollectorError as e:
        print(f"[error] Failed to get socket information: {e}")
        sys.exit(1)

    for line in lines:
        print(line)

if __name__ == '__main__':
    main()
