from __future__ import annotations
from typing import List

from ..collectors import ProcessSource, SocketSource, collect_sockets
from ..config import FAMILIES, PROTOCOLS
from ..models import SocketRecord
from .join import join_all, sort_by_local_port
from .render import render_report

def take_snapshot(procs_src: ProcessSource, sock_src: SocketSource) -> List[SocketRecord]:
    """Processes first, then IPv4 and IPv6 sockets, joined and sorted by local port.

    CollectorError from the socket source propagates.
    """
    procs = procs_src.snapshot()
    raws = collect_sockets(sock_src, FAMILIES, PROTOCOLS)
    return sort_by_local_port(join_all(raws, procs))

def build_report(procs_src: ProcessSource, sock_src: SocketSource, all_owners: bool = False) -> List[str]:
    return render_report(take_snapshot(procs_src, sock_src), all_owners)
