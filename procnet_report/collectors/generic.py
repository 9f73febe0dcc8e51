from __future__ import annotations
import socket
from typing import FrozenSet, List, Set, Tuple

import psutil

from ..models import Family, Protocol, RawSocket, TcpState
from ..utils.net import family_of, parse_ip
from .sources import CollectorError, skip_entry

KINDS = {Family.IPV4: 'inet4', Family.IPV6: 'inet6'}
PROTO = {socket.SOCK_STREAM: Protocol.TCP, socket.SOCK_DGRAM: Protocol.UDP}

TCP_STATE = {
    psutil.CONN_ESTABLISHED: TcpState.ESTABLISHED,
    psutil.CONN_SYN_SENT: TcpState.SYN_SENT,
    psutil.CONN_SYN_RECV: TcpState.SYN_RECEIVED,
    psutil.CONN_FIN_WAIT1: TcpState.FIN_WAIT1,
    psutil.CONN_FIN_WAIT2: TcpState.FIN_WAIT2,
    psutil.CONN_TIME_WAIT: TcpState.TIME_WAIT,
    psutil.CONN_CLOSE: TcpState.CLOSED,
    psutil.CONN_CLOSE_WAIT: TcpState.CLOSE_WAIT,
    psutil.CONN_LAST_ACK: TcpState.LAST_ACK,
    psutil.CONN_LISTEN: TcpState.LISTEN,
    psutil.CONN_CLOSING: TcpState.CLOSING,
    "DELETE_TCB": TcpState.DELETE_TCB,
}

def _addr(a) -> Tuple[str, int]:
    return (a.ip if hasattr(a, 'ip') else a[0], a.port if hasattr(a, 'port') else a[1])

class PsutilSocketSource:
    """Cross-platform socket table via psutil.net_connections()."""
    name = "psutil"

    def sockets(self, family: Family, protocols: FrozenSet[Protocol]) -> List[RawSocket]:
        try:
            conns = psutil.net_connections(kind=KINDS[family])
        except (psutil.Error, OSError) as e:
            raise CollectorError(f"psutil.net_connections(kind={KINDS[family]!r}): {e}") from e

        sockets: List[RawSocket] = []
        seen: Set[tuple] = set()
        for c in conns:
            try:
                proto = PROTO[c.type]
                if family_of(c.family) is not family:
                    raise ValueError(f"unexpected family {c.family!r}")
                if not c.laddr:
                    raise ValueError("no local address")
                # SO_REUSEPORT sockets share an endpoint, only identical rows are dropped
                key = tuple(c)
                if key in seen:
                    continue
                lip, lport = _addr(c.laddr)
                s = RawSocket(protocol=proto, family=family,
                              laddr=parse_ip(lip, family), lport=int(lport))
                if proto is Protocol.TCP:
                    s.state = TCP_STATE.get(c.status, TcpState.UNKNOWN)
                    if c.raddr:
                        rip, rport = _addr(c.raddr)
                        s.raddr, s.rport = parse_ip(rip, family), int(rport)
            except (KeyError, ValueError, TypeError) as e:
                skip_entry(e)
                continue
            if proto not in protocols:
                continue
            s.add_pid(c.pid)
            seen.add(key)
            sockets.append(s)
        return sockets
