from __future__ import annotations
from typing import Dict, Iterable, List

from ..models import Proc, Protocol, RawSocket, SocketRecord, TcpState

def join_socket(raw: RawSocket, procs: Dict[int, str]) -> SocketRecord:
    """Resolve the pids of one raw socket against a pid -> name snapshot.

    Pids missing from the snapshot keep their id with an empty name; the
    socket itself is never dropped. UDP loses state and remote endpoint,
    TCP always ends up with a state.
    """
    owners = [Proc(pid=pid, name=procs.get(pid, "")) for pid in raw.pids]
    raddr, rport, state = raw.raddr, raw.rport, raw.state
    if raw.protocol is Protocol.UDP:
        raddr = rport = state = None
    elif state is None:
        state = TcpState.UNKNOWN
    if raddr is None or rport is None:
        raddr = rport = None
    return SocketRecord(procs=owners, laddr=raw.laddr, lport=raw.lport,
                        raddr=raddr, rport=rport, protocol=raw.protocol,
                        state=state, family=raw.family)

def join_all(raws: Iterable[RawSocket], procs: Dict[int, str]) -> List[SocketRecord]:
    return [join_socket(r, procs) for r in raws]

def sort_by_local_port(records: Iterable[SocketRecord]) -> List[SocketRecord]:
    # sorted() is stable: equal ports keep discovery order
    return sorted(records, key=lambda s: s.lport)
