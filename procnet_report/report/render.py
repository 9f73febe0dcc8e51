from __future__ import annotations
from typing import List, Sequence

from ..config import (ADDR_WIDTH, LABEL_WIDTH, NO_ADDR, PORT_WIDTH, RPORT_WIDTH, RULE,
                      TCP_TITLE, UDP_PORT_WIDTH, UDP_TITLE, UNKNOWN_PROCESS, UNKNOWN_STATE)
from ..models import Protocol, SocketRecord, TcpState

def process_label(s: SocketRecord, all_owners: bool = False) -> str:
    if not s.procs:
        return UNKNOWN_PROCESS
    owners = s.procs if all_owners else s.procs[:1]
    return ", ".join(f"{p.name} ({p.pid})" for p in owners)

def state_label(s: SocketRecord) -> str:
    return s.state.name if s.state else UNKNOWN_STATE

def tcp_line(s: SocketRecord, all_owners: bool = False) -> str:
    head = f"TCP{s.family.tag} {str(s.laddr):>{ADDR_WIDTH}}:{s.lport:<{PORT_WIDTH}}"
    label = process_label(s, all_owners)
    state = state_label(s)
    if s.state is TcpState.LISTEN:
        return f"{head}    {label:<{LABEL_WIDTH}} [{state}]"
    rport = s.rport if s.rport is not None else 0
    raddr = str(s.raddr) if s.raddr is not None else NO_ADDR
    return f"{head} -> {rport:>{RPORT_WIDTH}}:{raddr:<{ADDR_WIDTH}} {label:<{LABEL_WIDTH}} [{state}]"

def udp_line(s: SocketRecord, all_owners: bool = False) -> str:
    return (f"UDP{s.family.tag} {str(s.laddr):>{ADDR_WIDTH}}:{s.lport:<{UDP_PORT_WIDTH}} "
            f"{process_label(s, all_owners)}")

def render_tcp(records: Sequence[SocketRecord], all_owners: bool = False) -> List[str]:
    return [tcp_line(s, all_owners) for s in records if s.protocol is Protocol.TCP]

def render_udp(records: Sequence[SocketRecord], all_owners: bool = False) -> List[str]:
    return [udp_line(s, all_owners) for s in records if s.protocol is Protocol.UDP]

def render_report(records: Sequence[SocketRecord], all_owners: bool = False) -> List[str]:
    lines = [RULE, TCP_TITLE, RULE]
    lines += render_tcp(records, all_owners)
    lines += ["", RULE, UDP_TITLE, RULE]
    lines += render_udp(records, all_owners)
    return lines
