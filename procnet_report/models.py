from __future__ import annotations
import enum
from dataclasses import dataclass, field
from ipaddress import IPv4Address, IPv6Address
from typing import List, Optional, Union

IPAddress = Union[IPv4Address, IPv6Address]

class Protocol(enum.Enum):
    TCP = "tcp"
    UDP = "udp"

class Family(enum.Enum):
    IPV4 = 4
    IPV6 = 6

    @property
    def tag(self) -> str:
        return str(self.value)

class TcpState(enum.Enum):
    CLOSED = "CLOSED"
    LISTEN = "LISTEN"
    SYN_SENT = "SYN_SENT"
    SYN_RECEIVED = "SYN_RECEIVED"
    ESTABLISHED = "ESTABLISHED"
    FIN_WAIT1 = "FIN_WAIT1"
    FIN_WAIT2 = "FIN_WAIT2"
    CLOSE_WAIT = "CLOSE_WAIT"
    CLOSING = "CLOSING"
    LAST_ACK = "LAST_ACK"
    TIME_WAIT = "TIME_WAIT"
    DELETE_TCB = "DELETE_TCB"
    UNKNOWN = "UNKNOWN"

@dataclass
class Proc:
    pid: int
    name: str

@dataclass
class RawSocket:
    """One socket as reported by a SocketSource, before process names are joined."""
    protocol: Protocol
    family: Family
    laddr: IPAddress
    lport: int
    raddr: Optional[IPAddress] = None
    rport: Optional[int] = None
    state: Optional[TcpState] = None
    pids: List[int] = field(default_factory=list)

    def add_pid(self, pid: Optional[int]) -> None:
        if pid and pid not in self.pids:
            self.pids.append(pid)

@dataclass
class SocketRecord:
    procs: List[Proc]
    laddr: IPAddress
    lport: int
    raddr: Optional[IPAddress]
    rport: Optional[int]
    protocol: Protocol
    state: Optional[TcpState]  # None for UDP
    family: Family
