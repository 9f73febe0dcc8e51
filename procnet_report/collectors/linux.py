import re
import subprocess
from typing import FrozenSet, List, Tuple

from ..models import Family, Protocol, RawSocket, TcpState
from ..utils.net import parse_ip
from .sources import CollectorError, skip_entry

SS_RE = re.compile(
    r"^(?P<netid>tcp|udp)\s+(?P<state>\S+)\s+\d+\s+\d+\s+(?P<laddr>\S+)\s+(?P<raddr>\S+)(?:\s+(?P<users>.*))?$")
PID_RE = re.compile(r"\(\"(?P<name>[^\"]*)\",pid=(?P<pid>\d+)")

FAMILY_FLAG = {Family.IPV4: "-4", Family.IPV6: "-6"}

TCP_STATE = {
    "ESTAB": TcpState.ESTABLISHED,
    "SYN-SENT": TcpState.SYN_SENT,
    "SYN-RECV": TcpState.SYN_RECEIVED,
    "FIN-WAIT-1": TcpState.FIN_WAIT1,
    "FIN-WAIT-2": TcpState.FIN_WAIT2,
    "TIME-WAIT": TcpState.TIME_WAIT,
    "UNCONN": TcpState.CLOSED,
    "CLOSE-WAIT": TcpState.CLOSE_WAIT,
    "LAST-ACK": TcpState.LAST_ACK,
    "LISTEN": TcpState.LISTEN,
    "CLOSING": TcpState.CLOSING,
}

def parse_addr(addr: str) -> Tuple[str, int]:
    """
    Supports:
      - '1.2.3.4:5678', '127.0.0.53%lo:53'
      - '[::1]:443', '[fe80::1]%eth0:546', ':::22'
      - '0.0.0.0:*', '*:443', '*:*', '*'
    Raises ValueError for anything without a usable port.
    """
    if not addr or addr == '*':
        return ('*', 0)
    if ':' not in addr:
        raise ValueError(f"no port in address {addr!r}")
    host, port = addr.rsplit(':', 1)
    if port == '*':
        return (host or '*', 0)
    return (host or '*', int(port))

def parse_line(line: str, family: Family) -> RawSocket:
    m = SS_RE.match(line)
    if not m:
        raise ValueError(f"unrecognized ss line: {line!r}")

    proto = Protocol(m.group("netid"))
    lhost, lport = parse_addr(m.group("laddr"))
    s = RawSocket(protocol=proto, family=family, laddr=parse_ip(lhost, family), lport=lport)

    if proto is Protocol.TCP:
        s.state = TCP_STATE.get(m.group("state").upper(), TcpState.UNKNOWN)
        rhost, rport = parse_addr(m.group("raddr"))
        s.raddr, s.rport = parse_ip(rhost, family), rport

    for mpid in PID_RE.finditer(m.group("users") or ""):
        s.add_pid(int(mpid.group("pid")))
    return s

class SsSocketSource:
    """Linux socket table from iproute2's `ss`."""
    name = "ss"

    def sockets(self, family: Family, protocols: FrozenSet[Protocol]) -> List[RawSocket]:
        # always both -t and -u so the Netid column is printed
        cmd = ["ss", "-a", "-n", "-p", "-t", "-u", FAMILY_FLAG[family]]
        try:
            out = subprocess.check_output(cmd, text=True, stderr=subprocess.DEVNULL)
        except (OSError, subprocess.CalledProcessError) as e:
            raise CollectorError(f"{' '.join(cmd)}: {e}") from e

        sockets: List[RawSocket] = []
        for line in out.splitlines():
            if not line.strip() or line.startswith(("Netid", "State")):
                continue
            try:
                s = parse_line(line, family)
            except ValueError as e:
                skip_entry(e)
                continue
            if s.protocol in protocols:
                sockets.append(s)
        return sockets
