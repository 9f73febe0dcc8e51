from __future__ import annotations
from typing import FrozenSet, List
import ctypes, platform

from ..models import Family, Protocol, RawSocket, TcpState
from ..utils.net import ntohs16, ipv4_from_dword, ipv6_from_bytes, parse_ip
from .sources import CollectorError, skip_entry

AF_INET = 2
AF_INET6 = 23
AF = {Family.IPV4: AF_INET, Family.IPV6: AF_INET6}
TCP_TABLE_OWNER_PID_ALL = 5
UDP_TABLE_OWNER_PID = 1
ERROR_INSUFFICIENT_BUFFER = 122

TCP_STATE = {
    1: TcpState.CLOSED, 2: TcpState.LISTEN, 3: TcpState.SYN_SENT, 4: TcpState.SYN_RECEIVED,
    5: TcpState.ESTABLISHED, 6: TcpState.FIN_WAIT1, 7: TcpState.FIN_WAIT2, 8: TcpState.CLOSE_WAIT,
    9: TcpState.CLOSING, 10: TcpState.LAST_ACK, 11: TcpState.TIME_WAIT, 12: TcpState.DELETE_TCB,
}

def _ip(raw, family: Family):
    if family is Family.IPV4:
        return parse_ip(ipv4_from_dword(raw), family)
    return parse_ip(ipv6_from_bytes(bytes(raw.Byte)), family)

def decode_tcp_row(r, family: Family) -> RawSocket:
    s = RawSocket(protocol=Protocol.TCP, family=family,
                  laddr=_ip(r.localAddr, family), lport=ntohs16(r.localPort),
                  raddr=_ip(r.remoteAddr, family), rport=ntohs16(r.remotePort),
                  state=TCP_STATE.get(r.state, TcpState.UNKNOWN))
    s.add_pid(int(r.owningPid))
    return s

def decode_udp_row(r, family: Family) -> RawSocket:
    s = RawSocket(protocol=Protocol.UDP, family=family,
                  laddr=_ip(r.localAddr, family), lport=ntohs16(r.localPort))
    s.add_pid(int(r.owningPid))
    return s

def fetch_table(fn, af: int, table_class: int):
    """Call a GetExtended*Table function until the buffer is large enough.

    The table can grow between the size query and the fetch; the call then
    reports ERROR_INSUFFICIENT_BUFFER with the new size and is repeated.
    """
    size = ctypes.c_ulong(0)
    buf = None
    rc = fn(buf, ctypes.pointer(size), False, af, table_class, 0)
    while rc == ERROR_INSUFFICIENT_BUFFER:
        buf = ctypes.create_string_buffer(size.value)
        rc = fn(buf, ctypes.pointer(size), False, af, table_class, 0)
    if rc != 0 or buf is None:
        name = getattr(fn, "__name__", "GetExtendedTable")
        raise CollectorError(f"{name}(af={af}) failed with code {rc}")
    return buf

def _row_types():
    import ctypes.wintypes as wt

    class IN6_ADDR(ctypes.Structure):
        _fields_ = [("Byte", wt.BYTE * 16)]

    class MIB_TCPROW_OWNER_PID(ctypes.Structure):
        _fields_ = [("state", wt.DWORD), ("localAddr", wt.DWORD), ("localPort", wt.DWORD),
                    ("remoteAddr", wt.DWORD), ("remotePort", wt.DWORD), ("owningPid", wt.DWORD)]

    class MIB_TCP6ROW_OWNER_PID(ctypes.Structure):
        _fields_ = [("localAddr", IN6_ADDR), ("localScopeId", wt.DWORD), ("localPort", wt.DWORD),
                    ("remoteAddr", IN6_ADDR), ("remoteScopeId", wt.DWORD), ("remotePort", wt.DWORD),
                    ("state", wt.DWORD), ("owningPid", wt.DWORD)]

    class MIB_UDPROW_OWNER_PID(ctypes.Structure):
        _fields_ = [("localAddr", wt.DWORD), ("localPort", wt.DWORD), ("owningPid", wt.DWORD)]

    class MIB_UDP6ROW_OWNER_PID(ctypes.Structure):
        _fields_ = [("localAddr", IN6_ADDR), ("localScopeId", wt.DWORD), ("localPort", wt.DWORD),
                    ("owningPid", wt.DWORD)]

    return {
        (Protocol.TCP, Family.IPV4): MIB_TCPROW_OWNER_PID,
        (Protocol.TCP, Family.IPV6): MIB_TCP6ROW_OWNER_PID,
        (Protocol.UDP, Family.IPV4): MIB_UDPROW_OWNER_PID,
        (Protocol.UDP, Family.IPV6): MIB_UDP6ROW_OWNER_PID,
    }

class IphlpapiSocketSource:
    """Windows owner-pid socket tables from Iphlpapi.dll."""
    name = "windows"

    def __init__(self):
        if platform.system() != "Windows":
            raise CollectorError("Iphlpapi.dll is only available on Windows")
        try:
            self.iphlpapi = ctypes.WinDLL('Iphlpapi.dll')
        except OSError as e:
            raise CollectorError(f"cannot load Iphlpapi.dll: {e}") from e
        self.rows = _row_types()

    def _table(self, proto: Protocol, family: Family):
        import ctypes.wintypes as wt

        if proto is Protocol.TCP:
            fn, table_class = self.iphlpapi.GetExtendedTcpTable, TCP_TABLE_OWNER_PID_ALL
        else:
            fn, table_class = self.iphlpapi.GetExtendedUdpTable, UDP_TABLE_OWNER_PID
        fn.restype = wt.DWORD

        buf = fetch_table(fn, AF[family], table_class)

        # dwNumEntries followed by the row array
        count = wt.DWORD.from_buffer(buf).value
        row_t = self.rows[(proto, family)]
        offset = ctypes.sizeof(wt.DWORD)
        return (row_t * count).from_buffer(buf, offset)

    def sockets(self, family: Family, protocols: FrozenSet[Protocol]) -> List[RawSocket]:
        sockets: List[RawSocket] = []
        for proto, decode in ((Protocol.TCP, decode_tcp_row), (Protocol.UDP, decode_udp_row)):
            if proto not in protocols:
                continue
            for r in self._table(proto, family):
                try:
                    sockets.append(decode(r, family))
                except (ValueError, OSError) as e:
                    skip_entry(e)
        return sockets
