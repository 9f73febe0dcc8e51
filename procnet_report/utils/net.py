from __future__ import annotations
import socket, struct, ipaddress, ctypes

from ..models import Family, IPAddress

UNSPECIFIED = {Family.IPV4: "0.0.0.0", Family.IPV6: "::"}

def ntohs16(v: int) -> int:
    return socket.ntohs(v & 0xFFFF)

def ipv4_from_dword(dw: int) -> str:
    return socket.inet_ntoa(struct.pack('<I', ctypes.c_uint32(dw).value))

def ipv6_from_bytes(b: bytes) -> str:
    return socket.inet_ntop(socket.AF_INET6, b)

def parse_ip(host: str, family: Family) -> IPAddress:
    """Parse host into an address of the given family.

    '*' and '' mean the unspecified address. Brackets and a '%scope'
    suffix are stripped. Raises ValueError on anything else that does
    not parse, or when the address belongs to the other family.
    """
    host = host.strip('[]')
    if '%' in host:
        host = host.split('%', 1)[0].rstrip(']').strip('[')
    if host in ('', '*'):
        host = UNSPECIFIED[family]
    ip = ipaddress.ip_address(host)
    if ip.version != family.value:
        raise ValueError(f"{host} is not an IPv{family.value} address")
    return ip

def family_of(af: int) -> Family:
    if af == socket.AF_INET:
        return Family.IPV4
    if af == getattr(socket, 'AF_INET6', object()):
        return Family.IPV6
    raise ValueError(f"unsupported address family {af!r}")
