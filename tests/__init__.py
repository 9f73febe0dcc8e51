"""Shared fakes for the socket report tests."""

from ipaddress import ip_address

from procnet_report.models import Family
from procnet_report.models import Protocol
from procnet_report.models import RawSocket
from procnet_report.models import TcpState


def tcp(lport, pids=(), laddr="0.0.0.0", state=TcpState.LISTEN,
        raddr=None, rport=None, family=Family.IPV4):
    return RawSocket(
        protocol=Protocol.TCP, family=family, laddr=ip_address(laddr),
        lport=lport, raddr=ip_address(raddr) if raddr else None,
        rport=rport, state=state, pids=list(pids))


def udp(lport, pids=(), laddr="0.0.0.0", family=Family.IPV4):
    return RawSocket(
        protocol=Protocol.UDP, family=family, laddr=ip_address(laddr),
        lport=lport, pids=list(pids))


class FakeProcessSource:

    def __init__(self, procs=None):
        self.procs = dict(procs or {})
        self.calls = 0

    def snapshot(self):
        self.calls += 1
        return dict(self.procs)


class FakeSocketSource:
    """Returns canned sockets per family and records the calls made."""

    name = "fake"

    def __init__(self, v4=(), v6=(), error=None):
        self.table = {Family.IPV4: list(v4), Family.IPV6: list(v6)}
        self.error = error
        self.calls = []

    def sockets(self, family, protocols):
        self.calls.append(family)
        if self.error is not None:
            raise self.error
        return [s for s in self.table[family] if s.protocol in protocols]
