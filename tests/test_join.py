"""Tests for joining raw sockets with the process snapshot and sorting."""

from ipaddress import ip_address

from procnet_report.models import Family
from procnet_report.models import Proc
from procnet_report.models import Protocol
from procnet_report.models import RawSocket
from procnet_report.models import TcpState
from procnet_report.report import join_all
from procnet_report.report import join_socket
from procnet_report.report import sort_by_local_port

from . import tcp
from . import udp


class TestJoin:

    def test_resolved_pid(self):
        rec = join_socket(tcp(22, pids=[1234]), {1234: "sshd"})
        assert rec.procs == [Proc(1234, "sshd")]

    def test_unresolved_pid_keeps_socket(self):
        rec = join_socket(tcp(22, pids=[99]), {1234: "sshd"})
        assert rec.procs == [Proc(99, "")]
        assert rec.lport == 22

    def test_no_pids(self):
        rec = join_socket(udp(53), {1: "init"})
        assert rec.procs == []

    def test_owner_order_preserved(self):
        rec = join_socket(tcp(80, pids=[7, 3]), {3: "a", 7: "b"})
        assert [p.pid for p in rec.procs] == [7, 3]

    def test_udp_drops_state_and_remote(self):
        raw = RawSocket(
            protocol=Protocol.UDP, family=Family.IPV4,
            laddr=ip_address("10.0.0.1"), lport=5353,
            raddr=ip_address("10.0.0.2"), rport=5353,
            state=TcpState.ESTABLISHED)
        rec = join_socket(raw, {})
        assert rec.state is None
        assert rec.raddr is None
        assert rec.rport is None

    def test_tcp_without_state_gets_unknown(self):
        rec = join_socket(tcp(80, state=None), {})
        assert rec.state is TcpState.UNKNOWN

    def test_half_remote_is_cleared(self):
        raw = tcp(80, state=TcpState.ESTABLISHED, raddr="1.2.3.4")
        rec = join_socket(raw, {})
        assert rec.raddr is None and rec.rport is None

    def test_paired_remote_fields(self):
        raws = [
            tcp(80),
            tcp(81, state=TcpState.ESTABLISHED, raddr="1.2.3.4", rport=5000),
            tcp(82, state=TcpState.TIME_WAIT, rport=5000),
            udp(53),
        ]
        for rec in join_all(raws, {}):
            assert (rec.raddr is None) == (rec.rport is None)

    def test_family_and_protocol_carried(self):
        rec = join_socket(udp(53, laddr="::", family=Family.IPV6), {})
        assert rec.family is Family.IPV6
        assert rec.protocol is Protocol.UDP

    def test_join_does_not_mutate_raw(self):
        raw = udp(53, pids=[5])
        raw.state = TcpState.LISTEN
        join_socket(raw, {5: "dnsmasq"})
        assert raw.state is TcpState.LISTEN
        assert raw.pids == [5]


class TestSort:

    def test_ascending(self):
        recs = join_all([tcp(80), tcp(22), tcp(443)], {})
        assert [r.lport for r in sort_by_local_port(recs)] == [22, 80, 443]

    def test_ties_are_stable(self):
        raws = [
            tcp(80, pids=[1]),
            udp(53, pids=[2]),
            tcp(80, pids=[3], laddr="::", family=Family.IPV6),
            udp(53, pids=[4], laddr="::", family=Family.IPV6),
        ]
        out = sort_by_local_port(join_all(raws, {}))
        assert [r.procs[0].pid for r in out] == [2, 4, 1, 3]

    def test_empty(self):
        assert sort_by_local_port([]) == []
