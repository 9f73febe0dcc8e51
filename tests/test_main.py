"""Tests for the command line entry point."""

import pytest

from procnet_report import main as cli
from procnet_report.collectors import CollectorError
from procnet_report.config import CFG
from procnet_report.config import init_cfg_from_args

from . import FakeProcessSource
from . import FakeSocketSource
from . import tcp
from . import udp


@pytest.fixture
def fake_sources(monkeypatch):
    procs = FakeProcessSource({4: "nginx", 5: "dnsmasq"})
    socks = FakeSocketSource(v4=[udp(53, pids=[5]), tcp(80, pids=[4])])
    picked = []

    def get_socket_source(name):
        picked.append(name)
        return socks

    monkeypatch.setattr(cli, "PsutilProcessSource", lambda: procs)
    monkeypatch.setattr(cli, "get_socket_source", get_socket_source)
    return picked


def test_defaults():
    cfg = init_cfg_from_args(cli.parse_args([]))
    assert cfg == CFG(source="auto", all_owners=False)


def test_flags():
    cfg = init_cfg_from_args(cli.parse_args(["--source", "ss", "--all-owners"]))
    assert cfg.source == "ss"
    assert cfg.all_owners


def test_cfg_takes_source_as_given():
    cfg = init_cfg_from_args(cli.parse_args(["--source", "psutil"]))
    assert cfg.source == "psutil"


def test_help_says_flags_are_optional(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.parse_args(["--help"])
    assert exc.value.code == 0
    out = " ".join(capsys.readouterr().out.split())
    assert "All flags are optional" in out
    assert "--all-owners" in out


def test_bad_source_rejected():
    with pytest.raises(SystemExit):
        cli.parse_args(["--source", "netlink"])


def test_prints_report(fake_sources, capsys):
    cli.main([])
    out = capsys.readouterr().out.splitlines()
    assert fake_sources == ["auto"]
    assert out[1] == "TCP socket information"
    assert "nginx (4)" in out[3]
    assert out[4] == ""
    assert out[6] == "UDP socket information"
    assert "dnsmasq (5)" in out[8]
    assert len(out) == 9


def test_fatal_collector_error(monkeypatch, capsys):
    def get_socket_source(name):
        return FakeSocketSource(error=CollectorError("permission denied"))

    monkeypatch.setattr(cli, "PsutilProcessSource", FakeProcessSource)
    monkeypatch.setattr(cli, "get_socket_source", get_socket_source)
    with pytest.raises(SystemExit) as exc:
        cli.main([])
    assert exc.value.code == 1
    out = capsys.readouterr().out
    assert "[error] Failed to get socket information: permission denied" in out
    assert "TCP socket information" not in out
