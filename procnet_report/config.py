from __future__ import annotations
from dataclasses import dataclass

from .models import Family, Protocol

@dataclass
class CFG:
    source: str = "auto"
    all_owners: bool = False

SOURCES = ("auto", "psutil", "ss", "windows")

# Queried in this order; the two result lists are concatenated before sorting.
FAMILIES = (Family.IPV4, Family.IPV6)
PROTOCOLS = frozenset({Protocol.TCP, Protocol.UDP})

RULE = "-" * 30
TCP_TITLE = "TCP socket information"
UDP_TITLE = "UDP socket information"

ADDR_WIDTH = 30
PORT_WIDTH = 5
UDP_PORT_WIDTH = 8
RPORT_WIDTH = 6
LABEL_WIDTH = 30

UNKNOWN_PROCESS = "Unknown Process"
UNKNOWN_STATE = "UNKNOWN"
NO_ADDR = "-"

def init_cfg_from_args(args) -> CFG:
    cfg = CFG()
    cfg.source = getattr(args, "source", None) or "auto"
    cfg.all_owners = bool(getattr(args, "all_owners", False))
    return cfg
