from __future__ import annotations
import platform, shutil
from typing import Dict, FrozenSet, Iterable, List, Protocol as Interface

import psutil

from ..models import Family, Protocol, RawSocket

class CollectorError(RuntimeError):
    """The socket table could not be read at all."""

class SocketSource(Interface):
    name: str

    def sockets(self, family: Family, protocols: FrozenSet[Protocol]) -> List[RawSocket]:
        ...

class ProcessSource(Interface):
    def snapshot(self) -> Dict[int, str]:
        ...

def skip_entry(detail) -> None:
    print(f"[warn] Failed to get info for socket: {detail}")

class PsutilProcessSource:
    def snapshot(self) -> Dict[int, str]:
        procs: Dict[int, str] = {}
        # process_iter() already drops processes that vanish mid-iteration;
        # ad_value covers a name we are not allowed to read.
        for p in psutil.process_iter(['pid', 'name'], ad_value=None):
            procs[p.info['pid']] = p.info['name'] or ""
        return procs

def get_socket_source(name: str = "auto") -> SocketSource:
    system = platform.system()
    if name == "auto":
        if system == 'Windows':
            name = "windows"
        elif system == 'Linux' and shutil.which("ss"):
            name = "ss"
        else:
            name = "psutil"

    if name == "windows":
        from .windows import IphlpapiSocketSource
        return IphlpapiSocketSource()
    if name == "ss":
        from .linux import SsSocketSource
        return SsSocketSource()
    if name == "psutil":
        from .generic import PsutilSocketSource
        return PsutilSocketSource()
    raise CollectorError(f"unknown socket source: {name}")

def collect_sockets(source: SocketSource, families: Iterable[Family],
                    protocols: FrozenSet[Protocol]) -> List[RawSocket]:
    sockets: List[RawSocket] = []
    for family in families:
        sockets.extend(source.sockets(family, protocols))
    return sockets
