from .join import join_all, join_socket, sort_by_local_port
from .render import render_report, render_tcp, render_udp
from .snapshot import build_report, take_snapshot
