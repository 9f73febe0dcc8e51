from .sources import (
    CollectorError,
    ProcessSource,
    PsutilProcessSource,
    SocketSource,
    collect_sockets,
    get_socket_source,
)
