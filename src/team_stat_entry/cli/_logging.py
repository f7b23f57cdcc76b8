"""Log routing for the ``stat-entry`` command."""

import logging
import sys
from typing import TextIO

HANDLER_NAME = "stat-entry"
PACKAGE_LOGGER = "team_stat_entry"
_HTTP_LOGGERS = ("httpx", "httpcore")


def configure_logging(*, verbose: bool = False, stream: TextIO | None = None) -> logging.Handler:
    """Attach one handler to the root logger, replacing any installed earlier.

    Without *verbose* only warnings get through, which keeps retry notices and
    entry errors visible next to the command's own output. With *verbose* the
    package logs at DEBUG and the HTTP client logs each request.
    """
    root = logging.getLogger()
    for old in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(old)
        old.close()

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(levelname)s [%(name)s] %(message)s"))
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in _HTTP_LOGGERS:
        logging.getLogger(name).setLevel(logging.INFO if verbose else logging.WARNING)
    return handler
