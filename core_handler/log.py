################################################################################
# Copyright (c) 2022 Wind River Systems, Inc.
#
# SPDX-License-Identifier: Apache-2.0
#
################################################################################

""" Define logger for the core handler"""

import logging
from logging import handlers
import sys

from core_handler.common.constants import SYSLOG_ADDRESS


LOG = logging.getLogger("core-handler")


def _isConnected(handler):
    """Whether the syslog handler got an open socket.

    Recent Python versions do not raise when the syslog socket cannot be
    connected, the handler is created with a closed socket instead.
    """
    sock = getattr(handler, 'socket', None)
    return sock is not None and sock.fileno() != -1


def _syslogHandler(address):
    try:
        handler = handlers.SysLogHandler(
            address=address, facility=handlers.SysLogHandler.LOG_USER)
    except OSError:
        return None
    if not _isConnected(handler):
        handler.close()
        return None
    return handler


def setup_logging(log_level=logging.INFO, address=SYSLOG_ADDRESS):
    """Send the handler logs to syslog, on the user facility.

    stdout is never used since the handler may be part of a pipeline.
    When the syslog socket is not available the logs go to stderr.
    """
    handler = _syslogHandler(address)
    if handler is not None:
        formatter = logging.Formatter("%(name)s[%(process)d]: "
                                      "%(levelname)s %(message)s")
    else:
        handler = logging.StreamHandler(stream=sys.stderr)
        formatter = logging.Formatter("%(asctime)s %(name)s[%(process)d] "
                                      "%(levelname)s %(message)s",
                                      datefmt='%FT%T')
    handler.setFormatter(formatter)
    LOG.addHandler(handler)
    LOG.setLevel(log_level)
    return handler
