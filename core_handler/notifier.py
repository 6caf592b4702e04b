################################################################################
# Copyright (c) 2022 Wind River Systems, Inc.
#
# SPDX-License-Identifier: Apache-2.0
#
################################################################################
import socket
import subprocess

from .common.constants import DEFAULT_NOTIFY_TIMEOUT
from .common.constants import UNKNOWN_HOST
from .log import LOG


def _getHostnames():
    try:
        hostname = socket.gethostname()
    except OSError as e:
        LOG.error("gethostname error: %s" % e)
        return UNKNOWN_HOST, UNKNOWN_HOST
    # getfqdn returns the hostname back when it can not be resolved
    return hostname, socket.getfqdn(hostname)


def compose_message(exe_name, core_dir, core_name):
    hostname, fqdn = _getHostnames()
    return ("Subject: [core_dump] %s crashed on %s\r\n\r\n"
            "!!!!! Crash encountered on %s !!!!!!!!!\r\n"
            "executable name: %s\r\n"
            "core file name: %s/%s\r\n" %
            (exe_name, hostname, fqdn, exe_name, core_dir, core_name))


def notify(exe_name, core_dir, core_name, command,
           timeout=DEFAULT_NOTIFY_TIMEOUT):
    """Send the crash email through command, e.g. sendmail.

    The message is written to the command stdin. Errors are logged and
    returned, never raised.

    Parameters
    ----------
    exe_name : str
        Name of the executable that dumped core
    core_dir : str
        The core directory
    core_name : str
        Name of the core file
    command : list
        Command and arguments, nothing is sent when empty
    timeout : int
        Seconds to wait for the command to finish

    Returns
    -------
    Exception or None
    """
    if not command:
        return None

    message = compose_message(exe_name, core_dir, core_name)
    try:
        LOG.info("Sending core dump notification. Command: %s" % command)
        subprocess.run(command, input=message.encode(), check=True,
                       stdout=subprocess.DEVNULL, timeout=timeout)
    except (OSError, subprocess.SubprocessError) as e:
        LOG.error("Failed to send core dump notification: %s" % e)
        return e
    return None
