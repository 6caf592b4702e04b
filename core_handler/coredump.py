################################################################################
# Copyright (c) 2022 Wind River Systems, Inc.
#
# SPDX-License-Identifier: Apache-2.0
#
################################################################################
import sys

from .common.constants import DEFAULT_MAX_SCAN
from .common.constants import DEFAULT_NOTIFY_TIMEOUT
from .common.exception import CoreDumpError
from .log import LOG
from .notifier import notify
from .retention import enforce
from .writer import write_coredump_file


def _exitStatus(e):
    return e.errno or 1


def _retainCoreFiles(core_dir, max_cores, max_scan):
    # Make sure we don't have too many cores sitting around
    try:
        result = enforce(core_dir, max_cores, max_scan)
    except OSError as e:
        LOG.error("Failed to list core files in %s: %s" % (core_dir, e))
        return None, _exitStatus(e)

    if result.failed:
        LOG.error("Failed to delete %d of %d extra core files in %s, "
                  "first error: %s" % (len(result.failed),
                                       result.matched - max_cores,
                                       core_dir, result.error))
    return result, 0


def CoreDumpHandler(core_dir, exe_name, max_cores, notify_command=None,
                    compression=None, max_scan=DEFAULT_MAX_SCAN,
                    notify_timeout=DEFAULT_NOTIFY_TIMEOUT, source=None):
    """Write the core image, delete the extra core files and notify.

    Returns the process exit status: the errno of the failure when the
    core file could not be written or the core directory could not be
    listed, 0 otherwise. Deletion and notification failures are only
    logged.
    """
    if source is None:
        source = sys.stdin.buffer

    LOG.critical("Process %s dumped core." % exe_name)

    try:
        core = write_coredump_file(core_dir, exe_name, source, compression)
    except CoreDumpError as e:
        LOG.error("Failed to create core file: %s" % e)
        return _exitStatus(e)

    result, status = _retainCoreFiles(core_dir, max_cores, max_scan)
    num_deleted = result.deleted if result else 0

    error = notify(exe_name, core_dir, core.name, notify_command,
                   notify_timeout)
    if error:
        LOG.error("send_mail failed: %s" % error)

    LOG.info("wrote core %s. Deleted %d extra core%s" %
             (core.path, num_deleted, "" if num_deleted == 1 else "s"))
    return status
