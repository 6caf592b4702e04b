################################################################################
# Copyright (c) 2022 Wind River Systems, Inc.
#
# SPDX-License-Identifier: Apache-2.0
#
################################################################################
import heapq
import os

from .common.constants import DEFAULT_MAX_SCAN
from .log import LOG
from .naming import CoreFile
from .naming import is_core_name


class RetentionResult(object):
    """Outcome of one retention pass.

    Unpacks as (deleted, error) where error is the first deletion failure
    that was not a race with another process, or None.
    """

    def __init__(self):
        self.matched = 0
        self.deleted = 0
        self.vanished = 0
        self.deferred = 0
        self.failed = []

    @property
    def error(self):
        return self.failed[0][1] if self.failed else None

    def __iter__(self):
        return iter((self.deleted, self.error))

    def __repr__(self):
        return ("RetentionResult(matched=%d, deleted=%d, vanished=%d, "
                "deferred=%d, failed=%d)" % (self.matched, self.deleted,
                                             self.vanished, self.deferred,
                                             len(self.failed)))


def scan_core_files(core_dir, max_scan=DEFAULT_MAX_SCAN):
    """Function that lists the core files of a directory, oldest first.

    Only the max_scan oldest core files are kept in memory, the others are
    just counted.

    Parameters
    ----------
    core_dir : str
        The core directory
    max_scan : int
        Maximum number of core files returned

    Returns
    -------
    tuple(int, list)
        Number of core files found and the oldest ones as CoreFile

    Raises
    ------
    OSError
        The directory could not be opened or read.
    """
    matched = 0

    def _core_files(entries):
        nonlocal matched
        for entry in entries:
            if not is_core_name(entry.name):
                continue
            if entry.is_dir(follow_symlinks=False):
                continue
            matched += 1
            yield CoreFile(core_dir, entry.name)

    with os.scandir(core_dir) as entries:
        oldest = heapq.nsmallest(max_scan, _core_files(entries),
                                 key=lambda core: core.sort_key)
    return matched, oldest


def delete_core_file(core, result):
    try:
        os.unlink(core.path)
    except FileNotFoundError:
        # Removed by a concurrent handler or the operator
        LOG.debug(f'Core file {core.path} already deleted')
        result.vanished += 1
    except OSError as e:
        LOG.error(f'Failed to delete core file {core.path}: {e}')
        result.failed.append((core.path, e))
    else:
        LOG.info(f'Deleted core file {core.path}')
        result.deleted += 1


def enforce(core_dir, max_cores, max_scan=DEFAULT_MAX_SCAN):
    """Function that deletes the oldest core files over the max_cores limit.

    The directory is listed once. Core files created by concurrent handlers
    during the pass are left for their own pass, and core files deleted by
    them in the meantime are not an error.

    Parameters
    ----------
    core_dir : str
        The core directory
    max_cores : int
        Number of core files to keep
    max_scan : int
        Maximum number of core files that can be deleted in this pass

    Returns
    -------
    RetentionResult

    Raises
    ------
    OSError
        The directory could not be listed, nothing was deleted.
    ValueError
        max_cores or max_scan is lower than 1.
    """
    if max_cores < 1:
        raise ValueError("max_cores must be greater than 0: %r" % max_cores)
    if max_scan < 1:
        raise ValueError("max_scan must be greater than 0: %r" % max_scan)

    result = RetentionResult()
    result.matched, oldest = scan_core_files(core_dir, max_scan)
    excess = result.matched - max_cores
    LOG.debug(f'Found {result.matched} core files in {core_dir} '
              f'(max {max_cores})')
    if excess <= 0:
        return result

    for core in oldest[:excess]:
        delete_core_file(core, result)

    if excess > len(oldest):
        result.deferred = excess - len(oldest)
        LOG.warning(f'{result.deferred} extra core files in {core_dir} left '
                    f'for a later pass (max scan {max_scan})')
    return result
