################################################################################
# Copyright (c) 2022 Wind River Systems, Inc.
#
# SPDX-License-Identifier: Apache-2.0
#
################################################################################
import os
import re
import time

from .common.constants import COMPRESSION_LZ4
from .common.constants import CORE_PREFIX
from .common.constants import LZ4_SUFFIX

"""Regexes matching the core file names.

CORE_NAME_RE matches the names generated by core_name, with zero padded
dates and a nanoseconds field. LEGACY_CORE_NAME_RE matches the names of
older handlers, with non padded dates and no sub-second field; a legacy
name whose executable is made of 9 digits followed by another dot is read
as the current format. The date fields are only informative, the ordering
uses the epoch seconds and the nanoseconds.
"""
CORE_NAME_RE = re.compile(
    r'^core\.\d{4}-\d{2}-\d{2}_(?P<seconds>\d+)\.(?P<nanos>\d{9})\..+$', re.DOTALL)
LEGACY_CORE_NAME_RE = re.compile(
    r'^core\.\d+-\d+-\d+_(?P<seconds>\d+)(?:\..*)?$', re.DOTALL)


class CoreFile(object):
    """A core file in the core directory.

    Core files that do not carry a timestamp in their name (e.g. core.1234
    from the kernel default pattern) get a zero timestamp, so they are the
    first ones to be deleted and are ordered by name among themselves.
    """

    def __init__(self, core_dir, name, size=None):
        self.core_dir = core_dir
        self.name = name
        self.path = os.path.join(core_dir, name)
        self.size = size
        self.seconds = 0
        self.nanos = 0

        match = CORE_NAME_RE.match(name)
        if match:
            self.seconds = int(match.group('seconds'))
            self.nanos = int(match.group('nanos'))
        else:
            match = LEGACY_CORE_NAME_RE.match(name)
            if match:
                self.seconds = int(match.group('seconds'))

    @property
    def sort_key(self):
        return (self.seconds, self.nanos, self.name)

    def __repr__(self):
        return "CoreFile(%r)" % self.path


def is_core_name(name):
    return name.startswith(CORE_PREFIX)


def sanitize_exe_name(exe_name):
    """Keep the executable name usable as a single path component."""
    return exe_name.replace(os.sep, '_').replace('\0', '_')


def now_ns():
    return time.time_ns()


def core_name(exe_name, timestamp_ns=None, compression=None):
    """Function that builds the name of a new core file.

    e.g.
        exe_name = 'sshd', timestamp_ns = 1792310400123456789
        returns core.2026-10-18_1792310400.123456789.sshd (local time date)

    Parameters
    ----------
    exe_name : str
        Name of the executable that dumped core
    timestamp_ns : int
        Capture time in nanoseconds since the epoch, defaults to now
    compression : str
        Compression algorithm, adds the matching suffix

    Returns
    -------
    str
        The core file name
    """
    if timestamp_ns is None:
        timestamp_ns = now_ns()
    seconds, nanos = divmod(timestamp_ns, 1000000000)
    tm = time.localtime(seconds)
    name = "%s%04d-%02d-%02d_%d.%09d.%s" % (
        CORE_PREFIX, tm.tm_year, tm.tm_mon, tm.tm_mday, seconds,
        nanos, sanitize_exe_name(exe_name))
    if compression == COMPRESSION_LZ4:
        name += LZ4_SUFFIX
    return name
