################################################################################
# Copyright (c) 2022 Wind River Systems, Inc.
#
# SPDX-License-Identifier: Apache-2.0
#
################################################################################
import errno
import io
import os

import lz4.frame

from .common.constants import BUF_SIZE
from .common.constants import COMPRESSION_LZ4
from .common.constants import CORE_NAME_RETRIES
from .common.constants import PARTIAL_PREFIX
from .common.constants import PARTIAL_SUFFIX
from .common.exception import CoreReadError
from .common.exception import CoreWriteError
from .log import LOG
from .naming import core_name
from .naming import CoreFile
from .naming import now_ns


def partial_name(name, pid=None):
    """Name of the file a core is written to before it is complete.

    It does not start with the core prefix, so the retention never counts
    or deletes a core that is still being written. The process id keeps
    the partial files of concurrent handlers apart.
    """
    if pid is None:
        pid = os.getpid()
    return "%s%s.%d%s" % (PARTIAL_PREFIX, name, pid, PARTIAL_SUFFIX)


def copy_stream(source, sink, path, buffer_size=BUF_SIZE):
    """Function that copies the source stream to the sink until end of stream.

    Parameters
    ----------
    source : file
        Binary stream the core image is read from
    sink : file
        Binary file the core image is written to
    path : str
        Path of the file being written, used for error reporting
    buffer_size : int
        Number of bytes read at a time

    Returns
    -------
    int
        Number of bytes copied

    Raises
    ------
    CoreReadError
        Reading from the source failed. Write errors on the sink are
        raised as OSError.
    """
    bytes_written = 0
    while True:
        try:
            buffer = source.read(buffer_size)
        except OSError as e:
            raise CoreReadError(path, e) from e
        if not buffer:
            break
        sink.write(buffer)
        bytes_written += len(buffer)
    return bytes_written


def _publishCoreFile(core_dir, exe_name, partial, timestamp_ns, compression):
    """Function that links the complete partial file under a free core name.

    os.link never replaces an existing file. When the name is taken by
    another core captured in the same nanosecond, the next nanoseconds
    are tried.

    Returns
    -------
    str
        The core file name
    """
    for attempt in range(CORE_NAME_RETRIES):
        name = core_name(exe_name, timestamp_ns + attempt, compression)
        corefile = os.path.join(core_dir, name)
        try:
            os.link(partial, corefile)
        except FileExistsError:
            LOG.debug(f'Core file {corefile} already exists')
            continue
        except OSError as e:
            raise CoreWriteError(corefile, e) from e

        try:
            os.unlink(partial)
        except OSError as e:
            LOG.error(f'Failed to remove {partial}: {e}')
        return name

    raise CoreWriteError(corefile, FileExistsError(errno.EEXIST, os.strerror(errno.EEXIST)))


def write_coredump_file(core_dir, exe_name, source, compression=None,
                        timestamp_ns=None):
    """Function that writes the core image read from source to a new core file.

    The image is written to a hidden partial file which is linked to the
    core name once it is complete and synced, then removed. An existing
    core file is never replaced. On failure the partial file is left in
    place for manual inspection.

    Parameters
    ----------
    core_dir : str
        Directory to write the core file into
    exe_name : str
        Name of the executable that dumped core
    source : file
        Binary stream with the core image, usually sys.stdin.buffer
    compression : str
        None or 'lz4'
    timestamp_ns : int
        Capture time, defaults to now

    Returns
    -------
    CoreFile
        The written core file, with the number of bytes read from source

    Raises
    ------
    CoreReadError, CoreWriteError
    """
    if timestamp_ns is None:
        timestamp_ns = now_ns()
    name = core_name(exe_name, timestamp_ns, compression)
    corefile = os.path.join(core_dir, name)
    partial = os.path.join(core_dir, partial_name(name))
    use_compression = compression == COMPRESSION_LZ4
    LOG.info(f'Starting to write coredump file {corefile} '
             f'(Use compression? {"Yes" if use_compression else "No"})')

    try:
        with io.open(partial, "xb") as f:
            if use_compression:
                with lz4.frame.LZ4FrameFile(f, mode="wb") as compressed:
                    size = copy_stream(source, compressed, partial)
            else:
                size = copy_stream(source, f, partial)
            f.flush()
            os.fsync(f.fileno())
    except OSError as e:
        raise CoreWriteError(partial, e) from e

    name = _publishCoreFile(core_dir, exe_name, partial, timestamp_ns, compression)
    corefile = os.path.join(core_dir, name)
    LOG.info(f'Finished writing coredump file {corefile} ({size} bytes)')
    return CoreFile(core_dir, name, size=size)
