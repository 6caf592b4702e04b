################################################################################
# Copyright (c) 2022 Wind River Systems, Inc.
#
# SPDX-License-Identifier: Apache-2.0
#
################################################################################


class CoreHandlerException(Exception):
    """Base class for the core handler exceptions."""


class ConfigurationError(CoreHandlerException):
    pass


class CoreDumpError(CoreHandlerException):
    """The core file could not be written.

    Carries the path of the file being written and the errno of the
    underlying OS error, when there is one.
    """

    def __init__(self, path, error):
        self.path = path
        self.errno = getattr(error, 'errno', None)
        self.strerror = getattr(error, 'strerror', None) or str(error)
        super(CoreDumpError, self).__init__(path, error)

    def __str__(self):
        return "%s: error %s (%s)" % (self.path, self.errno, self.strerror)


class CoreReadError(CoreDumpError):
    """Reading the core image from the input stream failed."""

    def __str__(self):
        return "error reading core file from stdin into %s: %s (%s)" % (
            self.path, self.errno, self.strerror)


class CoreWriteError(CoreDumpError):
    """Creating, writing or publishing the core file failed."""

    def __str__(self):
        return "error writing core file to %s: %s (%s)" % (
            self.path, self.errno, self.strerror)
