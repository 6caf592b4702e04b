################################################################################
# Copyright (c) 2022,2025 Wind River Systems, Inc.
#
# SPDX-License-Identifier: Apache-2.0
#
################################################################################
import sys

from oslo_config import cfg

from . import config
from . import coredump
from . import log
from .common.exception import ConfigurationError


def main(argv=None):
    # https://man7.org/linux/man-pages/man5/core.5.html
    # e.g. |/usr/bin/handle-core -e %e -d /var/core -m 10
    if argv is None:
        argv = sys.argv
    try:
        kwargs = config.parse_args(argv)
    except (cfg.Error, ConfigurationError) as e:
        sys.stderr.write("handle-core: %s. Try -h for help.\n" % e)
        return 1

    log.setup_logging(kwargs.pop('log_level'))
    return coredump.CoreDumpHandler(**kwargs)


if __name__ == "__main__":
    sys.exit(main())
