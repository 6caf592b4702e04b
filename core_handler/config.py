################################################################################
# Copyright (c) 2022 Wind River Systems, Inc.
#
# SPDX-License-Identifier: Apache-2.0
#
################################################################################

""" Define configuration info for the core handler"""

import os
import shlex

from oslo_config import cfg

from core_handler.common import constants
from core_handler.common import exception

CONF = cfg.CONF

DESCRIPTION = """handle-core: userspace core-file handler for Linux.

Example usage:
  echo "|/usr/bin/handle-core -e %e -d /var/core -m 10 \
-s '/usr/sbin/sendmail -t sysadmin@example.com'" > \
/proc/sys/kernel/core_pattern
"""

cli_opts = [
    cfg.StrOpt("core-dir",
               short="d",
               default=constants.DEFAULT_CORE_DIR,
               help="Directory to write core files into"),
    cfg.StrOpt("executable",
               short="e",
               required=True,
               help="Name of the executable that is core dumping"),
    cfg.IntOpt("max-cores",
               short="m",
               min=1,
               default=constants.DEFAULT_MAX_CORES,
               help="The maximum number of core files to allow before "
                    "deleting older core files"),
    cfg.StrOpt("email-command",
               short="s",
               help="Send email using email_command. Example: "
                    "-s '/usr/sbin/sendmail -t sysadmin@example.com'"),
    cfg.StrOpt("compression",
               short="c",
               default=constants.COMPRESSION_NONE,
               choices=[constants.COMPRESSION_NONE, constants.COMPRESSION_LZ4],
               help="Compress the core file with the given algorithm"),
    cfg.IntOpt("max-scan",
               min=1,
               default=constants.DEFAULT_MAX_SCAN,
               help="Maximum number of core files considered for deletion "
                    "in one invocation; the rest is left to later crashes"),
    cfg.IntOpt("notify-timeout",
               min=1,
               default=constants.DEFAULT_NOTIFY_TIMEOUT,
               help="Number of seconds to wait for the email command"),
]

parameters_opts = [
    cfg.IntOpt("log_level",
               default=20,
               help="Set the log level for the handler"),
]

CONF.register_cli_opts(cli_opts)
CONF.register_opts(parameters_opts)


def _default_config_files():
    return [f for f in [constants.CORE_HANDLER_CONF] if os.path.isfile(f)]


def parse_args(argv, conf=CONF):
    """Parse the command line and the optional config file.

    Parameters
    ----------
    argv : list
        Full command line, including the program name.
    conf : oslo_config.cfg.ConfigOpts
        The options object the cli options are registered on.

    Returns
    -------
    dict
        Keyword arguments for coredump.CoreDumpHandler plus the log level.

    Raises
    ------
    oslo_config.cfg.Error
        The executable name is missing or a config file can not be read.
    ConfigurationError
        The email command can not be parsed.
    SystemExit
        Raised by oslo.config on -h (status 0), or with status 1 on an
        invalid option value from the command line or a config file.
    """
    conf(argv[1:],
         project=constants.CORE_HANDLER_PROJECT,
         prog=os.path.basename(argv[0]) if argv else None,
         description=DESCRIPTION,
         default_config_files=_default_config_files(),
         default_config_dirs=[])

    if not conf.executable:
        raise cfg.RequiredOptError("executable")

    notify_command = None
    if conf.email_command:
        try:
            notify_command = shlex.split(conf.email_command)
        except ValueError as e:
            raise exception.ConfigurationError(
                "invalid email command %r: %s" % (conf.email_command, e))
        if not notify_command:
            raise exception.ConfigurationError("empty email command")

    compression = conf.compression
    if compression == constants.COMPRESSION_NONE:
        compression = None

    return {
        'core_dir': conf.core_dir,
        'exe_name': conf.executable,
        'max_cores': conf.max_cores,
        'notify_command': notify_command,
        'compression': compression,
        'max_scan': conf.max_scan,
        'notify_timeout': conf.notify_timeout,
        'log_level': conf.log_level,
    }
