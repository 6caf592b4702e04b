################################################################################
# Copyright (c) 2022 Wind River Systems, Inc.
#
# SPDX-License-Identifier: Apache-2.0
#
################################################################################

CORE_HANDLER_CONF = "/etc/core-handler.conf"
CORE_HANDLER_PROJECT = "core-handler"
SYSLOG_ADDRESS = "/dev/log"

DEFAULT_CORE_DIR = "/var/core"
DEFAULT_MAX_CORES = 10
# Upper bound on the core files held in memory during one retention pass
DEFAULT_MAX_SCAN = 10000
DEFAULT_NOTIFY_TIMEOUT = 60

CORE_PREFIX = "core."
PARTIAL_PREFIX = "."
PARTIAL_SUFFIX = ".part"

# Next nanoseconds tried when a core file name is already taken
CORE_NAME_RETRIES = 1000

COMPRESSION_NONE = "none"
COMPRESSION_LZ4 = "lz4"
LZ4_SUFFIX = ".lz4"

BUF_SIZE = 64 * 1024
UNKNOWN_HOST = "(unknown-host)"
