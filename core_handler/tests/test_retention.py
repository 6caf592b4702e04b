################################################################################
# Copyright (c) 2023 Wind River Systems, Inc.
#
# SPDX-License-Identifier: Apache-2.0
#
################################################################################
import errno
import os
import random

import fixtures

from core_handler import naming
from core_handler import retention
from core_handler.tests.base import BaseTestCase
from core_handler.tests.test_data import EXE_NAME
from core_handler.tests.test_data import FOREIGN_NAMES
from core_handler.tests.test_data import LEGACY_CORE_NAMES
from core_handler.tests.test_data import TIMESTAMP_NS
from core_handler.tests.test_data import UNTIMED_CORE_NAMES


class TestRetention(BaseTestCase):

    def setUp(self):
        """Run before each test method to initialize test environment."""
        super(TestRetention, self).setUp()

        self.real_unlink = os.unlink
        # Twelve core files, one second apart, oldest first
        self.timed_names = [naming.core_name(EXE_NAME, TIMESTAMP_NS + i * 1000000000)
                            for i in range(12)]

    def mock_unlink(self, errors):
        """Make os.unlink fail with errors[path] for the given paths."""
        def mocked_unlink(path):
            error = errors.get(os.path.basename(path))
            if error is not None:
                raise error
            self.real_unlink(path)

        self.useFixture(fixtures.MonkeyPatch('core_handler.retention.os.unlink', mocked_unlink))

    def test_enforce_under_limit(self):
        self.make_core_files(self.timed_names[:3])
        result = retention.enforce(self.core_dir, 3)
        self.assertEqual(tuple(result), (0, None))
        self.assertEqual(result.matched, 3)
        self.assertEqual(self.list_core_files(), sorted(self.timed_names[:3]))

    def test_enforce_untimed_names(self):
        """Five core files sorting as core.0001 to core.0005, three kept."""
        self.make_core_files(UNTIMED_CORE_NAMES)
        deleted, error = retention.enforce(self.core_dir, 3)
        self.assertEqual(deleted, 2)
        self.assertIsNone(error)
        self.assertEqual(self.list_core_files(), ["core.0003", "core.0004", "core.0005"])

    def test_enforce_keeps_min_of_count_and_limit(self):
        for count in (0, 1, 4, 9):
            for max_cores in (1, 3, 10):
                core_dir = self.useFixture(fixtures.TempDir()).path
                for name in self.timed_names[:count]:
                    with open(os.path.join(core_dir, name), "wb"):
                        pass
                result = retention.enforce(core_dir, max_cores)
                self.assertEqual(len(os.listdir(core_dir)), min(count, max_cores))
                self.assertEqual(result.deleted, max(count - max_cores, 0))
                self.assertIsNone(result.error)

    def test_enforce_oldest_first(self):
        """Every kept core file is newer than every deleted one."""
        names = list(self.timed_names)
        random.Random(4).shuffle(names)
        self.make_core_files(names)
        result = retention.enforce(self.core_dir, 5)
        self.assertEqual(result.deleted, 7)
        self.assertEqual(self.list_core_files(), sorted(self.timed_names[7:]))

    def test_enforce_by_timestamp_not_name(self):
        self.make_core_files(LEGACY_CORE_NAMES)
        retention.enforce(self.core_dir, 2)
        self.assertEqual(self.list_core_files(), sorted(LEGACY_CORE_NAMES[1:]))

    def test_enforce_untimed_before_timed(self):
        self.make_core_files(["core.1234"] + self.timed_names[:2])
        retention.enforce(self.core_dir, 2)
        self.assertEqual(self.list_core_files(), sorted(self.timed_names[:2]))

    def test_enforce_ignores_foreign_entries(self):
        """Entries not named as core files are never counted nor touched."""
        self.make_core_files(FOREIGN_NAMES + self.timed_names[:2])
        os.mkdir(os.path.join(self.core_dir, "core.directory"))
        result = retention.enforce(self.core_dir, 1)
        self.assertEqual(result.matched, 2)
        self.assertEqual(result.deleted, 1)
        for name in FOREIGN_NAMES + ["core.directory"]:
            self.assertTrue(os.path.exists(os.path.join(self.core_dir, name)))
        self.assertEqual(self.list_core_files(), sorted(["core.directory", self.timed_names[1]]))

    def test_enforce_vanished_core_file(self):
        """A core file deleted by a concurrent handler is not an error."""
        vanished = self.timed_names[1]
        self.make_core_files(self.timed_names[:6])
        self.mock_unlink({vanished: FileNotFoundError(errno.ENOENT, "No such file or directory")})

        result = retention.enforce(self.core_dir, 2)
        self.assertEqual(tuple(result), (3, None))
        self.assertEqual(result.vanished, 1)
        self.assertEqual(result.failed, [])
        # Deletions went on after the race
        self.assertEqual(self.list_core_files(),
                         sorted([vanished] + self.timed_names[4:6]))

    def test_enforce_vanished_for_real(self):
        self.make_core_files(self.timed_names[:4])

        def racing_unlink(path):
            # A sibling handler gets there first
            self.real_unlink(path)
            self.real_unlink(path)

        self.useFixture(fixtures.MonkeyPatch('core_handler.retention.os.unlink', racing_unlink))
        result = retention.enforce(self.core_dir, 1)
        self.assertEqual(tuple(result), (0, None))
        self.assertEqual(result.vanished, 3)
        self.assertEqual(self.list_core_files(), [self.timed_names[3]])

    def test_enforce_delete_error(self):
        """Deletion errors are reported and the pass continues."""
        denied = self.timed_names[0]
        error = PermissionError(errno.EACCES, "Permission denied")
        self.make_core_files(self.timed_names[:5])
        self.mock_unlink({denied: error})

        result = retention.enforce(self.core_dir, 2)
        deleted, first_error = result
        self.assertEqual(deleted, 2)
        self.assertIs(first_error, error)
        self.assertEqual(result.failed, [(os.path.join(self.core_dir, denied), error)])
        self.assertEqual(self.list_core_files(), sorted([denied] + self.timed_names[3:5]))
        self.assertEqual(len(self.fake_log.logs['error']), 1)

    def test_enforce_missing_dir(self):
        self.assertRaises(OSError, retention.enforce,
                          os.path.join(self.core_dir, "missing"), 10)

    def test_enforce_invalid_limits(self):
        self.assertRaises(ValueError, retention.enforce, self.core_dir, 0)
        self.assertRaises(ValueError, retention.enforce, self.core_dir, -3)
        self.assertRaises(ValueError, retention.enforce, self.core_dir, 3, max_scan=0)

    def test_enforce_max_scan(self):
        """At most max_scan core files are deleted, oldest first, the rest later."""
        self.make_core_files(self.timed_names[:6])
        result = retention.enforce(self.core_dir, 1, max_scan=2)
        self.assertEqual(result.deleted, 2)
        self.assertEqual(result.deferred, 3)
        self.assertEqual(len(self.fake_log.logs['warning']), 1)
        self.assertEqual(self.list_core_files(), sorted(self.timed_names[2:6]))

        result = retention.enforce(self.core_dir, 1, max_scan=2)
        self.assertEqual(result.deleted, 2)
        self.assertEqual(self.list_core_files(), sorted(self.timed_names[4:6]))

    def test_scan_core_files(self):
        names = list(self.timed_names[:5])
        random.Random(7).shuffle(names)
        self.make_core_files(names + FOREIGN_NAMES)
        matched, oldest = retention.scan_core_files(self.core_dir, max_scan=3)
        self.assertEqual(matched, 5)
        self.assertEqual([core.name for core in oldest], self.timed_names[:3])
