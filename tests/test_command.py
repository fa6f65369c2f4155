# Copyright Red Hat
#
# tests/test_command.py - CLI layer tests
#
# This file is part of the apicompat project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
from unittest.mock import patch
import tempfile
import logging
import json
import io
import os

import apicompat.command as command
from apicompat import (
    APICOMPAT_DEBUG_ALL,
    APICOMPAT_DEBUG_COMMAND,
    get_debug_mask,
    is_compat_diagnostic,
    set_debug_mask,
)

from tests import MockArgs
from tests.compare._util import make_method, make_surface, make_type, write_surface

log = logging.getLogger()


class CommandTestsBase(unittest.TestCase):
    def setUp(self):
        log.debug("Preparing %s", self._testMethodName)
        self._tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmpdir.cleanup)
        self.root = self._tmpdir.name
        self.addCleanup(set_debug_mask, 0)
        patcher = patch("apicompat.command.shutdown_logging")
        patcher.start()
        self.addCleanup(patcher.stop)

    def get_main_args(self):
        """
        Return an argument array (in the form of sys.argv) reflecting the
        ``apicompat`` command with a configuration file that does not exist.

        :returns: A list of command arguments.
        """
        return [
            "apicompat",
            "--config",
            os.path.join(self.root, "missing.conf"),
        ]

    def write(self, name, surface):
        return write_surface(self.root, name, surface)

    def run_main(self, args):
        with patch("sys.stdout", new_callable=io.StringIO) as stdout:
            status = command.main(args)
        return status, stdout.getvalue()


class CommandTests(CommandTestsBase):
    def setUp(self):
        super().setUp()
        self.left = self.write(
            "left.json",
            make_surface(make_type("First", members=[make_method("F")])),
        )
        self.right = self.write("right.json", make_surface(make_type("First")))

    def test_main_compatible(self):
        args = self.get_main_args() + ["-l", self.left, "-r", self.left]
        status, output = self.run_main(args)
        self.assertEqual(status, 0)
        self.assertEqual(output, "")

    def test_main_differences(self):
        args = self.get_main_args() + ["-l", self.left, "-r", self.right]
        status, output = self.run_main(args)
        self.assertEqual(status, 1)
        self.assertEqual(output.splitlines()[0].split()[:3],
                         ["CP0002", "removed", "M:CompatTests.First.F"])

    def test_main_json(self):
        args = self.get_main_args() + ["--json", "-l", self.left, "-r", self.right]
        status, output = self.run_main(args)
        self.assertEqual(status, 1)
        (difference,) = json.loads(output)
        self.assertEqual(difference["diagnostic_id"], "CP0002")
        self.assertEqual(difference["left"], self.left)
        self.assertEqual(difference["right"], self.right)

    def test_main_no_warn(self):
        args = self.get_main_args() + [
            "--no-warn", "CP0001;CP0002", "-l", self.left, "-r", self.right
        ]
        self.assertEqual(self.run_main(args)[0], 0)

    def test_main_strict_mode(self):
        args = self.get_main_args() + ["-l", self.right, "-r", self.left]
        self.assertEqual(self.run_main(args)[0], 0)
        self.assertEqual(self.run_main(args + ["--strict-mode"])[0], 1)

    def test_main_generate_suppression_file(self):
        suppression_file = os.path.join(self.root, "suppressions.json")
        args = self.get_main_args() + [
            "-l", self.left, "-r", self.right, "--suppression-file", suppression_file
        ]
        self.assertEqual(self.run_main(args + ["--generate-suppression-file"])[0], 0)
        self.assertTrue(os.path.exists(suppression_file))
        self.assertEqual(self.run_main(args)[0], 0)

    def test_main_generate_requires_suppression_file(self):
        args = self.get_main_args() + [
            "-l", self.left, "-r", self.right, "--generate-suppression-file"
        ]
        self.assertEqual(self.run_main(args)[0], 1)

    def test_main_per_assembly_mismatch(self):
        args = self.get_main_args() + [
            "-l", self.left, "-l", self.left, "-r", self.right,
            "--create-work-item-per-assembly",
        ]
        self.assertEqual(self.run_main(args)[0], 1)

    def test_main_invalid_jobs(self):
        args = self.get_main_args() + ["-l", self.left, "-r", self.right, "-j", "0"]
        self.assertEqual(self.run_main(args)[0], 1)

    def test_main_missing_input(self):
        args = self.get_main_args() + [
            "-l", os.path.join(self.root, "nosuch.json"), "-r", self.right
        ]
        self.assertEqual(self.run_main(args)[0], 1)

    def test_main_transformation_pattern(self):
        args = self.get_main_args() + [
            "--json",
            "-l", self.left,
            "-r", self.right,
            "--left-transformation-pattern", r"^.*/(left)\.json$=baseline/\1",
        ]
        status, output = self.run_main(args)
        self.assertEqual(status, 1)
        self.assertEqual(json.loads(output)[0]["left"], "baseline/left")

    def test_main_bad_transformation_pattern(self):
        args = self.get_main_args() + [
            "-l", self.left, "-r", self.right, "--left-transformation-pattern", "x"
        ]
        with self.assertRaises(SystemExit):
            command.main(args)

    def test_main_version(self):
        with self.assertRaises(SystemExit):
            command.main(self.get_main_args() + ["--version"])

    def test_main_requires_inputs(self):
        with self.assertRaises(SystemExit):
            command.main(self.get_main_args())

    def test_main_bad_debug(self):
        args = self.get_main_args() + [
            "--debug", "nosuch", "-l", self.left, "-r", self.right
        ]
        self.assertEqual(self.run_main(args)[0], 1)

    def test_main_debug(self):
        args = self.get_main_args() + [
            "-vv", "--debug", "all", "-l", self.left, "-r", self.left
        ]
        self.assertEqual(self.run_main(args)[0], 0)


class CommandHelperTests(CommandTestsBase):
    def test_split_references(self):
        self.assertIsNone(command._split_references(None))
        self.assertEqual(
            command._split_references(["a.dll, b.dll", "c.dll,"]),
            [["a.dll", "b.dll"], ["c.dll"]],
        )

    def test_set_debug_none(self):
        args = MockArgs()
        command.set_debug(args.debug)

    def test_set_debug_single(self):
        args = MockArgs()
        args.debug = "command"
        command.set_debug(args.debug)
        self.assertEqual(get_debug_mask(), APICOMPAT_DEBUG_COMMAND)

    def test_set_debug_list(self):
        args = MockArgs()
        args.debug = "compare,suppression,runner,command"
        command.set_debug(args.debug)
        self.assertEqual(get_debug_mask(), APICOMPAT_DEBUG_ALL)

    def test_set_debug_all(self):
        args = MockArgs()
        args.debug = "all"
        command.set_debug(args.debug)
        self.assertEqual(get_debug_mask(), APICOMPAT_DEBUG_ALL)

    def test_set_debug_single_bad(self):
        args = MockArgs()
        args.debug = "nosuch"
        with self.assertRaises(ValueError):
            command.set_debug(args.debug)

    def test_set_debug_mask_invalid(self):
        with self.assertRaises(ValueError):
            set_debug_mask(APICOMPAT_DEBUG_ALL + 1)

    def test_is_compat_diagnostic(self):
        self.assertTrue(is_compat_diagnostic("CP0001"))
        self.assertTrue(is_compat_diagnostic("cp1002"))
        self.assertFalse(is_compat_diagnostic("PKV006"))
        self.assertFalse(is_compat_diagnostic("C"))
