# Copyright Red Hat
#
# tests/test_config.py - Configuration file and run option tests
#
# This file is part of the apicompat project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
import tempfile
import logging
import os

from apicompat import ApiCompatConfigError
from apicompat.config import ApiCompatConfig
from apicompat.compare.options import CompatOptions

from tests import MockArgs

log = logging.getLogger()

_CONFIG = """[Global]
StrictMode = yes
NoWarn = CP0001; CP0002
ExcludeAttributesFiles = /etc/apicompat/a.txt, /etc/apicompat/b.txt
DisableRules = modifiers
Jobs = 4
"""


class ConfigTestsBase(unittest.TestCase):
    def setUp(self):
        log.debug("Preparing %s", self._testMethodName)
        self._tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmpdir.cleanup)

    def write_config(self, text):
        path = os.path.join(self._tmpdir.name, "apicompat.conf")
        with open(path, "w", encoding="utf8") as fp:
            fp.write(text)
        return path


class ApiCompatConfigTests(ConfigTestsBase):
    def test_missing_file_defaults(self):
        config = ApiCompatConfig.from_file(
            os.path.join(self._tmpdir.name, "missing.conf")
        )
        self.assertEqual(config, ApiCompatConfig())

    def test_no_global_section(self):
        config = ApiCompatConfig.from_file(self.write_config("[Other]\nJobs = 3\n"))
        self.assertEqual(config, ApiCompatConfig())

    def test_values(self):
        config = ApiCompatConfig.from_file(self.write_config(_CONFIG))
        self.assertTrue(config.strict_mode)
        self.assertEqual(config.no_warn, ["CP0001", "CP0002"])
        self.assertEqual(
            config.exclude_attributes_files,
            ["/etc/apicompat/a.txt", "/etc/apicompat/b.txt"],
        )
        self.assertEqual(config.disable_rules, ["modifiers"])
        self.assertEqual(config.jobs, 4)

    def test_invalid_values(self):
        for text in (
            "[Global]\nJobs = many\n",
            "[Global]\nJobs = 0\n",
            "[Global]\nStrictMode = perhaps\n",
            "no section header\n",
        ):
            with self.subTest(text=text):
                with self.assertRaises(ApiCompatConfigError):
                    ApiCompatConfig.from_file(self.write_config(text))


class CompatOptionsTests(ConfigTestsBase):
    def test_defaults(self):
        options = CompatOptions()
        self.assertFalse(options.strict_mode)
        self.assertEqual(options.no_warn, ())
        self.assertEqual(options.jobs, 1)

    def test_from_cmd_args_defaults(self):
        options = CompatOptions.from_cmd_args(MockArgs())
        self.assertEqual(options, CompatOptions())

    def test_from_cmd_args(self):
        args = MockArgs()
        args.strict_mode = True
        args.no_warn = ["CP0001;CP0002"]
        args.left_transformation_patterns = [(r"^(.*)\.json$", r"\1")]
        args.suppression_file = "suppressions.json"
        args.generate_suppression_file = True
        args.create_work_item_per_assembly = True
        args.jobs = 2
        options = CompatOptions.from_cmd_args(args)
        self.assertTrue(options.strict_mode)
        self.assertEqual(options.no_warn, ("CP0001;CP0002",))
        self.assertEqual(
            options.left_transformation_patterns, ((r"^(.*)\.json$", r"\1"),)
        )
        self.assertEqual(options.right_transformation_patterns, ())
        self.assertEqual(options.suppression_file, "suppressions.json")
        self.assertTrue(options.generate_suppression_file)
        self.assertTrue(options.create_work_item_per_assembly)
        self.assertEqual(options.jobs, 2)

    def test_from_cmd_args_with_config(self):
        config = ApiCompatConfig.from_file(self.write_config(_CONFIG))
        args = MockArgs()
        args.no_warn = ["CP0014"]
        args.exclude_attributes_files = ["local.txt"]
        options = CompatOptions.from_cmd_args(args, config=config)
        self.assertTrue(options.strict_mode)
        self.assertEqual(options.jobs, 4)
        self.assertEqual(options.no_warn, ("CP0001", "CP0002", "CP0014"))
        self.assertEqual(
            options.exclude_attributes_files,
            ("/etc/apicompat/a.txt", "/etc/apicompat/b.txt", "local.txt"),
        )
        self.assertEqual(options.disable_rules, ("modifiers",))

    def test_cmd_args_jobs_override_config(self):
        config = ApiCompatConfig.from_file(self.write_config(_CONFIG))
        args = MockArgs()
        args.jobs = 8
        self.assertEqual(CompatOptions.from_cmd_args(args, config=config).jobs, 8)

    def test_str(self):
        options = CompatOptions(
            no_warn=("CP0001", "CP0002"),
            left_transformation_patterns=(("a", "b"),),
        )
        text = str(options)
        self.assertIn("strict_mode=False", text.splitlines())
        self.assertIn("no_warn=CP0001 CP0002", text.splitlines())
        self.assertIn("left_transformation_patterns=a=b", text.splitlines())
