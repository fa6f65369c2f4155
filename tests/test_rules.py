# Copyright Red Hat
#
# tests/test_rules.py - Rule catalog and loader tests
#
# This file is part of the apicompat project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
import tempfile
import logging
import os

from apicompat import ApiCompatNotFoundError
from apicompat.compare._loader import build_rules, load_rules
from apicompat.compare.difftypes import DeclarationKind, DifferenceType, Side
from apicompat.compare.engine import CompareContext
from apicompat.compare.options import CompatOptions
from apicompat.compare.symbols import DeclarationNode
from apicompat.rules import Rule, RuleSettings, load_exclusion_files
from apicompat.rules.attributes import AttributesMustMatch
from apicompat.rules.members import MembersMustExist
from apicompat.rules.modifiers import ModifiersMustMatch

log = logging.getLogger()


class RuleLoaderTests(unittest.TestCase):
    def setUp(self):
        log.debug("Preparing %s", self._testMethodName)

    def test_load_rules(self):
        rule_classes = load_rules()
        self.assertEqual(
            rule_classes, [MembersMustExist, ModifiersMustMatch, AttributesMustMatch]
        )

    def test_load_rules_returns_rules(self):
        rule_classes = load_rules()
        self.assertTrue(isinstance(rule_classes, list))
        self.assertTrue(all(issubclass(c, Rule) for c in rule_classes))

    def test_load_rules_have_unique_names(self):
        names = [cls.name for cls in load_rules()]
        self.assertEqual(len(names), len(set(names)))

    def test_build_rules_shares_settings(self):
        rules = build_rules(CompatOptions(strict_mode=True))
        self.assertEqual(len(rules), 3)
        self.assertTrue(all(rule.settings.strict_mode for rule in rules))
        self.assertTrue(all(rule.settings is rules[0].settings for rule in rules))

    def test_build_rules_disable(self):
        rules = build_rules(CompatOptions(disable_rules=("modifiers", "nosuchrule")))
        self.assertEqual([rule.name for rule in rules], ["members", "attributes"])

    def test_build_rules_missing_exclusion_file(self):
        with self.assertRaises(ApiCompatNotFoundError):
            build_rules(CompatOptions(exclude_attributes_files=("/nonexistent/x.txt",)))

    def test_rule_info(self):
        self.assertEqual(MembersMustExist().info(), {"name": "members", "order": 10})


class ExclusionFileTests(unittest.TestCase):
    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmpdir.cleanup)

    def _write(self, name, text):
        path = os.path.join(self._tmpdir.name, name)
        with open(path, "w", encoding="utf8") as fp:
            fp.write(text)
        return path

    def test_load_exclusion_files(self):
        first = self._write("a.txt", "T:System.SerializableAttribute\n\n  T:Foo  \n")
        second = self._write("b.txt", "T:Bar\nT:Foo\n")
        self.assertEqual(
            load_exclusion_files([first, second]),
            frozenset(["T:System.SerializableAttribute", "T:Foo", "T:Bar"]),
        )

    def test_load_no_exclusion_files(self):
        self.assertEqual(load_exclusion_files([]), frozenset())

    def test_missing_exclusion_file(self):
        with self.assertRaises(ApiCompatNotFoundError):
            load_exclusion_files([os.path.join(self._tmpdir.name, "missing.txt")])


class RuleBaseTests(unittest.TestCase):
    def setUp(self):
        self.left = DeclarationNode(
            DeclarationKind.TYPE, "First", "T:Ns.First", Side.LEFT
        )
        self.right = DeclarationNode(
            DeclarationKind.TYPE, "First", "T:Ns.First", Side.RIGHT
        )
        self.context = CompareContext()

    def test_default_callbacks(self):
        rule = Rule()
        self.assertEqual(tuple(rule.matched(self.left, self.right, self.context)), ())
        self.assertEqual(tuple(rule.removed(self.left, self.context)), ())
        self.assertEqual(tuple(rule.added(self.right, self.context)), ())
        self.assertEqual(rule.settings, RuleSettings())

    def test_members_never_reports_matched(self):
        rule = MembersMustExist()
        self.assertEqual(tuple(rule.matched(self.left, self.right, self.context)), ())

    def test_members_ignores_parameters(self):
        node = DeclarationNode(DeclarationKind.PARAMETER, "a", "M:Ns.F(int)$0", Side.LEFT)
        self.assertEqual(MembersMustExist().removed(node, self.context), [])

    def test_members_removed(self):
        diffs = MembersMustExist().removed(self.left, self.context)
        self.assertEqual(len(diffs), 1)
        self.assertEqual(diffs[0].diagnostic_id, "CP0001")
        self.assertEqual(diffs[0].difference_type, DifferenceType.REMOVED)
        self.assertEqual(diffs[0].member_id, "T:Ns.First")

    def test_attributes_no_attributes(self):
        rule = AttributesMustMatch()
        self.assertEqual(rule.matched(self.left, self.right, self.context), [])
