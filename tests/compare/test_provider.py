# Copyright Red Hat
#
# tests/compare/test_provider.py - Surface file provider tests.
#
# This file is part of the apicompat project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
import tempfile
import logging
import json
import lzma
import os

import zstandard as zstd

from apicompat import ApiCompatNotFoundError, ApiCompatParseError
from apicompat.compare.difftypes import DeclarationKind, Side
from apicompat.compare.provider import SurfaceFileProvider, read_surface_file
from apicompat.compare.symbols import AttributeData, MetadataInformation

from ._util import attr, make_member, make_method, make_surface, make_type, write_surface

log = logging.getLogger()


def _metadata(path, references=()):
    return MetadataInformation("Lib", path, path, tuple(references))


class ReadSurfaceFileTests(unittest.TestCase):
    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmpdir.cleanup)
        self.surface = make_surface(make_type("First"))
        self.data = json.dumps(self.surface).encode("utf8")

    def _path(self, name):
        return os.path.join(self._tmpdir.name, name)

    def test_read_json(self):
        path = write_surface(self._tmpdir.name, "Lib.json", self.surface)
        self.assertEqual(read_surface_file(path), self.surface)

    def test_read_zstd(self):
        path = self._path("Lib.json.zst")
        with open(path, "wb") as fp:
            fp.write(zstd.ZstdCompressor().compress(self.data))
        self.assertEqual(read_surface_file(path), self.surface)

    def test_read_xz(self):
        path = self._path("Lib.json.xz")
        with lzma.open(path, "wb") as fp:
            fp.write(self.data)
        self.assertEqual(read_surface_file(path), self.surface)

    def test_missing(self):
        with self.assertRaises(ApiCompatNotFoundError):
            read_surface_file(self._path("missing.json"))

    def test_malformed(self):
        for name, content in (
            ("bad.json", b"{nope"),
            ("list.json", b"[]"),
            ("bad.json.xz", b"not xz data"),
            ("bad.json.zst", b"not zstd data"),
        ):
            path = self._path(name)
            with open(path, "wb") as fp:
                fp.write(content)
            with self.subTest(name=name):
                with self.assertRaises(ApiCompatParseError):
                    read_surface_file(path)


class SurfaceFileProviderTests(unittest.TestCase):
    def setUp(self):
        log.debug("Preparing %s", self._testMethodName)
        self._tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmpdir.cleanup)
        self.provider = SurfaceFileProvider()

    def _load(self, *surfaces, side=Side.LEFT, references=()):
        metadata = [
            _metadata(
                write_surface(self._tmpdir.name, f"Lib{i}.json", surface), references
            )
            for i, surface in enumerate(surfaces)
        ]
        return self.provider.load(metadata, side)

    def test_node_ids(self):
        surface = make_surface(
            make_type(
                "First",
                attributes=[attr("T:System.SerializableAttribute")],
                generic_parameters=[{"name": "T", "constraints": ["class"]}],
                members=[
                    make_member("constructor"),
                    make_method(
                        "F",
                        [("a", "System.Int32"), ("b", "System.String")],
                        return_type="int",
                    ),
                    make_member("property", "Item", [("i", "System.Int32")],
                                type="System.String"),
                    make_member("event", "Changed", type="System.EventHandler"),
                    make_member("field", "Value", type="System.Int32"),
                ],
            )
        )
        forest = self._load(surface)
        ids = [node.stable_id for node in forest.walk()]
        self.assertEqual(
            ids,
            [
                "N:CompatTests",
                "T:CompatTests.First`1",
                "T:CompatTests.First`1<0>",
                "M:CompatTests.First`1.#ctor",
                "M:CompatTests.First`1.F(System.Int32,System.String)",
                "M:CompatTests.First`1.F(System.Int32,System.String)->int",
                "M:CompatTests.First`1.F(System.Int32,System.String)$0",
                "M:CompatTests.First`1.F(System.Int32,System.String)$1",
                "P:CompatTests.First`1.Item(System.Int32)",
                "P:CompatTests.First`1.Item(System.Int32)$0",
                "E:CompatTests.First`1.Changed",
                "F:CompatTests.First`1.Value",
            ],
        )

    def test_node_details(self):
        surface = make_surface(
            make_type(
                "First",
                kind="struct",
                modifiers=["sealed", "readonly"],
                attributes=[attr("T:FooAttribute", "S", A=True)],
            )
        )
        forest = self._load(surface)
        (namespace,) = forest.roots
        (node,) = namespace.children
        self.assertEqual(node.kind, DeclarationKind.TYPE)
        self.assertEqual(node.side, Side.LEFT)
        self.assertEqual(node.type_name, "struct")
        self.assertEqual(node.accessibility, "public")
        self.assertEqual(node.modifiers, frozenset(["sealed", "readonly"]))
        self.assertEqual(
            node.attributes, (AttributeData.create("T:FooAttribute", ["S"], {"A": True}),)
        )
        self.assertEqual(node.metadata, forest.metadata[0])

    def test_namespaces_merge(self):
        forest = self._load(
            make_surface(make_type("First")), make_surface(make_type("Second"))
        )
        self.assertEqual(len(forest.roots), 1)
        self.assertEqual(
            [child.stable_id for child in forest.roots[0].children],
            ["T:CompatTests.First", "T:CompatTests.Second"],
        )
        self.assertEqual(
            [child.metadata for child in forest.roots[0].children],
            list(forest.metadata),
        )

    def test_duplicate_type_keeps_first(self):
        forest = self._load(
            make_surface(make_type("First", accessibility="public")),
            make_surface(make_type("First", accessibility="internal")),
        )
        (node,) = forest.roots[0].children
        self.assertEqual(node.accessibility, "public")

    def test_unresolved_reference(self):
        surface = make_surface(
            make_type("First"), references=["System.Runtime", "System.Missing"]
        )
        forest = self._load(surface, references=["refs/System.Runtime.dll"])
        self.assertEqual([item[0] for item in forest.unresolved], ["System.Missing"])

    def test_references_not_checked_without_paths(self):
        surface = make_surface(make_type("First"), references=["System.Missing"])
        forest = self._load(surface)
        self.assertEqual(forest.unresolved, [])

    def test_unresolved_declarations_omitted(self):
        surface = make_surface(
            make_type("First", unresolved=True),
            make_type("Second", members=[make_method("F", unresolved=True)]),
        )
        forest = self._load(surface)
        self.assertEqual(
            [item[0] for item in forest.unresolved],
            ["T:CompatTests.First", "M:CompatTests.Second.F"],
        )
        self.assertEqual(
            [node.stable_id for node in forest.walk()],
            ["N:CompatTests", "T:CompatTests.Second"],
        )

    def test_malformed_declarations(self):
        for surface in (
            {"namespaces": {}},
            {"namespaces": [{"types": []}]},
            make_surface({"kind": "class"}),
            make_surface(make_type("First", members=[{"kind": "widget", "name": "X"}])),
            make_surface(make_type("First", attributes=[{"arguments": []}])),
            make_surface(make_type("First", attributes=[attr("T:X", {"a": 1})])),
            make_surface(make_type("First", modifiers="sealed")),
            make_surface(
                make_type(
                    "First", generic_parameters=[{"name": "T", "constraints": [1]}]
                )
            ),
        ):
            with self.subTest(surface=surface):
                with self.assertRaises(ApiCompatParseError):
                    self._load(surface)

    def test_return_value_key_ignores_type(self):
        forest = self._load(
            make_surface(make_type("First", members=[make_method("F", return_type="int")]))
        )
        method = forest.roots[0].children[0].children[0]
        (return_value,) = method.children
        self.assertEqual(return_value.stable_id, "M:CompatTests.First.F->int")
        self.assertEqual(return_value.key, "M:CompatTests.First.F->")
        self.assertIs(method.get_child("M:CompatTests.First.F->"), return_value)
        self.assertEqual(method.key, method.stable_id)
