# Copyright Red Hat
#
# apicompat/compare/provider.py - API compatibility symbol providers
#
# This file is part of the apicompat project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Symbol providers build the declaration forest for one side of a
comparison from a list of assembly metadata descriptors.

The ``SurfaceFileProvider`` reads JSON surface files, optionally
compressed with zstandard (``.zst``) or xz (``.xz``).
"""
from typing import Any, Dict, List, Optional, Sequence
import logging
import json
import lzma

import zstandard as zstd

from apicompat import (
    APICOMPAT_SUBSYSTEM_COMPARE,
    ApiCompatNotFoundError,
    ApiCompatParseError,
)

from .difftypes import DeclarationKind, Side
from .discovery import assembly_name
from .symbols import (
    CONSTRUCTOR_NAME,
    AttributeData,
    DeclarationNode,
    MetadataInformation,
    SymbolForest,
    generic_parameter_id,
    member_id,
    namespace_id,
    parameter_id,
    return_value_id,
    return_value_key,
    type_id,
    type_qualified_name,
)

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_compare(msg, *args, **kwargs):
    """A wrapper for compare subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": APICOMPAT_SUBSYSTEM_COMPARE}, **kwargs)


#: Surface file member kinds.
MEMBER_KINDS = {
    "field": DeclarationKind.FIELD,
    "property": DeclarationKind.PROPERTY,
    "method": DeclarationKind.METHOD,
    "event": DeclarationKind.EVENT,
    "constructor": DeclarationKind.CONSTRUCTOR,
}

_DECOMPRESS_ERRORS = (zstd.ZstdError, lzma.LZMAError, EOFError)


def read_surface_file(path: str) -> Dict[str, Any]:
    """
    Read and decode the surface file at ``path``.

    Files ending in ``.zst`` are decompressed with zstandard and files
    ending in ``.xz`` with lzma.

    :param path: The surface file path.
    :type path: ``str``
    :returns: The decoded JSON object.
    :rtype: ``Dict[str, Any]``
    :raises: ``ApiCompatNotFoundError`` if the file does not exist or
             ``ApiCompatParseError`` if it cannot be read or decoded.
    """
    try:
        if path.endswith(".zst"):
            dctx = zstd.ZstdDecompressor()
            with open(path, mode="rb") as fp:
                with dctx.stream_reader(fp) as reader:
                    data = reader.read()
        elif path.endswith(".xz"):
            with lzma.LZMAFile(filename=path, mode="rb") as reader:
                data = reader.read()
        else:
            with open(path, mode="rb") as fp:
                data = fp.read()
    except FileNotFoundError as err:
        raise ApiCompatNotFoundError(f"Surface file '{path}' not found") from err
    except (OSError, *_DECOMPRESS_ERRORS) as err:
        raise ApiCompatParseError(f"Failed to read surface file '{path}': {err}") from err

    try:
        surface = json.loads(data.decode("utf8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as err:
        raise ApiCompatParseError(f"Malformed surface file '{path}': {err}") from err

    if not isinstance(surface, dict):
        raise ApiCompatParseError(
            f"Malformed surface file '{path}': expected a JSON object"
        )
    return surface


class SymbolProvider:
    """
    Abstract base class for symbol providers.
    """

    name = "provider"

    def load(
        self, metadata: Sequence[MetadataInformation], side: Side
    ) -> SymbolForest:
        """
        Build the merged forest for ``metadata``.

        :param metadata: The assemblies to load.
        :type metadata: ``Sequence[MetadataInformation]``
        :param side: The side being loaded.
        :type side: ``Side``
        :returns: A forest holding the declarations of every assembly.
        :rtype: ``SymbolForest``
        """
        raise NotImplementedError


class SurfaceFileProvider(SymbolProvider):
    """
    Symbol provider for JSON surface files.
    """

    name = "surface"

    def load(
        self, metadata: Sequence[MetadataInformation], side: Side
    ) -> SymbolForest:
        forest = SymbolForest(side, metadata)
        for info in metadata:
            _log_debug_compare("Loading %s surface %s", side.value, info.full_path)
            surface = read_surface_file(info.full_path)
            _SurfaceLoader(surface, info, forest).load()
        _log_debug(
            "Loaded %d %s namespaces from %d assemblies (%d unresolved)",
            len(forest.roots),
            side.value,
            len(metadata),
            len(forest.unresolved),
        )
        return forest


class _SurfaceLoader:
    """
    Convert one decoded surface file into declaration nodes.
    """

    def __init__(
        self,
        surface: Dict[str, Any],
        metadata: MetadataInformation,
        forest: SymbolForest,
    ):
        self.surface = surface
        self.metadata = metadata
        self.forest = forest
        self.side = forest.side

    def _error(self, msg: str) -> ApiCompatParseError:
        return ApiCompatParseError(f"{self.metadata.full_path}: {msg}")

    def _list(self, data: Dict[str, Any], key: str) -> List[Any]:
        value = data.get(key, [])
        if value is None:
            return []
        if not isinstance(value, list):
            raise self._error(f"'{key}' must be a list: {value!r}")
        return value

    def _dict(self, value: Any, what: str) -> Dict[str, Any]:
        if not isinstance(value, dict):
            raise self._error(f"{what} must be an object: {value!r}")
        return value

    def _str(self, data: Dict[str, Any], key: str, required=True) -> Optional[str]:
        value = data.get(key)
        if value is None and not required:
            return None
        if not isinstance(value, str):
            raise self._error(f"'{key}' must be a string: {value!r}")
        return value

    def _unresolved(self, data: Dict[str, Any], stable_id: str) -> bool:
        if data.get("unresolved", False):
            _log_warn(
                "Unresolved declaration %s in %s", stable_id, self.metadata.assembly_id
            )
            self.forest.add_unresolved(stable_id, self.metadata)
            return True
        return False

    def _attributes(self, data: Dict[str, Any]) -> List[AttributeData]:
        attributes = []
        for entry in self._list(data, "attributes"):
            entry = self._dict(entry, "Attribute")
            named = entry.get("named_arguments") or {}
            if not isinstance(named, dict):
                raise self._error(f"'named_arguments' must be an object: {named!r}")
            try:
                attributes.append(
                    AttributeData.create(
                        self._str(entry, "type"),
                        self._list(entry, "arguments"),
                        named,
                    )
                )
            except TypeError as err:
                raise self._error(str(err)) from err
        return attributes

    def _node(self, kind, name, stable_id, data, **kwargs) -> DeclarationNode:
        modifiers = data.get("modifiers") or ()
        if not isinstance(modifiers, list) and modifiers != ():
            raise self._error(f"'modifiers' must be a list: {modifiers!r}")
        return DeclarationNode(
            kind,
            name,
            stable_id,
            self.side,
            metadata=self.metadata,
            attributes=self._attributes(data),
            accessibility=self._str(data, "accessibility", required=False),
            modifiers=frozenset(modifiers),
            **kwargs,
        )

    def _add(self, parent: DeclarationNode, node: DeclarationNode):
        if parent.get_child(node.key) is not None:
            _log_warn(
                "Ignoring duplicate declaration %s in %s",
                node.stable_id,
                self.metadata.assembly_id,
            )
            return None
        return parent.add_child(node)

    def load(self):
        """Add the surface's declarations to the forest."""
        self._check_references()
        for entry in self._list(self.surface, "namespaces"):
            self._load_namespace(self._dict(entry, "Namespace"))

    def _check_references(self):
        if not self.metadata.references:
            return
        available = {assembly_name(path) for path in self.metadata.references}
        for reference in self._list(self.surface, "references"):
            if not isinstance(reference, str):
                raise self._error(f"Invalid reference: {reference!r}")
            if reference not in available:
                _log_warn(
                    "Could not resolve reference '%s' of %s",
                    reference,
                    self.metadata.assembly_id,
                )
                self.forest.add_unresolved(reference, self.metadata)

    def _generic_parameters(self, owner: DeclarationNode, data: Dict[str, Any]):
        for index, entry in enumerate(self._list(data, "generic_parameters")):
            entry = self._dict(entry, "Generic parameter")
            constraints = self._list(entry, "constraints")
            for constraint in constraints:
                if not isinstance(constraint, str):
                    raise self._error(f"Invalid constraint: {constraint!r}")
            owner.add_child(
                self._node(
                    DeclarationKind.GENERIC_PARAMETER,
                    self._str(entry, "name"),
                    generic_parameter_id(owner.stable_id, index),
                    entry,
                    constraints=tuple(constraints),
                )
            )

    def _load_namespace(self, data: Dict[str, Any]):
        name = self._str(data, "name")
        stable_id = namespace_id(name)
        if self._unresolved(data, stable_id):
            return
        namespace = self.forest.add_namespace(
            DeclarationNode(
                DeclarationKind.NAMESPACE,
                name,
                stable_id,
                self.side,
                metadata=self.metadata,
            )
        )
        for entry in self._list(data, "types"):
            self._load_type(namespace, self._dict(entry, "Type"))

    def _load_type(self, namespace: DeclarationNode, data: Dict[str, Any]):
        name = self._str(data, "name")
        arity = len(self._list(data, "generic_parameters"))
        qualified_name = type_qualified_name(namespace.name, name, arity)
        stable_id = type_id(qualified_name)
        if self._unresolved(data, stable_id):
            return
        node = self._add(
            namespace,
            self._node(
                DeclarationKind.TYPE,
                name,
                stable_id,
                data,
                type_name=self._str(data, "kind", required=False),
            ),
        )
        if node is None:
            return
        self._generic_parameters(node, data)
        for entry in self._list(data, "members"):
            self._load_member(node, qualified_name, self._dict(entry, "Member"))

    def _load_member(
        self, owner: DeclarationNode, qualified_name: str, data: Dict[str, Any]
    ):
        kind_name = self._str(data, "kind")
        if kind_name not in MEMBER_KINDS:
            raise self._error(f"Unknown member kind '{kind_name}'")
        kind = MEMBER_KINDS[kind_name]
        name = self._str(data, "name", required=kind != DeclarationKind.CONSTRUCTOR)
        parameters = [
            self._dict(entry, "Parameter") for entry in self._list(data, "parameters")
        ]
        parameter_types = [self._str(entry, "type") for entry in parameters]
        arity = len(self._list(data, "generic_parameters"))
        stable_id = member_id(kind, qualified_name, name or "", parameter_types, arity)
        if self._unresolved(data, stable_id):
            return

        return_type = self._str(data, "return_type", required=False)
        field_type = self._str(data, "type", required=False)
        node = self._add(
            owner,
            self._node(
                kind,
                name or CONSTRUCTOR_NAME,
                stable_id,
                data,
                type_name=return_type or field_type,
            ),
        )
        if node is None:
            return

        self._generic_parameters(node, data)
        if return_type and kind == DeclarationKind.METHOD:
            node.add_child(
                DeclarationNode(
                    DeclarationKind.RETURN_VALUE,
                    return_type,
                    return_value_id(stable_id, return_type),
                    self.side,
                    metadata=self.metadata,
                    attributes=self._attributes(
                        {"attributes": data.get("return_attributes", [])}
                    ),
                    type_name=return_type,
                    key=return_value_key(stable_id),
                )
            )
        for index, entry in enumerate(parameters):
            node.add_child(
                self._node(
                    DeclarationKind.PARAMETER,
                    self._str(entry, "name", required=False) or f"arg{index}",
                    parameter_id(stable_id, index),
                    entry,
                    type_name=parameter_types[index],
                )
            )


__all__ = [
    "MEMBER_KINDS",
    "SurfaceFileProvider",
    "SymbolProvider",
    "read_surface_file",
]
