# Copyright Red Hat
#
# apicompat/compare/symbols.py - API compatibility symbol graph
#
# This file is part of the apicompat project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Symbol graph model: assembly metadata, declarations, attributes and the
stable identifiers used to pair declarations between two surfaces.

Stable identifiers follow the documentation comment id conventions:

* ``N:Ns`` for namespaces and ``T:Ns.Type`` for types (generic types carry
  an arity suffix, ``T:Ns.Type`2``),
* ``F:``, ``P:``, ``E:`` and ``M:`` prefixes for fields, properties,
  events and methods, with ``#ctor`` naming constructors and a
  parenthesised parameter type list for members that take parameters,
* ``<member>-><type>`` for return values, ``<member>$<index>`` for
  parameters and ``<owner><<index>>`` for generic parameters.

Return values pair on ``<member>->`` so that a changed return type is
reported as a change rather than lost.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterator, List, Optional, Sequence, Tuple
import logging

from .difftypes import DeclarationKind, Side

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: Stable id prefixes by declaration kind.
_ID_PREFIXES = {
    DeclarationKind.NAMESPACE: "N:",
    DeclarationKind.TYPE: "T:",
    DeclarationKind.FIELD: "F:",
    DeclarationKind.PROPERTY: "P:",
    DeclarationKind.METHOD: "M:",
    DeclarationKind.EVENT: "E:",
    DeclarationKind.CONSTRUCTOR: "M:",
}

#: Member name used for instance constructors.
CONSTRUCTOR_NAME = "#ctor"


def namespace_id(name: str) -> str:
    """
    Return the stable id for the namespace ``name``.

    :param name: The fully qualified namespace name.
    :type name: ``str``
    :returns: The namespace stable id.
    :rtype: ``str``
    """
    return f"{_ID_PREFIXES[DeclarationKind.NAMESPACE]}{name}"


def type_qualified_name(namespace: str, name: str, arity: int = 0) -> str:
    """
    Return the qualified name of a type, including any generic arity.
    """
    qualified = f"{namespace}.{name}" if namespace else name
    return f"{qualified}`{arity}" if arity else qualified


def type_id(qualified_name: str) -> str:
    """
    Return the stable id for the type ``qualified_name``.

    :param qualified_name: A name returned by ``type_qualified_name()``.
    :type qualified_name: ``str``
    :returns: The type stable id.
    :rtype: ``str``
    """
    return f"{_ID_PREFIXES[DeclarationKind.TYPE]}{qualified_name}"


def member_id(
    kind: DeclarationKind,
    owner: str,
    name: str,
    parameter_types: Sequence[str] = (),
    arity: int = 0,
) -> str:
    """
    Return the stable id for a type member.

    Overloads are distinguished by their parameter type list so that two
    members sharing a simple name never share an id.

    :param kind: The member declaration kind.
    :type kind: ``DeclarationKind``
    :param owner: The qualified name of the declaring type.
    :type owner: ``str``
    :param name: The simple member name.
    :type name: ``str``
    :param parameter_types: The member's parameter types in order.
    :type parameter_types: ``Sequence[str]``
    :param arity: The number of generic parameters of a method.
    :type arity: ``int``
    :returns: The member stable id.
    :rtype: ``str``
    """
    if kind not in _ID_PREFIXES or not kind.is_member:
        raise ValueError(f"Not a member kind: {kind}")
    if kind == DeclarationKind.CONSTRUCTOR:
        name = CONSTRUCTOR_NAME
    mid = f"{_ID_PREFIXES[kind]}{owner}.{name}"
    if arity and kind == DeclarationKind.METHOD:
        mid += f"``{arity}"
    if parameter_types:
        mid += f"({','.join(parameter_types)})"
    return mid


def return_value_id(owner_id: str, return_type: str) -> str:
    """Return the stable id of a method's return value."""
    return f"{owner_id}->{return_type}"


def return_value_key(owner_id: str) -> str:
    """
    Return the key pairing a method's return value. Unlike the stable id it
    does not depend on the return type.
    """
    return f"{owner_id}->"


def parameter_id(owner_id: str, index: int) -> str:
    """Return the stable id of the parameter at ``index``."""
    return f"{owner_id}${index}"


def generic_parameter_id(owner_id: str, index: int) -> str:
    """Return the stable id of the generic parameter at ``index``."""
    return f"{owner_id}<{index}>"


def attribute_reference(declaration_id: str, attribute_type_id: str) -> str:
    """
    Return the diagnostic reference for an attribute applied to a
    declaration.
    """
    return f"{declaration_id}:[{attribute_type_id}]"


def _freeze(value: Any) -> Any:
    """
    Convert an attribute argument value to a hashable, type tagged form.

    Tagging keeps values of different declared types distinct even when
    Python would consider them equal (``True == 1``).

    :param value: A decoded JSON value.
    :returns: A hashable representation of ``value``.
    """
    if value is None:
        return ("null", None)
    if isinstance(value, bool):
        return ("bool", value)
    if isinstance(value, int):
        return ("int", value)
    if isinstance(value, float):
        return ("float", value)
    if isinstance(value, str):
        return ("string", value)
    if isinstance(value, (list, tuple)):
        return ("array", tuple(_freeze(item) for item in value))
    raise TypeError(f"Unsupported attribute argument value: {value!r}")


def _thaw(value: Tuple[str, Any]) -> Any:
    tag, inner = value
    if tag == "array":
        return [_thaw(item) for item in inner]
    return inner


@dataclass(frozen=True)
class MetadataInformation:
    """
    Identity of one assembly taking part in a comparison.
    """

    #: The assembly's simple name.
    assembly_name: str
    #: The logical identity of the assembly used in diagnostics.
    assembly_id: str
    #: Path to the file describing the assembly's surface.
    full_path: str
    #: Paths to reference assemblies used to resolve declarations.
    references: Tuple[str, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        return self.assembly_id


@dataclass(frozen=True)
class AttributeData:
    """
    One attribute applied to a declaration.

    Constructor and named arguments are stored in frozen, type tagged form
    so that equality is value equality over the declared value types.
    """

    #: Stable id of the attribute type, e.g. ``T:System.SerializableAttribute``.
    type_id: str
    #: Positional constructor arguments.
    arguments: Tuple[Any, ...] = ()
    #: Named arguments as sorted ``(name, value)`` pairs.
    named_arguments: Tuple[Tuple[str, Any], ...] = ()

    @classmethod
    def create(
        cls,
        type_id: str,
        arguments: Sequence[Any] = (),
        named_arguments: Optional[Dict[str, Any]] = None,
    ) -> "AttributeData":
        """
        Construct an ``AttributeData`` from plain argument values.

        :param type_id: The attribute type stable id.
        :type type_id: ``str``
        :param arguments: Positional constructor argument values.
        :type arguments: ``Sequence[Any]``
        :param named_arguments: Named argument values.
        :type named_arguments: ``Optional[Dict[str, Any]]``
        :returns: A new ``AttributeData`` instance.
        :rtype: ``AttributeData``
        """
        named_arguments = named_arguments or {}
        return cls(
            type_id,
            tuple(_freeze(arg) for arg in arguments),
            tuple(
                (name, _freeze(named_arguments[name]))
                for name in sorted(named_arguments)
            ),
        )

    def __str__(self) -> str:
        args = [repr(_thaw(arg)) for arg in self.arguments]
        args.extend(f"{name}={_thaw(val)!r}" for name, val in self.named_arguments)
        return f"[{self.type_id}({', '.join(args)})]"


class DeclarationNode:
    """
    A declaration in one side's symbol graph.
    """

    # pylint: disable=too-many-arguments
    def __init__(
        self,
        kind: DeclarationKind,
        name: str,
        stable_id: str,
        side: Side,
        metadata: Optional[MetadataInformation] = None,
        attributes: Sequence[AttributeData] = (),
        accessibility: Optional[str] = None,
        modifiers: FrozenSet[str] = frozenset(),
        constraints: Tuple[str, ...] = (),
        type_name: Optional[str] = None,
        key: Optional[str] = None,
    ):
        """
        Initialise a new ``DeclarationNode``.

        :param kind: The declaration kind.
        :type kind: ``DeclarationKind``
        :param name: The simple name of the declaration.
        :type name: ``str``
        :param stable_id: The identifier used to pair this declaration.
        :type stable_id: ``str``
        :param side: The side this declaration belongs to.
        :type side: ``Side``
        :param metadata: The assembly contributing this declaration.
        :type metadata: ``Optional[MetadataInformation]``
        :param attributes: Attributes applied to this declaration.
        :type attributes: ``Sequence[AttributeData]``
        :param accessibility: Declared accessibility, if any.
        :type accessibility: ``Optional[str]``
        :param modifiers: Declared modifiers (``static``, ``sealed``...)
        :type modifiers: ``FrozenSet[str]``
        :param constraints: Generic parameter constraints.
        :type constraints: ``Tuple[str, ...]``
        :param type_name: Declared type of a field, property, parameter or
                          return value.
        :type type_name: ``Optional[str]``
        :param key: The key pairing this declaration with its counterpart;
                    defaults to ``stable_id``.
        :type key: ``Optional[str]``
        """
        self.kind = kind
        self.name = name
        self.stable_id = stable_id
        self.side = side
        self.metadata = metadata
        self.attributes: Tuple[AttributeData, ...] = tuple(attributes)
        self.accessibility = accessibility
        self.modifiers = frozenset(modifiers)
        self.constraints = tuple(constraints)
        self.type_name = type_name
        self.key = key or stable_id
        self.children: List["DeclarationNode"] = []
        self._child_ids: Dict[str, "DeclarationNode"] = {}

    def __repr__(self) -> str:
        return (
            f"DeclarationNode({self.kind.value}, {self.stable_id!r}, "
            f"{self.side.value})"
        )

    def add_child(self, child: "DeclarationNode") -> "DeclarationNode":
        """
        Append ``child`` to this node's children.

        :param child: The child declaration.
        :type child: ``DeclarationNode``
        :returns: The child node.
        :raises: ``ValueError`` if ``child`` belongs to the other side or
                 a sibling already uses the same stable id.
        """
        if child.side != self.side:
            raise ValueError(
                f"Cannot attach {child.side.value} node {child.stable_id} to "
                f"{self.side.value} node {self.stable_id}"
            )
        if child.key in self._child_ids:
            raise ValueError(
                f"Duplicate declaration {child.stable_id} in {self.stable_id}"
            )
        self._child_ids[child.key] = child
        self.children.append(child)
        return child

    def get_child(self, key: str) -> Optional["DeclarationNode"]:
        """Return the child paired on ``key`` or ``None``."""
        return self._child_ids.get(key)

    def walk(self) -> Iterator["DeclarationNode"]:
        """Iterate over this node and all descendants in declaration order."""
        yield self
        for child in self.children:
            yield from child.walk()


class SymbolForest:
    """
    The merged namespace forest for one side of a comparison.
    """

    def __init__(
        self,
        side: Side,
        metadata: Sequence[MetadataInformation] = (),
    ):
        """
        Initialise a new, empty ``SymbolForest``.

        :param side: The side this forest describes.
        :type side: ``Side``
        :param metadata: The assemblies merged into this forest.
        :type metadata: ``Sequence[MetadataInformation]``
        """
        self.side = side
        self.metadata: Tuple[MetadataInformation, ...] = tuple(metadata)
        self.roots: List[DeclarationNode] = []
        self._root_ids: Dict[str, DeclarationNode] = {}
        #: ``(stable_id, MetadataInformation)`` pairs that failed to resolve.
        self.unresolved: List[Tuple[str, Optional[MetadataInformation]]] = []

    @property
    def default_metadata(self) -> Optional[MetadataInformation]:
        """The first assembly of this forest, used as diagnostic context."""
        return self.metadata[0] if self.metadata else None

    def add_namespace(self, node: DeclarationNode) -> DeclarationNode:
        """
        Add a namespace root, or return the existing root with the same id
        so that namespaces from several assemblies merge.

        :param node: The namespace node to add.
        :type node: ``DeclarationNode``
        :returns: The namespace node now present in this forest.
        :rtype: ``DeclarationNode``
        """
        if node.kind != DeclarationKind.NAMESPACE:
            raise ValueError(f"Forest roots must be namespaces: {node!r}")
        if node.side != self.side:
            raise ValueError(f"Cannot add {node.side.value} node to {self.side.value} forest")
        existing = self._root_ids.get(node.stable_id)
        if existing is not None:
            return existing
        self._root_ids[node.stable_id] = node
        self.roots.append(node)
        return node

    def add_unresolved(
        self, stable_id: str, metadata: Optional[MetadataInformation]
    ):
        """Record a reference or declaration that could not be resolved."""
        _log_debug("Unresolved %s in %s", stable_id, metadata)
        self.unresolved.append((stable_id, metadata))

    def walk(self) -> Iterator[DeclarationNode]:
        """Iterate over every node in this forest in declaration order."""
        for root in self.roots:
            yield from root.walk()
