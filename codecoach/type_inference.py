"""Declaration-site type inference and alias tracking.

Both passes are heuristic. Types come from variable initializers only;
reassignment, branches and function returns are never followed. Aliases are
recorded when an object or array bound to one name is bound to another name
or stored in an object literal property.
"""

from dataclasses import dataclass, field
from enum import Enum

from codecoach.ast_extractors.base import Node, NodeIndex, NodeKind, kind, node_location
from codecoach.ast_extractors.javascript import (
    MUTATING_ARRAY_METHODS,
    call_name,
    callee,
    declarator_parts,
    identifier_name,
    member_object,
    member_property,
    method_call,
    object_pairs,
    pair_key_name,
    static_call,
    unwrap,
)


class InferredType(Enum):
    """Coarse value types the detectors reason about."""

    ARRAY = "array"
    OBJECT = "object"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    FUNCTION = "function"
    REGEXP = "regexp"
    NULL = "null"
    UNDEFINED = "undefined"
    MAP = "map"
    SET = "set"
    DATE = "date"
    PROMISE = "promise"
    UNKNOWN = "unknown"

    @property
    def is_mutable_container(self) -> bool:
        return self in (InferredType.OBJECT, InferredType.ARRAY)


TypeMap = dict[str, InferredType]

_LITERAL_TYPES = {
    NodeKind.ARRAY: InferredType.ARRAY,
    NodeKind.OBJECT: InferredType.OBJECT,
    NodeKind.STRING: InferredType.STRING,
    NodeKind.TEMPLATE_STRING: InferredType.STRING,
    NodeKind.NUMBER: InferredType.NUMBER,
    NodeKind.TRUE: InferredType.BOOLEAN,
    NodeKind.FALSE: InferredType.BOOLEAN,
    NodeKind.NULL: InferredType.NULL,
    NodeKind.UNDEFINED: InferredType.UNDEFINED,
    NodeKind.REGEX: InferredType.REGEXP,
    NodeKind.ARROW_FUNCTION: InferredType.FUNCTION,
    NodeKind.FUNCTION_EXPRESSION: InferredType.FUNCTION,
}

_CONSTRUCTOR_TYPES = {
    "Map": InferredType.MAP,
    "Set": InferredType.SET,
    "Date": InferredType.DATE,
    "Promise": InferredType.PROMISE,
    "Array": InferredType.ARRAY,
    "RegExp": InferredType.REGEXP,
}

_CALL_TYPES = {
    "Array": InferredType.ARRAY,
    "String": InferredType.STRING,
    "Number": InferredType.NUMBER,
    "parseInt": InferredType.NUMBER,
    "parseFloat": InferredType.NUMBER,
    "Boolean": InferredType.BOOLEAN,
}

_STATIC_CALL_TYPES = {
    ("Array", "from"): InferredType.ARRAY,
    ("Object", "keys"): InferredType.ARRAY,
    ("Object", "values"): InferredType.ARRAY,
    ("Object", "entries"): InferredType.ARRAY,
    ("Object", "assign"): InferredType.OBJECT,
    ("Object", "create"): InferredType.OBJECT,
    ("Object", "fromEntries"): InferredType.OBJECT,
    ("JSON", "stringify"): InferredType.STRING,
}


def infer_type(node: Node | None) -> InferredType:
    """Coarse type of an initializer expression."""
    node = unwrap(node)
    if node is None:
        return InferredType.UNKNOWN

    k = kind(node)
    literal = _LITERAL_TYPES.get(k)
    if literal is not None:
        return literal

    if k is NodeKind.NEW_EXPRESSION:
        return _CONSTRUCTOR_TYPES.get(identifier_name(callee(node)), InferredType.OBJECT)

    if k is NodeKind.CALL_EXPRESSION:
        name = call_name(node)
        if name in _CALL_TYPES:
            return _CALL_TYPES[name]
        return _STATIC_CALL_TYPES.get(static_call(node), InferredType.UNKNOWN)

    return InferredType.UNKNOWN


def build_type_map(index: NodeIndex) -> TypeMap:
    """Map each declared identifier to the type of its initializer.

    Declarators are read in source order across all scopes; a later known
    type for the same name replaces an earlier one.
    """
    types: TypeMap = {}
    for declarator in index.of(NodeKind.VARIABLE_DECLARATOR):
        target, value = declarator_parts(declarator)
        if kind(target) is not NodeKind.IDENTIFIER or value is None:
            continue
        inferred = infer_type(value)
        if inferred is not InferredType.UNKNOWN:
            types[target.text.decode("utf-8", errors="replace")] = inferred
    return types


def type_of(types: TypeMap, name: str | None) -> InferredType:
    if name is None:
        return InferredType.UNKNOWN
    return types.get(name, InferredType.UNKNOWN)


@dataclass(frozen=True)
class MutationSite:
    path: str
    line: int
    column: int


@dataclass
class AliasGroup:
    """A source value and every name or property path bound to it."""

    source: str
    aliases: list[str] = field(default_factory=list)
    mutations: list[MutationSite] = field(default_factory=list)

    @property
    def shared(self) -> bool:
        return len(self.aliases) > 1

    def others(self) -> list[str]:
        return [a for a in self.aliases if a != self.source]


@dataclass
class AliasMap:
    """Canonical-name bookkeeping for aliased objects and arrays."""

    alias_of: dict[str, str] = field(default_factory=dict)
    groups: dict[str, AliasGroup] = field(default_factory=dict)
    mutated_sources: list[str] = field(default_factory=list)

    def canonical(self, name: str) -> str:
        return self.alias_of.get(name, name)

    def ensure_source(self, name: str) -> AliasGroup:
        group = self.groups.get(name)
        if group is None:
            group = AliasGroup(source=name, aliases=[name])
            self.groups[name] = group
        return group

    def add_alias(self, alias: str, source: str) -> None:
        canonical = self.canonical(source)
        group = self.ensure_source(canonical)
        self.alias_of[alias] = canonical
        if alias not in group.aliases:
            group.aliases.append(alias)

    def group_for(self, path: str) -> AliasGroup | None:
        """Shared group owning path, trying ``root.prop`` before ``root``."""
        segments = path.split(".")
        candidates = []
        if len(segments) > 2:
            candidates.append(".".join(segments[:2]))
        candidates.append(segments[0])
        for candidate in candidates:
            if candidate not in self.alias_of and candidate not in self.groups:
                continue
            group = self.groups.get(self.canonical(candidate))
            if group is not None and group.shared:
                return group
        return None

    def record_mutation(self, path: str, line: int, column: int) -> None:
        group = self.group_for(path)
        if group is None:
            return
        if not group.mutations:
            self.mutated_sources.append(group.source)
        group.mutations.append(MutationSite(path, line, column))

    @property
    def mutated(self) -> list[AliasGroup]:
        """Shared groups with at least one mutation, in order of first mutation."""
        return [self.groups[name] for name in self.mutated_sources]


def _simple_member_path(node: Node) -> str | None:
    """``a.b`` or ``a.b.c`` for dot accesses rooted at an identifier."""
    node = unwrap(node)
    if kind(node) is not NodeKind.MEMBER_EXPRESSION:
        return None
    prop = member_property(node)
    if prop is None:
        return None

    obj = member_object(node)
    root = identifier_name(obj)
    if root is not None:
        return f"{root}.{prop}"

    if kind(obj) is NodeKind.MEMBER_EXPRESSION:
        inner_root = identifier_name(member_object(obj))
        inner_prop = member_property(obj)
        if inner_root is not None and inner_prop is not None:
            return f"{inner_root}.{inner_prop}.{prop}"
    return None


def _shareable(name: str | None, types: TypeMap, aliases: AliasMap) -> bool:
    """Object or array typed, or already bound into a group."""
    if name is None:
        return False
    if name in aliases.alias_of or name in aliases.groups:
        return True
    return type_of(types, name).is_mutable_container


def build_alias_map(index: NodeIndex, types: TypeMap) -> AliasMap:
    """Record aliasing edges, then the mutations made through shared groups."""
    aliases = AliasMap()

    for declarator in index.of(NodeKind.VARIABLE_DECLARATOR):
        target, value = declarator_parts(declarator)
        name = identifier_name(target)
        if name is None or value is None:
            continue

        source = identifier_name(value)
        if _shareable(source, types, aliases):
            aliases.add_alias(name, source)

        if kind(value) is NodeKind.OBJECT:
            for pair in object_pairs(value):
                ref = identifier_name(pair.child_by_field_name("value"))
                if not _shareable(ref, types, aliases):
                    continue
                key = pair_key_name(pair) or "?"
                aliases.add_alias(f"{name}.{key}", ref)

    for assignment in index.of(
        NodeKind.ASSIGNMENT_EXPRESSION, NodeKind.AUGMENTED_ASSIGNMENT_EXPRESSION
    ):
        path = _simple_member_path(assignment.child_by_field_name("left"))
        if path is not None:
            line, column = node_location(assignment)
            aliases.record_mutation(path, line, column)

    for call in index.of(NodeKind.CALL_EXPRESSION):
        obj, method = method_call(call)
        if method not in MUTATING_ARRAY_METHODS:
            continue
        path = identifier_name(obj) or _simple_member_path(obj)
        if path is not None:
            line, column = node_location(call)
            aliases.record_mutation(f"{path}.{method}", line, column)

    return aliases
