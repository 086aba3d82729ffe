"""Semantic detectors that need the type map, the alias map or whole-tree shape.

These catch bugs the syntactic detectors cannot see: shared references that
get mutated, shallow copies whose nested objects are still shared, loops that
overrun their array and values read before hoisted initialization.
"""

from collections.abc import Iterator

from codecoach.ast_extractors.base import (
    Node,
    NodeKind,
    children,
    field,
    kind,
    node_line,
    node_text,
    walk,
)
from codecoach.ast_extractors.javascript import (
    MUTATING_ARRAY_METHODS,
    arguments,
    block_statements,
    declaration_kind,
    declarator_parts,
    declarators,
    for_condition,
    for_increment,
    for_initializer,
    function_name,
    identifier_name,
    if_parts,
    is_deferred,
    is_function_literal,
    member_chain,
    member_object,
    member_property,
    method_call,
    operator,
    static_call,
    string_value,
    subscript_index,
    unwrap,
)
from codecoach.rules.base import (
    Detection,
    DetectionSource,
    Location,
    RuleMetadata,
    StandardRuleContext,
    detection,
    keep_first,
)
from codecoach.type_inference import InferredType

METADATA = RuleMetadata(
    name="data_flow", category="data-flow", order=400, source=DetectionSource.DATAFLOW
)

MAX_NESTING = 4

MAX_PARAMS = 4

NESTING_KINDS = frozenset(
    [
        NodeKind.STATEMENT_BLOCK,
        NodeKind.IF_STATEMENT,
        NodeKind.FOR_STATEMENT,
        NodeKind.FOR_IN_STATEMENT,
        NodeKind.WHILE_STATEMENT,
        NodeKind.DO_STATEMENT,
        NodeKind.SWITCH_STATEMENT,
        NodeKind.TRY_STATEMENT,
    ]
)

PARAMETER_LIST_KINDS = (
    NodeKind.FUNCTION_DECLARATION,
    NodeKind.FUNCTION_EXPRESSION,
    NodeKind.ARROW_FUNCTION,
    NodeKind.METHOD_DEFINITION,
)

RETURNING_CALLBACK_METHODS = frozenset(
    ["map", "filter", "find", "findIndex", "some", "every", "flatMap", "reduce"]
)

ITERATION_METHODS = frozenset(
    ["map", "forEach", "filter", "find", "findIndex", "some", "every", "flatMap", "reduce"]
)

ARITHMETIC_OPERATORS = frozenset(["*", "-", "/", "%", "**"])

ASSIGNMENT_KINDS = (NodeKind.ASSIGNMENT_EXPRESSION, NodeKind.AUGMENTED_ASSIGNMENT_EXPRESSION)

NAMED_KEYS = (NodeKind.IDENTIFIER, NodeKind.PROPERTY_IDENTIFIER)


def _at(slug: str, line: int, column: int, **tags) -> Detection:
    """Detection located at an explicit position."""
    return Detection(topic_slug=slug, location=Location(line, column), **tags)


def _once_per_name(candidates: list[tuple[str, Detection]]) -> list[Detection]:
    """First detection per variable name, in the order found."""
    return [item for _name, item in keep_first(candidates, key=lambda pair: pair[0])]


def find_object_reference_sharing(context: StandardRuleContext) -> list[Detection]:
    """Mutations made through any name of an object that has several names."""
    found = []
    for group in context.aliases.mutated:
        others = ", ".join(group.others())
        for site in group.mutations:
            found.append(
                _at(
                    "object-reference-sharing",
                    site.line,
                    site.column,
                    negative=True,
                    details=f"Mutating shared object '{group.source}' via '{site.path}' — also "
                    f"referenced by {others}. Use spread/Object.assign to create a copy first.",
                )
            )
    return found


def find_nested_ternary(context: StandardRuleContext) -> list[Detection]:
    """Outer ternaries whose consequence or alternative is another ternary."""
    found = []
    for node in context.nodes(NodeKind.TERNARY_EXPRESSION):
        branches = (unwrap(field(node, "consequence")), unwrap(field(node, "alternative")))
        if any(kind(b) is NodeKind.TERNARY_EXPRESSION for b in branches):
            found.append(
                detection(
                    "nested-ternary",
                    node,
                    negative=True,
                    details="Nested ternary operator — hard to read. Consider using if/else or early returns instead.",
                )
            )
    return found


def _nesting_levels(context: StandardRuleContext) -> Iterator[tuple[Node, int]]:
    """(node, nesting level) for every block-like node, counting from top level."""
    max_depth = context.limits.get("max_tree_depth")
    stack = [(stmt, 0, 0) for stmt in reversed(context.statements)]
    while stack:
        node, level, depth = stack.pop()
        if kind(node) in NESTING_KINDS:
            level += 1
            yield node, level
        if max_depth is not None and depth >= max_depth:
            continue
        for child in reversed(children(node)):
            stack.append((child, level, depth + 1))


def find_deep_nesting(context: StandardRuleContext) -> list[Detection]:
    """Blocks nested deeper than MAX_NESTING, once per source line."""
    found = []
    for node, level in _nesting_levels(context):
        if level <= MAX_NESTING:
            continue
        found.append(
            detection(
                "deep-nesting",
                node,
                negative=True,
                details=f"Code nested {level} levels deep — consider extracting into helper functions or using early returns.",
            )
        )
    return keep_first(found, key=lambda d: d.location.line)


def _display_name(fn: Node) -> str:
    name = field(fn, "name")
    if kind(name) in NAMED_KEYS:
        return function_name(fn)
    return "anonymous"


def find_long_parameter_list(context: StandardRuleContext) -> list[Detection]:
    found = []
    for fn in context.nodes(*PARAMETER_LIST_KINDS):
        params = field(fn, "parameters")
        count = len(children(params)) if params is not None else 0
        if count <= MAX_PARAMS:
            continue
        found.append(
            detection(
                "long-parameter-list",
                fn,
                negative=True,
                details=f"Function '{_display_name(fn)}' has {count} parameters — consider using an options object instead.",
            )
        )
    return found


def _property_references(context: StandardRuleContext) -> dict[str, list[Node]]:
    """Object-literal property values that are bare object/array variables."""
    refs: dict[str, list[Node]] = {}
    for obj in context.nodes(NodeKind.OBJECT):
        for prop in children(obj):
            k = kind(prop)
            if k is NodeKind.SHORTHAND_PROPERTY_IDENTIFIER:
                name = node_text(prop)
            elif k is NodeKind.PAIR:
                name = identifier_name(field(prop, "value"))
            else:
                continue
            if name is not None and context.type_of(name).is_mutable_container:
                refs.setdefault(name, []).append(prop)
    return refs


def find_object_spread_missing(context: StandardRuleContext) -> list[Detection]:
    """One object variable stored by reference under several properties."""
    found = []
    for name, refs in _property_references(context).items():
        if len(refs) < 2:
            continue
        found.append(
            detection(
                "object-spread-missing",
                refs[1],
                negative=True,
                details=f"Object '{name}' assigned by reference to {len(refs)} properties — mutating "
                f"one affects all. Use spread ({{...{name}}}) to create independent copies.",
            )
        )
    return found


def _branch_statements(branch: Node | None) -> list[Node]:
    if branch is None:
        return []
    if kind(branch) is NodeKind.STATEMENT_BLOCK:
        return children(branch)
    return [branch]


def analyze_return_paths(statements: list[Node]) -> tuple[bool, bool, bool]:
    """(has return, has conditional return, has unconditional return).

    Only top-level returns and returns in if/else branches are considered.
    Both branches are read the same way: a block's statements, or the single
    statement (including an ``else if``) standing in for it.
    """
    has_return = conditional = unconditional = False
    for stmt in statements:
        k = kind(stmt)
        if k is NodeKind.RETURN_STATEMENT:
            has_return = unconditional = True
        elif k is NodeKind.IF_STATEMENT:
            _condition, consequence, alternative = if_parts(stmt)
            then_returns = analyze_return_paths(_branch_statements(consequence))[0]
            else_returns = analyze_return_paths(_branch_statements(alternative))[0]
            if then_returns or else_returns:
                has_return = conditional = True
            if then_returns and else_returns:
                unconditional = True
    return has_return, conditional, unconditional


def find_array_method_no_return(context: StandardRuleContext) -> list[Detection]:
    """Block-bodied callbacks of value-producing array methods that lose values."""
    found = []
    for call, method in context.method_calls(*RETURNING_CALLBACK_METHODS):
        args = arguments(call)
        if not args or not is_function_literal(args[0]):
            continue
        body = block_statements(args[0])
        if body is None:
            continue
        if not body:
            found.append(
                detection(
                    "array-method-no-return",
                    call,
                    negative=True,
                    details=f"{method}() callback has empty body — will always return undefined.",
                )
            )
            continue
        has_return, conditional, unconditional = analyze_return_paths(body)
        if not has_return:
            found.append(
                detection(
                    "array-method-no-return",
                    call,
                    negative=True,
                    details=f"{method}() callback has no return statement — will produce undefined values.",
                )
            )
        elif conditional and not unconditional:
            found.append(
                detection(
                    "array-method-no-return",
                    call,
                    negative=True,
                    trivial=True,
                    details=f"{method}() callback only returns in some branches — some elements will be undefined.",
                )
            )
    return found


def _hoisted_var_lines(statements: list[Node]) -> tuple[dict[str, int], set[str]]:
    """(initialized top-level ``var`` name -> line, top-level function names)."""
    var_lines: dict[str, int] = {}
    functions: set[str] = set()
    for stmt in statements:
        if declaration_kind(stmt) == "var":
            for declarator in declarators(stmt):
                target, value = declarator_parts(declarator)
                if kind(target) is NodeKind.IDENTIFIER and value is not None:
                    var_lines[node_text(target)] = node_line(stmt)
        elif kind(stmt) is NodeKind.FUNCTION_DECLARATION:
            name = function_name(stmt)
            if name:
                functions.add(name)
    return var_lines, functions


def find_var_used_before_init(context: StandardRuleContext) -> list[Detection]:
    """Top-level reads of a ``var`` on a line before its initializer runs.

    Function bodies are skipped since they run later, when called.
    """
    statements = context.statements
    var_lines, functions = _hoisted_var_lines(statements)
    if not var_lines:
        return []

    candidates = []
    for stmt in statements:
        if declaration_kind(stmt) == "var" or is_deferred(stmt):
            continue
        for node in walk(stmt, prune=is_deferred, max_depth=context.scan_depth):
            if kind(node) not in (NodeKind.IDENTIFIER, NodeKind.SHORTHAND_PROPERTY_IDENTIFIER):
                continue
            name = node_text(node)
            decl_line = var_lines.get(name)
            if decl_line is None or name in functions:
                continue
            ref_line = node_line(node)
            if ref_line < decl_line:
                item = detection(
                    "var-used-before-init",
                    node,
                    negative=True,
                    details=f"Variable '{name}' is used on line {ref_line} but not initialized until "
                    f"line {decl_line} — it will be undefined due to var hoisting.",
                )
                candidates.append((name, item))
    return _once_per_name(candidates)


def _dictionary_key(context: StandardRuleContext, key: Node, value: Node) -> str | None:
    """Description of a computed key that makes an array act as a dictionary."""
    text = string_value(key)
    if text is not None:
        return f'"{text}"'
    name = identifier_name(key)
    if name is None:
        return None
    key_type = context.type_of(name)
    if key_type is InferredType.STRING:
        return name
    if key_type is InferredType.NUMBER:
        return None
    if kind(unwrap(value)) is NodeKind.OBJECT:
        return name
    return None


def find_array_as_object(context: StandardRuleContext) -> list[Detection]:
    """Arrays assigned string-keyed entries, once per array."""
    candidates = []
    for node in context.nodes(*ASSIGNMENT_KINDS):
        left = unwrap(field(node, "left"))
        if kind(left) is not NodeKind.SUBSCRIPT_EXPRESSION:
            continue
        name = identifier_name(member_object(left))
        if name is None or context.type_of(name) is not InferredType.ARRAY:
            continue
        key = _dictionary_key(context, subscript_index(left), field(node, "right"))
        if key is None:
            continue
        item = detection(
            "array-as-object",
            node,
            negative=True,
            details=f"Array '{name}' is used with string key {key} — this creates object properties "
            "that .length, indexing, and iteration will miss. Use an object {} or Map instead.",
        )
        candidates.append((name, item))
    return _once_per_name(candidates)


def _zero_initialized_counter(loop: Node) -> str | None:
    """Name of the loop variable when the initializer is ``let i = 0``."""
    init = for_initializer(loop)
    if declaration_kind(init) is None:
        return None
    decls = declarators(init)
    if len(decls) != 1:
        return None
    target, value = declarator_parts(decls[0])
    if kind(target) is not NodeKind.IDENTIFIER or kind(value) is not NodeKind.NUMBER:
        return None
    try:
        if float(node_text(value)) != 0:
            return None
    except ValueError:
        return None
    return node_text(target)


def find_loop_bounds_off_by_one(context: StandardRuleContext) -> list[Detection]:
    """``for (let i = 0; i <= arr.length; i++)`` over a known array."""
    found = []
    for loop in context.nodes(NodeKind.FOR_STATEMENT):
        counter = _zero_initialized_counter(loop)
        if counter is None:
            continue
        test = for_condition(loop)
        if kind(test) is not NodeKind.BINARY_EXPRESSION or operator(test) != "<=":
            continue
        if identifier_name(field(test, "left")) != counter:
            continue
        bound = unwrap(field(test, "right"))
        if member_property(bound) != "length":
            continue
        array = identifier_name(member_object(bound))
        if array is None or context.type_of(array) is not InferredType.ARRAY:
            continue
        update = for_increment(loop)
        if (
            kind(update) is not NodeKind.UPDATE_EXPRESSION
            or operator(update) != "++"
            or identifier_name(field(update, "argument")) != counter
        ):
            continue
        found.append(
            detection(
                "loop-bounds-off-by-one",
                loop,
                negative=True,
                details=f"Loop uses 'i <= {array}.length' — this iterates one time too many. When "
                f"i === {array}.length, {array}[i] is undefined (out of bounds). Use "
                f"'i < {array}.length' instead.",
            )
        )
    return found


def _string_operand(context: StandardRuleContext, operand: Node) -> str | None:
    text = string_value(operand)
    if text is not None:
        return f'"{text}"'
    name = identifier_name(operand)
    if name is not None and context.type_of(name) is InferredType.STRING:
        return name
    return None


def find_string_arithmetic_coercion(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(NodeKind.BINARY_EXPRESSION):
        op = operator(node)
        if op not in ARITHMETIC_OPERATORS:
            continue
        operand = _string_operand(context, field(node, "left")) or _string_operand(
            context, field(node, "right")
        )
        if operand is None:
            continue
        return [
            detection(
                "string-arithmetic-coercion",
                node,
                negative=True,
                details=f"Arithmetic operator '{op}' used with string {operand} — JavaScript silently "
                "coerces strings to numbers, producing NaN for non-numeric strings. Use Number() "
                "or parseInt() for explicit conversion.",
            )
        ]
    return []


def _shallow_copy_source(context: StandardRuleContext, value: Node) -> str | None:
    """Variable a one-level copy (``{...x}``, ``Object.assign({}, x)``, ``[...x]``) is made from."""
    k = kind(value)
    if k is NodeKind.OBJECT:
        for prop in children(value):
            if kind(prop) is not NodeKind.SPREAD_ELEMENT:
                continue
            inner = children(prop)
            source = identifier_name(inner[0]) if inner else None
            if source is None:
                continue
            if context.type_of(source) in (InferredType.OBJECT, InferredType.UNKNOWN):
                return source
            return None
    elif k is NodeKind.CALL_EXPRESSION:
        if static_call(value) != ("Object", "assign"):
            return None
        args = arguments(value)
        if len(args) >= 2 and kind(args[0]) is NodeKind.OBJECT and not children(args[0]):
            return identifier_name(args[1])
    elif k is NodeKind.ARRAY:
        elements = children(value)
        if len(elements) == 1 and kind(elements[0]) is NodeKind.SPREAD_ELEMENT:
            inner = children(elements[0])
            source = identifier_name(inner[0]) if inner else None
            if source is not None and context.type_of(source) in (InferredType.ARRAY, InferredType.UNKNOWN):
                return source
    return None


def _shallow_copies(context: StandardRuleContext) -> dict[str, str]:
    copies = {}
    for declarator in context.nodes(NodeKind.VARIABLE_DECLARATOR):
        target, value = declarator_parts(declarator)
        if kind(target) is not NodeKind.IDENTIFIER or value is None:
            continue
        source = _shallow_copy_source(context, value)
        if source is not None:
            copies[node_text(target)] = source
    return copies


def find_shallow_copy_nested_mutation(context: StandardRuleContext) -> list[Detection]:
    """Nested writes through a shallow copy, once per copy.

    Assignments are checked before mutating method calls.
    """
    copies = _shallow_copies(context)
    if not copies:
        return []

    candidates = []
    for node in context.nodes(*ASSIGNMENT_KINDS):
        chain = member_chain(field(node, "left"))
        if chain is None:
            continue
        root, parts = chain
        if len(parts) < 2 or root not in copies:
            continue
        original = copies[root]
        item = detection(
            "shallow-copy-nested-mutation",
            node,
            negative=True,
            details=f"Shallow copy '{root}' (from '{original}') has nested property '{'.'.join(parts)}' "
            f"mutated — this modifies the original '{original}' too. Spread/Object.assign only copies "
            "the top level. Use structuredClone() or deep-clone nested objects.",
        )
        candidates.append((root, item))

    for call in context.nodes(NodeKind.CALL_EXPRESSION):
        chain = member_chain(field(call, "function"))
        if chain is None:
            continue
        root, parts = chain
        if len(parts) < 2 or parts[-1] not in MUTATING_ARRAY_METHODS:
            continue
        if root not in copies:
            continue
        original = copies[root]
        item = detection(
            "shallow-copy-nested-mutation",
            call,
            negative=True,
            details=f"Shallow copy '{root}' (from '{original}') calls '{'.'.join(parts)}()' — this "
            f"mutates a nested reference shared with the original '{original}'. Spread only copies "
            "the top level.",
        )
        candidates.append((root, item))
    return _once_per_name(candidates)


def _self_mutation(callback: Node, array: str) -> tuple[Node, str] | None:
    """First (node, method) mutating ``array`` in callback, outside nested functions."""
    body = field(callback, "body")
    roots = children(body) if kind(body) is NodeKind.STATEMENT_BLOCK else [body]
    for root in roots:
        if root is None or is_deferred(root):
            continue
        for node in walk(root, prune=is_deferred):
            k = kind(node)
            if k is NodeKind.CALL_EXPRESSION:
                obj, method = method_call(node)
                if method in MUTATING_ARRAY_METHODS and identifier_name(obj) == array:
                    return node, method
            elif k in ASSIGNMENT_KINDS:
                left = unwrap(field(node, "left"))
                if kind(left) is NodeKind.SUBSCRIPT_EXPRESSION and identifier_name(member_object(left)) == array:
                    return node, "index assignment"
    return None


def find_array_self_mutation_in_iteration(context: StandardRuleContext) -> list[Detection]:
    """An array mutated inside its own iteration callback, once per array."""
    candidates = []
    for call, method in context.method_calls(*ITERATION_METHODS):
        obj, _method = method_call(call)
        array = identifier_name(obj)
        if array is None:
            continue
        args = arguments(call)
        if not args or not is_function_literal(args[0]):
            continue
        mutation = _self_mutation(args[0], array)
        if mutation is None:
            continue
        site, mutator = mutation
        item = detection(
            "array-self-mutation-in-iteration",
            site,
            negative=True,
            details=f"Array '{array}' is mutated via .{mutator}() inside its own .{method}() callback — "
            "this changes the array while iterating over it, leading to unpredictable results. "
            "Collect changes separately and apply after iteration.",
        )
        candidates.append((array, item))
    return _once_per_name(candidates)
