import threading
from dataclasses import dataclass

import pytest

from conform import (
    CyclicSupertypeError, DepthLimitError, ErrorEntry, Invalid, KeyErrors, NestedError,
    NestedErrors, PredicateContractError, Refinement, TypeDescriptor, TypeRegistry, Validator,
    ValueCycleError, ValueErrors, UnknownPredicateError, UnknownTypeError, errors, is_valid,
    default_registry, iter_leaves, resolve_chain,
)
from conform.builtin import ANY, INTEGER, STRING
from conform.notation import list_of, map_of, structure, subtype, type_of

NOT_AN_INTEGER = ErrorEntry("is", "integer", Invalid("not_an_integer"))

@dataclass
class Account:
    owner: str
    balance: int

def is_positive(v):
    return v > 0

def is_even(v):
    return v % 2 == 0

def is_large(v):
    return v > 100

POSITIVE = subtype(INTEGER, is_positive)
EVEN = subtype(POSITIVE, is_even)
LARGE_EVEN = subtype(EVEN, is_large)

def test_is_valid_matches_errors():
    for value in (1, -3, 12, 202, "x", None, [1], {"a": 1}, 2.0):
        for type_ in (INTEGER, STRING, ANY, list_of(INTEGER)):
            assert is_valid(value, type_) == (errors(value, type_) == [])
    for value in (1, -3, 12, 202):
        for type_ in (POSITIVE, LARGE_EVEN):
            assert is_valid(value, type_) == (errors(value, type_) == [])

def test_errors_are_repeatable():
    value = ["", 1, {"k": [None]}]
    type_ = list_of(map_of(values=list_of(INTEGER)))
    assert errors(value, type_) == errors(value, type_)

def test_chain_runs_root_to_leaf():
    assert [r.arguments for r in resolve_chain(LARGE_EVEN)] == ["integer", is_positive, is_even, is_large]

def test_every_refinement_runs():
    assert errors(-11, LARGE_EVEN) == [
        ErrorEntry("fun", is_positive, Invalid("invalid")),
        ErrorEntry("fun", is_even, Invalid("invalid")),
        ErrorEntry("fun", is_large, Invalid("invalid")),
    ]

def test_refinements_at_three_levels_report_in_order():
    a = TypeDescriptor(refinements=(Refinement(lambda v, _: False, "A"),))
    b = TypeDescriptor(supertype=a, refinements=(Refinement(lambda v, _: False, "B"),))
    c = TypeDescriptor(supertype=b, refinements=(Refinement(lambda v, _: False, "C"),))
    assert [e.arguments for e in errors(0, c)] == ["A", "B", "C"]

def test_universal_type():
    universal = TypeDescriptor()
    deep = {"a": [{"b": [[[1, {"c": None}]]]}]}
    for value in (None, print, lambda: 1, deep, object(), 0, ""):
        assert is_valid(value, universal)
        assert errors(value, universal) == []

def test_empty_sequence_is_valid():
    assert is_valid([], list_of(INTEGER))
    assert is_valid([], list_of(LARGE_EVEN))

def test_sequence_errors_are_exhaustive():
    report = errors(["", 1, ""], list_of(INTEGER))
    assert report == [
        ErrorEntry("list", {"element_type": INTEGER}, NestedErrors((
            NestedError(0, (NOT_AN_INTEGER,)),
            NestedError(2, (NOT_AN_INTEGER,)),
        ))),
    ]

def test_map_reports_keys_and_values():
    report = errors({"a": 1}, map_of(keys=INTEGER, values=STRING))
    assert [type(e.reason) for e in report] == [KeyErrors, ValueErrors]

def test_nested_addresses():
    type_ = map_of(fields={"tags": list_of(STRING), "count": INTEGER})
    report = errors({"tags": ["a", 2, "c", 4], "count": "x"}, type_)
    leaves = [(path, entry.reason.tag) for path, entry in iter_leaves(report)]
    assert leaves == [
        (("tags", 1), "not_a_binary"),
        (("tags", 3), "not_a_binary"),
        (("count",), "not_an_integer"),
    ]

def test_structure():
    account = structure({"owner": STRING, "balance": INTEGER}, tag=Account)
    assert is_valid(Account("ann", 10), account)
    assert errors({"owner": "ann", "balance": 10}, account) == [
        ErrorEntry("is_struct", Account, Invalid("not_a_struct")),
    ]
    report = errors(Account("ann", "ten"), account)
    assert [path for path, _ in iter_leaves(report)] == [("balance",)]

def test_shape_error_only_on_wrong_kind():
    assert errors("nope", list_of(INTEGER)) == [
        ErrorEntry("list", {"element_type": INTEGER}, Invalid("not_a_sequence")),
    ]

def test_named_references_resolve_lazily():
    registry = default_registry.child()
    node = registry.register("node", map_of(fields={"value": "integer", "children": "children"}))
    registry.register("children", list_of("node"))
    tree = {"value": 1, "children": [{"value": 2, "children": []}, {"value": "x", "children": []}]}
    report = errors(tree, node, registry=registry)
    assert [path for path, _ in iter_leaves(report)] == [("children", 1, "value")]

def test_unknown_names():
    with pytest.raises(UnknownTypeError):
        errors(1, "no_such_type")
    with pytest.raises(UnknownPredicateError):
        errors(1, TypeDescriptor(refinements=(Refinement("no_such_predicate"),)))

def test_custom_registered_predicate():
    registry = default_registry.child()
    registry.register_predicate("min", lambda v, bound: v >= bound)
    adult = registry.register("adult", subtype("integer", ("min", 18)))
    validator = Validator(registry=registry)
    assert validator.is_valid(30, "adult")
    assert validator.errors(3, adult) == [ErrorEntry("min", 18, Invalid("invalid"))]

def test_broken_predicate_fails_loudly():
    broken = TypeDescriptor(refinements=(Refinement(lambda v, _: None),))
    with pytest.raises(PredicateContractError):
        errors(1, broken)
    with pytest.raises(PredicateContractError):
        errors([1], list_of(type_of(lambda v: "yes")))

def test_cyclic_supertypes_detected():
    registry = TypeRegistry()
    registry.register("a", TypeDescriptor(supertype="b", name="a"), check=False)
    registry.register("b", TypeDescriptor(supertype="a", name="b"), check=False)
    with pytest.raises(CyclicSupertypeError):
        resolve_chain("a", registry)
    with pytest.raises(CyclicSupertypeError):
        registry.check()

def test_cyclic_values_detected():
    loop = []
    loop.append(loop)
    nested = default_registry.child()
    nested.register("nested", list_of("nested"))
    with pytest.raises(ValueCycleError):
        errors(loop, "nested", registry=nested)

def test_shared_values_are_not_cycles():
    shared = [1, 2]
    assert is_valid([shared, shared], list_of(list_of(INTEGER)))

def test_depth_limit():
    value = []
    for _ in range(20):
        value = [value]
    registry = default_registry.child()
    registry.register("nested", list_of("nested"))
    assert is_valid(value, "nested", registry=registry)
    with pytest.raises(DepthLimitError):
        errors(value, "nested", registry=registry, max_depth=5)

def test_default_depth_limit_stays_below_recursion_limit():
    value = []
    for _ in range(500):
        value = [value]
    registry = default_registry.child()
    registry.register("nested", list_of("nested"))
    with pytest.raises(DepthLimitError):
        errors(value, "nested", registry=registry)

def test_state_is_reset_after_failure():
    with pytest.raises(PredicateContractError):
        errors(1, TypeDescriptor(refinements=(Refinement(lambda v, _: None),)))
    assert errors(["", 1], list_of(INTEGER))[0].reason.entries[0].address == 0

def test_threads_validate_independently():
    results = {}

    def run(idx):
        results[idx] = errors(["", idx], list_of(INTEGER))

    threads = [threading.Thread(target=run, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert all(len(r) == 1 and r[0].reason.entries[0].address == 0 for r in results.values())

def test_nested_call_uses_its_own_registry():
    mine = default_registry.child()
    mine.register("small", subtype("integer", lambda v: v < 10))
    small_via_mine = type_of(lambda v: is_valid(v, "small", registry=mine))
    assert is_valid(3, small_via_mine)
    assert errors([3], list_of(small_via_mine)) == []
    report = errors([3, 30], list_of(small_via_mine))
    assert [path for path, _ in iter_leaves(report)] == [(1,)]

def test_nested_validator_keeps_outer_depth():
    mine = default_registry.child()
    mine.register("nested", list_of("nested"))
    inner = Validator(registry=mine)
    value = [[[[]]]]
    wrapped = type_of(lambda v: inner.is_valid(v, "nested"))
    assert is_valid([value], list_of(wrapped))
    with pytest.raises(DepthLimitError):
        errors([value], list_of(type_of(lambda v: is_valid(v, "nested", registry=mine))), max_depth=4)

def test_bare_is_refinement_checks_for_nil():
    nil_only = TypeDescriptor(refinements=(Refinement("is"),))
    assert is_valid(None, nil_only)
    assert errors(0, nil_only) == [ErrorEntry("is", None, Invalid("not_nil"))]
