from __future__ import annotations
from typing import Any, Iterable

from rich.markup import escape
from rich.tree import Tree

from .ir import ErrorEntry, Invalid, KeyErrors, NestedErrors, ValueErrors, plain, predicate_name

def report_to_json(report: Iterable[ErrorEntry]) -> list:
    return [entry.to_json_obj() for entry in report]

def _address_label(reason: NestedErrors, address: Any) -> str:
    if isinstance(reason, KeyErrors):
        return f"key {address!r}"
    if isinstance(reason, ValueErrors):
        return f"value {address!r}"
    if isinstance(address, int):
        return f"[{address}]"
    return f".{address}"

def _entry_label(entry: ErrorEntry) -> str:
    args = plain(entry.arguments)
    head = f"[bold]{escape(predicate_name(entry.predicate))}[/bold]"
    if args is not None:
        head += f" {escape(repr(args))}"
    if isinstance(entry.reason, Invalid):
        return f"{head} [red]{escape(str(entry.reason.tag))}[/red]"
    return f"{head} [yellow]{entry.reason.tag}[/yellow]"

def _add(tree: Tree, report: Iterable[ErrorEntry]) -> None:
    for entry in report:
        node = tree.add(_entry_label(entry))
        if isinstance(entry.reason, NestedErrors):
            for nested in entry.reason.entries:
                _add(node.add(escape(_address_label(entry.reason, nested.address))), nested.errors)

def render_tree(report: Iterable[ErrorEntry], title: str = "errors") -> Tree:
    tree = Tree(f"[bold red]{escape(title)}[/bold red]")
    _add(tree, report)
    return tree
