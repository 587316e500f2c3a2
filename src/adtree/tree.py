"""Immutable binary trees."""
from __future__ import annotations

import json

from dataclasses import dataclass
from typing import Any, Callable, Iterator, TypeVar

from adtree import ADT


T = TypeVar("T")
U = TypeVar("U")


def _inspect_value(value: Any) -> str:
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    return repr(value)


class Tree(ADT[T]):
    """
    A binary tree that is empty, a leaf or a node with two subtrees.

    Every variant carries the methods below; trees are never mutated, all
    operations build new trees.
    """

    EMPTY = None

    @dataclass(frozen=True)
    class Leaf:
        value: T

    @dataclass(frozen=True)
    class Node:
        value: T
        left: Tree[T]
        right: Tree[T]

    def _subtrees(self) -> Iterator[Tree[T]]:
        """Yield every subtree in pre-order, empty ones included."""
        stack = [self]
        while stack:
            tree = stack.pop()
            yield tree
            match tree:
                case Tree.Node(_, left, right):
                    stack.append(right)
                    stack.append(left)

    def _fold(
        self,
        on_empty: Callable[[], Any],
        on_leaf: Callable[[T], Any],
        on_node: Callable[[T, Any, Any], Any],
    ) -> Any:
        """Combine the tree bottom-up, children before their parent."""
        results = []
        # reversed pre-order visits both subtrees of a node before the node
        for tree in reversed(list(self._subtrees())):
            match tree:
                case Tree.EMPTY:
                    results.append(on_empty())
                case Tree.Leaf(value):
                    results.append(on_leaf(value))
                case Tree.Node(value, _, _):
                    left = results.pop()
                    results.append(on_node(value, left, results.pop()))
        return results.pop()

    def __iter__(self) -> Iterator[T]:
        """Yield the payloads in pre-order: own value, left subtree, right subtree."""
        for tree in self._subtrees():
            match tree:
                case Tree.Leaf(value) | Tree.Node(value, _, _):
                    yield value

    def weight(self) -> int:
        """Number of value-bearing nodes."""
        return sum(1 for _ in self)

    def values(self) -> list[T]:
        return list(self)

    def fmap(self, f: Callable[[T], U]) -> Tree[U]:
        """
        Apply `f` to every payload, keeping the shape of the tree.

        `f` is applied in pre-order; an exception raised by it propagates
        as is and no tree is built.
        """
        mapped = [f(value) for value in self]
        remaining = reversed(mapped)
        return self._fold(
            lambda: Tree.EMPTY,
            lambda _: Tree.Leaf(next(remaining)),
            lambda _, left, right: Tree.Node(next(remaining), left, right),
        )

    def inspect(self) -> str:
        return self._fold(
            lambda: "Empty",
            lambda value: f"(Leaf {_inspect_value(value)})",
            lambda value, left, right: (
                f"(Node {_inspect_value(value)} {left} {right})"
            ),
        )

    def leaf_paths(self) -> list[list[T]]:
        """
        Values along every path from the root down to a leaf.

        A node without value-bearing children ends a path too; empty
        subtrees never appear on a path.
        """
        return self._fold(
            lambda: [],
            lambda value: [[value]],
            lambda value, left, right: (
                [[value, *path] for path in left + right] or [[value]]
            ),
        )

    def __repr__(self) -> str:
        return self.inspect()


def empty() -> Tree[Any]:
    return Tree.EMPTY


def leaf(value: T) -> Tree[T]:
    return Tree.Leaf(value)


def node(value: T, left: Tree[T], right: Tree[T]) -> Tree[T]:
    return Tree.Node(value, left, right)
