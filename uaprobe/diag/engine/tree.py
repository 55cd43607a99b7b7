"""Tokeniser that flattens a user-agent string into addressable tree paths.

The grammar is deliberately forgiving::

    agent    := (product | comments)*
    product  := name ["/" version]
    comments := "(" entry ((";" | ",") entry)* ")"

Comment blocks attach to the product before them; a comment block that opens
the string hangs directly off ``agent``. Every node gets a dotted path with a
1-based ordinal per node type, for example::

    agent.(1)product.(1)name                    Mozilla
    agent.(1)product.(1)version                 5.0
    agent.(1)product.(1)comments.(2)entry       Linux x86_64

Unbalanced parentheses and empty input are reported as a syntax error, but
tokenising carries on so the caller still receives a usable tree.
"""

from __future__ import annotations

import re

from uaprobe.diag.engine.models import TreeNode

_ENTRY_SPLIT = re.compile(r"[;,]")


def _read_comment(text: str, start: int) -> tuple[str, int, bool]:
    """Read a parenthesised block starting at ``text[start] == '('``.

    Returns (inner text, index after the block, closed properly).
    """
    depth = 0
    i = start
    while i < len(text):
        ch = text[i]
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return text[start + 1 : i], i + 1, True
        i += 1
    return text[start + 1 :], len(text), False


def _read_token(text: str, start: int) -> tuple[str, int]:
    i = start
    while i < len(text) and not text[i].isspace() and text[i] not in "()":
        i += 1
    return text[start:i], i


def _comment_nodes(base: str, inner: str) -> list[TreeNode]:
    nodes = [TreeNode(base, f"({inner})")]
    entries = [e.strip() for e in _ENTRY_SPLIT.split(inner)]
    for k, entry in enumerate((e for e in entries if e), start=1):
        nodes.append(TreeNode(f"{base}.({k})entry", entry))
    return nodes


def flatten_agent(payload: str) -> tuple[list[TreeNode], bool]:
    """Flatten *payload* into tree nodes.

    Returns the nodes in document order and whether a syntax error was seen.
    """
    nodes = [TreeNode("agent", payload)]
    syntax_error = not payload.strip()

    product_path: str | None = None
    product_count = 0
    comment_count = 0  # per owning product, or per agent before the first product
    i = 0
    while i < len(payload):
        ch = payload[i]
        if ch.isspace():
            i += 1
            continue

        if ch == ")":
            syntax_error = True
            i += 1
            continue

        if ch == "(":
            inner, i, closed = _read_comment(payload, i)
            if not closed:
                syntax_error = True
            comment_count += 1
            owner = product_path or "agent"
            nodes.extend(_comment_nodes(f"{owner}.({comment_count})comments", inner))
            continue

        token, i = _read_token(payload, i)
        product_count += 1
        comment_count = 0
        product_path = f"agent.({product_count})product"
        nodes.append(TreeNode(product_path, token))
        name, sep, version = token.partition("/")
        nodes.append(TreeNode(f"{product_path}.(1)name", name))
        if sep and version:
            nodes.append(TreeNode(f"{product_path}.(1)version", version))

    return nodes, syntax_error
