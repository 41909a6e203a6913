#!/usr/bin/env python3
"""Extract <queries> package visibility declarations from a manifest tree.

Android 11+ apps list the packages, intent actions and content provider
authorities they want to see in a <queries> block:

    <queries>
        <package android:name="com.example.other" />
        <intent>
            <action android:name="android.intent.action.SEND" />
            <data android:mimeType="image/*" />
        </intent>
        <provider android:authorities="com.example.provider" />
    </queries>

Only the first <queries> block in document order is read, and only its
direct children. Intent categories and data are not reported.
"""

from __future__ import annotations

from typing import NamedTuple

from manifest_accessor import XmlNode


class QueryDeclarations(NamedTuple):
    """Values in declaration order; duplicates are kept."""
    packages: list[str]
    intents: list[str]
    providers: list[str]


def find_queries_node(node: XmlNode) -> XmlNode | None:
    """Depth-first pre-order search for the first <queries> node."""
    if node.tag == "queries":
        return node
    for child in node.children:
        found = find_queries_node(child)
        if found is not None:
            return found
    return None


def extract_queries(root: XmlNode) -> QueryDeclarations:
    """
    Collect queried packages, intent actions and provider authorities.

    Args:
        root: Decoded manifest tree

    Returns:
        QueryDeclarations; all three lists are empty when there is no
        <queries> block
    """
    queries = QueryDeclarations([], [], [])

    queries_node = find_queries_node(root)
    if queries_node is None:
        return queries

    for child in queries_node.children:
        if child.tag == "package":
            name = child.attribute("name")
            if name:
                queries.packages.append(name)
        elif child.tag == "intent":
            for action in child.children_by_tag("action"):
                name = action.attribute("name")
                if name:
                    queries.intents.append(name)
        elif child.tag == "provider":
            # authorities may be ';'-separated; reported unsplit
            authorities = child.attribute("authorities")
            if authorities:
                queries.providers.append(authorities)

    return queries
