#!/usr/bin/env python3
"""
Unit tests for <queries> extraction.

Run with: python -m pytest tests/test_query_extractor.py -v
"""

import sys
from pathlib import Path

from lxml import etree

# Add bin directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "bin"))

from manifest_accessor import XmlAttribute, XmlNode
from query_extractor import extract_queries, find_queries_node

ANDROID_NS = 'xmlns:android="http://schemas.android.com/apk/res/android"'


def tree(xml: str) -> XmlNode:
    return XmlNode.from_element(etree.fromstring(xml.encode("utf-8")))


class TestFindQueriesNode:
    """Tests for the depth-first <queries> search."""

    def test_no_queries_node(self):
        root = tree(f'<manifest {ANDROID_NS} package="a"><application/></manifest>')
        assert find_queries_node(root) is None

    def test_root_is_queries(self):
        root = XmlNode("queries")
        assert find_queries_node(root) is root

    def test_finds_nested_queries(self):
        root = XmlNode("manifest", children=(
            XmlNode("application", children=(XmlNode("queries", children=(XmlNode("package"),)),)),
        ))
        found = find_queries_node(root)
        assert found is not None
        assert found.children[0].tag == "package"

    def test_first_in_document_order(self):
        first = XmlNode("queries", attributes=(XmlAttribute("id", "first"),))
        second = XmlNode("queries", attributes=(XmlAttribute("id", "second"),))
        # The deep match under the first child precedes the shallow sibling
        root = XmlNode("manifest", children=(
            XmlNode("application", children=(first,)),
            second,
        ))
        assert find_queries_node(root).attribute("id") == "first"


class TestExtractQueries:
    """Tests for extract_queries."""

    def test_no_queries_returns_empty_lists(self):
        root = tree(f'<manifest {ANDROID_NS} package="a"><uses-permission android:name="p"/></manifest>')
        queries = extract_queries(root)
        assert queries.packages == []
        assert queries.intents == []
        assert queries.providers == []

    def test_all_three_kinds(self):
        root = tree(f"""
            <manifest {ANDROID_NS} package="com.example.app">
                <queries>
                    <package android:name="com.whatsapp"/>
                    <package android:name="com.facebook.katana"/>
                    <intent>
                        <action android:name="android.intent.action.SEND"/>
                        <category android:name="android.intent.category.DEFAULT"/>
                        <data android:mimeType="image/*"/>
                    </intent>
                    <intent>
                        <action android:name="android.intent.action.VIEW"/>
                        <action android:name="android.intent.action.DIAL"/>
                    </intent>
                    <provider android:authorities="com.example.one;com.example.two"/>
                </queries>
            </manifest>
        """)
        queries = extract_queries(root)
        assert queries.packages == ["com.whatsapp", "com.facebook.katana"]
        assert queries.intents == [
            "android.intent.action.SEND",
            "android.intent.action.VIEW",
            "android.intent.action.DIAL",
        ]
        assert queries.providers == ["com.example.one;com.example.two"]

    def test_duplicates_are_kept(self):
        root = tree(f"""
            <manifest {ANDROID_NS}>
                <queries>
                    <package android:name="com.dup"/>
                    <package android:name="com.dup"/>
                </queries>
            </manifest>
        """)
        assert extract_queries(root).packages == ["com.dup", "com.dup"]

    def test_only_direct_children(self):
        root = tree(f"""
            <manifest {ANDROID_NS}>
                <queries>
                    <wrapper>
                        <package android:name="com.nested.too.deep"/>
                    </wrapper>
                    <package android:name="com.direct"/>
                </queries>
            </manifest>
        """)
        queries = extract_queries(root)
        assert queries.packages == ["com.direct"]

    def test_only_first_queries_block(self):
        root = tree(f"""
            <manifest {ANDROID_NS}>
                <queries><package android:name="com.first"/></queries>
                <queries><package android:name="com.second"/></queries>
            </manifest>
        """)
        assert extract_queries(root).packages == ["com.first"]

    def test_missing_or_empty_values_skipped(self):
        root = tree(f"""
            <manifest {ANDROID_NS}>
                <queries>
                    <package/>
                    <package android:name=""/>
                    <intent><action/><action android:name=""/></intent>
                    <provider/>
                    <provider android:authorities=""/>
                    <unknown android:name="ignored"/>
                </queries>
            </manifest>
        """)
        queries = extract_queries(root)
        assert queries == ([], [], [])

    def test_typed_values_coerced_to_string(self):
        root = XmlNode("manifest", children=(
            XmlNode("queries", children=(
                XmlNode("package", attributes=(XmlAttribute("name", 12345),)),
                XmlNode("package", attributes=(XmlAttribute("name", None),)),
            )),
        ))
        assert extract_queries(root).packages == ["12345"]

    def test_intent_ignores_non_action_children(self):
        root = tree(f"""
            <manifest {ANDROID_NS}>
                <queries>
                    <intent>
                        <category android:name="android.intent.category.BROWSABLE"/>
                        <data android:scheme="https"/>
                    </intent>
                </queries>
            </manifest>
        """)
        assert extract_queries(root).intents == []
