# python
"""
Utilities tests: the Unset sentinel, coalesce, rename and mirror.
"""

from __future__ import annotations

import copy
import unittest
from unittest import TestCase

from argtab.utils import *


class UnsetTest(TestCase):

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(copy.copy(Unset), Unset)

    def testFalseyAndPrintable(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testUnionInIsinstance(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", Unset | str))
        self.assertFalse(isinstance(None, str | Unset))

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})


class CoalesceTest(TestCase):

    def testReplacesOnlyUnset(self):
        self.assertEqual(coalesce(Unset, "<int>"), "<int>")
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce("", "<int>"), "")
        self.assertIsNone(coalesce(None, "<int>"))
        self.assertEqual(coalesce(0, 1), 0)


class RenameTest(TestCase):

    def testDirectForm(self):
        def function():
            pass
        self.assertIs(rename(function, "renamed"), function)
        self.assertEqual((function.__name__, function.__qualname__), ("renamed", "renamed"))

    def testDecoratorForm(self):
        @rename("renamed")
        def function():
            pass
        self.assertEqual(function.__name__, "renamed")

    def testBadArguments(self):
        with self.assertRaises(TypeError):
            rename(1, "name")
        with self.assertRaises(TypeError):
            rename(len, 1)
        with self.assertRaises(TypeError):
            rename()


class MirrorTest(TestCase):

    def testFrozenViews(self):
        class Holder:
            _tags = ["a", "b"]
            _table = {"a": 1}
            _seen = {"a"}
            _label = "x"
            tags = mirror("tags")
            table = mirror("table")
            seen = mirror("seen")
            label = mirror("label")

        holder = Holder()
        self.assertEqual(holder.tags, ("a", "b"))
        self.assertEqual(holder.seen, frozenset({"a"}))
        self.assertEqual(holder.label, "x")
        with self.assertRaises(TypeError):
            holder.table["b"] = 2
        with self.assertRaises(AttributeError):
            holder.tags = ()

    def testNameMustBeString(self):
        with self.assertRaises(TypeError):
            mirror(1)


if __name__ == "__main__":
    unittest.main()
