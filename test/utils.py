"""
Utils module behavioral tests (sentinel, coalesce, storage guard, ordinals).

Scope
- Validate Unset semantics (singleton, falsey, non-subclassable, unionable).
- Validate coalesce preserves every value but the sentinel.
- Validate StorageGuard/view write-once storage and frozen containers.
- Validate ordinal labels.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from types import MappingProxyType
from unittest import TestCase

from arbor.utils import StorageGuard, Unset, UnsetType, coalesce, ordinal, view


class Sample(StorageGuard):
    items = view("items")
    table = view("table")

    def __new__(cls, items, table):
        with super().__new__(cls) as self:
            setattr(self, "-items", list(items))
            setattr(self, "-table", dict(table))
        return self


class TestUnset(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testUnsetIsSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testUnsetIsFalseyAndPrintable(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")
        self.assertIsNot(Unset, None)

    def testUnsetCannotBeSubclassed(self):
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})

    def testUnsetJoinsTypeUnions(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("x", Unset | str)
        self.assertNotIsInstance(3, str | Unset)


class TestCoalesce(TestCase):
    """Behavioral tests for coalesce."""

    def testReplacesOnlyUnset(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce("", "fallback"), "")
        self.assertEqual(coalesce(0, 1), 0)


class TestStorageGuard(TestCase):
    """Behavioral tests for StorageGuard and view."""

    def testViewsAreFrozen(self):
        sample = Sample(["a", "b"], {"k": "v"})
        self.assertEqual(sample.items, ("a", "b"))
        self.assertIsInstance(sample.table, MappingProxyType)
        with self.assertRaises(TypeError):
            sample.table["k"] = "w"

    def testStorageIsWriteOnce(self):
        sample = Sample(["a"], {})
        with self.assertRaises(AttributeError):
            setattr(sample, "-items", ["b"])
        with self.assertRaises(AttributeError):
            delattr(sample, "-items")
        with self.assertRaises(AttributeError):
            getattr(sample, "-items")
        self.assertEqual(sample.items, ("a",))

    def testViewRequiresString(self):
        with self.assertRaises(TypeError):
            view(1)


class TestOrdinal(TestCase):
    """Behavioral tests for ordinal."""

    def testWords(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(3), "third")
        self.assertEqual(ordinal(10), "tenth")

    def testNumericSuffixes(self):
        expected = {11: "11th", 12: "12th", 13: "13th", 21: "21st", 22: "22nd", 23: "23rd", 24: "24th",
                    101: "101st", 111: "111th", 112: "112th"}
        for number, label in expected.items():
            with self.subTest(number=number):
                self.assertEqual(ordinal(number), label)


if __name__ == "__main__":
    unittest.main()
