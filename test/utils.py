"""
Tests for the utility helpers.

This module verifies semantic guarantees of the shared building blocks:
- The `Unset` sentinel: singleton identity, falsy semantics, copying,
  pickling, thread safety and finality.
- coalesce(): only the sentinel is replaced.
- rename(): the decorator and its argument check.
- mirror(): read-only properties with immutable container views.
"""
import copy
import pickle
import unittest
from threading import Thread, Lock
from types import MappingProxyType
from unittest import TestCase

from flagbind.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `UnsetType` singleton.
    """

    def setUp(self) -> None:
        """
        Prepare a fresh reference to the singleton and its type for each test.
        """
        self.unset: UnsetType = UnsetType()
        self.unsettype: type[UnsetType] = UnsetType

    def testSingleton(self) -> None:
        """
        The constructor returns the same object reference on every call.
        """
        self.assertIs(self.unset, self.unsettype())
        self.assertIs(Unset, self.unset)

    def testRepr(self) -> None:
        """
        repr() and str() are the literal string 'Unset'.
        """
        self.assertEqual(repr(self.unset), "Unset")
        self.assertEqual(str(self.unset), "Unset")

    def testFalsely(self) -> None:
        """
        The sentinel is falsy but not equal to other falsy values.
        """
        self.assertFalse(bool(self.unset))
        self.assertNotEqual(self.unset, None)
        self.assertNotEqual(self.unset, False)  # noqa: E712

    def testUnionSupport(self) -> None:
        """
        The sentinel takes part in PEP 604 unions for isinstance() checks.
        """
        self.assertIsInstance(self.unset, str | Unset)
        self.assertIsInstance("text", Unset | str)
        self.assertNotIsInstance(None, str | Unset)

    def testCopyDeepcopyPreserveSingleton(self) -> None:
        """
        copy() and deepcopy() preserve the identity of the singleton.
        """
        self.assertIs(copy.copy(self.unset), self.unset)
        self.assertIs(copy.deepcopy(self.unset), self.unset)

    def testPickleRoundTrip(self) -> None:
        """
        Pickle round-trips preserve the identity of the singleton.
        """
        restored: UnsetType = pickle.loads(pickle.dumps(self.unset))
        self.assertIs(restored, self.unset)

    def testThreadSafetySingleton(self) -> None:
        """
        Concurrent constructions return the same instance.
        """
        results: list[UnsetType] = []
        lock: Lock = Lock()

        def worker():
            instance = self.unsettype()
            with lock:
                results.append(instance)

        threads: list[Thread] = [Thread(target=worker) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertTrue(results)
        for instance in results:
            self.assertIs(instance, self.unset)

    def testFinalClass(self) -> None:
        """
        The class is final: attempts to subclass must fail with TypeError.
        """
        with self.assertRaises(TypeError):
            type("UnsetType", (self.unsettype,), {})


class HelpersTest(TestCase):
    """
    Test suite for coalesce(), rename() and mirror().
    """

    def testCoalesce(self) -> None:
        """
        Only the sentinel is replaced; falsy values are preserved.
        """
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        for value in (None, 0, "", []):
            self.assertIs(coalesce(value, "fallback"), value)

    def testRename(self) -> None:
        """
        rename(name) sets __name__ and __qualname__ and returns the function.
        """
        def function():
            pass

        self.assertIs(rename("renamed")(function), function)
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testRenameRequiresString(self) -> None:
        """
        Non-string names raise TypeError before anything is decorated.
        """
        with self.assertRaises(TypeError):
            rename(42)

    def testMirror(self) -> None:
        """
        mirror() exposes the private field read-only, containers as views.
        """
        class Holder:
            items = mirror("items")
            table = mirror("table")
            tags = mirror("tags")
            label = mirror("label")

            def __init__(self):
                self._items = [1, 2]
                self._table = {"a": 1}
                self._tags = {"x"}
                self._label = "text"

        holder = Holder()
        self.assertEqual(holder.items, (1, 2))
        self.assertIsInstance(holder.table, MappingProxyType)
        self.assertEqual(holder.tags, frozenset({"x"}))
        self.assertEqual(holder.label, "text")
        with self.assertRaises(AttributeError):
            holder.label = "other"


if __name__ == '__main__':
    unittest.main()
