"""
Tests for the internal helpers (Unset sentinel, rename, mirror).

This module verifies:
- Singleton identity, falsy semantics and representation of Unset.
- Copying, deep copying, pickling and thread safety of Unset.
- Finality (UnsetType cannot be subclassed).
- rename/mirror contracts.
"""
import copy
import pickle
import unittest
from threading import Thread, Lock
from types import MappingProxyType
from typing import NamedTuple
from unittest import TestCase

from arsenal.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the Unset sentinel.
    """

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsyAndRepr(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")
        self.assertIsNot(Unset, None)

    def testCopyPickleIdentity(self):
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testThreadSafeConstruction(self):
        seen = []
        lock = Lock()

        def build():
            instance = UnsetType()
            with lock:
                seen.append(instance)

        threads = [Thread(target=build) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        self.assertTrue(all(instance is Unset for instance in seen))

    def testFinal(self):
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})


class HelpersTest(TestCase):
    """
    Test suite for rename and mirror.
    """

    def testRenameCallable(self):
        def function():
            pass

        rename(function, "renamed")
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testRenameDecorator(self):
        @rename("renamed")
        def function():
            pass

        self.assertEqual(function.__name__, "renamed")

    def testRenameRejectsBadArguments(self):
        with self.assertRaises(TypeError):
            rename(3, "x")
        with self.assertRaises(TypeError):
            rename(lambda: None, 3)
        with self.assertRaises(TypeError):
            rename()

    def testMirrorFreezesContainers(self):
        class Pair(NamedTuple):
            left: int
            right: int

        class Holder:
            items = mirror("items")
            table = mirror("table")
            tags = mirror("tags")
            pair = mirror("pair")

            def __init__(self):
                self._items = [1, 2]
                self._table = {"a": 1}
                self._tags = {"x"}
                self._pair = Pair(1, 2)

        holder = Holder()
        self.assertEqual(holder.items, (1, 2))
        self.assertIsInstance(holder.table, MappingProxyType)
        self.assertEqual(holder.tags, frozenset({"x"}))
        self.assertIsInstance(holder.pair, Pair)
        with self.assertRaises(AttributeError):
            holder.items = ()


if __name__ == "__main__":
    unittest.main()
