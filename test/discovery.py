# python
"""
Discovery module behavioral tests (sources, deduplication, name conflicts).

Scope
- Validate every source kind: classes (nested included), modules, module
  names, explicit bindings, iterables, and the sys.modules default.
- Validate deduplication by identity and DuplicateBindingError on conflicts.

Conventions
- Test method names follow CamelCase per project convention.
- Throw-away modules are built with types.ModuleType and patched into
  sys.modules for the duration of a test.
"""

import sys
import types
import unittest
from unittest import TestCase, mock

from flagbind import Argument, command, ConfigurationError, DuplicateBindingError
from flagbind.discovery import discover_arguments, discover_commands, walk


def _module(name, **attributes):
    module = types.ModuleType(name)
    for key, value in attributes.items():
        if isinstance(value, type):
            value.__module__ = name
        setattr(module, key, value)
    return module


class TestSources(TestCase):
    """Behavioral tests for the supported discovery sources."""

    def testClassSource(self):
        class Window:
            width = Argument("width")
            height = Argument("height")

        self.assertEqual(list(discover_arguments(Window)), ["width", "height"])

    def testClassCommands(self):
        class Console:
            @command("clear")
            @staticmethod
            def clear():
                pass

            @staticmethod
            @command("quit")
            def quit():
                pass

        self.assertEqual(list(discover_commands(Console)), ["clear", "quit"])

    def testNestedClasses(self):
        class Settings:
            class Window:
                width = Argument("width")

            class Audio:
                volume = Argument("volume")

        self.assertEqual(set(discover_arguments(Settings)), {"width", "volume"})

    def testInheritedBindingsBelongToDeclaringClass(self):
        class Base:
            width = Argument("width")

        class Child(Base):
            pass

        self.assertEqual(discover_arguments(Child), {})
        self.assertEqual(list(discover_arguments(Base, Child)), ["width"])

    def testExplicitBindings(self):
        width = Argument("width")

        @command("reset")
        def reset():
            pass

        self.assertEqual(discover_arguments(width, reset), {"width": width})
        self.assertEqual(discover_commands(width, reset), {"reset": reset})

    def testIterableSource(self):
        class Window:
            width = Argument("width")

        class Audio:
            volume = Argument("volume")

        self.assertEqual(list(discover_arguments([Window, (Audio,)])), ["width", "volume"])

    def testModuleSource(self):
        class Window:
            width = Argument("width")

        volume = Argument("volume")

        @command("reset")
        def reset():
            pass

        module = _module("flagbind_test_module", Window=Window, volume=volume, reset=reset)
        self.assertEqual(set(discover_arguments(module)), {"width", "volume"})
        self.assertEqual(list(discover_commands(module)), ["reset"])

    def testModuleSkipsForeignClasses(self):
        class Window:
            width = Argument("width")

        module = types.ModuleType("flagbind_test_module")
        module.Window = Window
        self.assertEqual(discover_arguments(module), {})

    def testModuleNameSource(self):
        volume = Argument("volume")
        module = _module("flagbind_test_named", volume=volume)
        with mock.patch.dict(sys.modules, {"flagbind_test_named": module}):
            self.assertEqual(discover_arguments("flagbind_test_named"), {"volume": volume})

    def testUnimportableModuleName(self):
        for name in ("flagbind_test_missing_module", ""):
            with self.assertRaises(TypeError):
                discover_arguments(name)

    def testUnsupportedSource(self):
        with self.assertRaises(TypeError):
            discover_arguments(42)

    def testDefaultScansLoadedModules(self):
        volume = Argument("flagbind-test-volume")
        module = _module("flagbind_test_loaded", volume=volume)
        with mock.patch.dict(sys.modules, {"flagbind_test_loaded": module}):
            self.assertIs(discover_arguments()["flagbind-test-volume"], volume)
        self.assertNotIn("flagbind-test-volume", discover_arguments())


class TestConflicts(TestCase):
    """Behavioral tests for deduplication and duplicate names."""

    def testSameObjectReportedOnce(self):
        class Window:
            width = Argument("width")

        binding = vars(Window)["width"]
        module = _module("flagbind_test_module", Window=Window, width=binding)
        self.assertEqual(list(walk(Window, binding, module, Window)), [binding])

    def testDuplicateArgumentNames(self):
        class Window:
            size = Argument("size")

        class Font:
            size = Argument("size")

        with self.assertRaises(DuplicateBindingError) as context:
            discover_arguments(Window, Font)

        error = context.exception
        self.assertIsInstance(error, ConfigurationError)
        self.assertEqual(error.options["name"], "size")
        self.assertEqual(error.options["bindings"], (vars(Window)["size"], vars(Font)["size"]))

    def testDuplicateCommandNames(self):
        @command("reset")
        def first():
            pass

        @command("reset")
        def second():
            pass

        with self.assertRaises(DuplicateBindingError):
            discover_commands(first, second)

    def testArgumentsAndCommandsDoNotConflict(self):
        class Settings:
            verbose = Argument("verbose")

            @command("verbose")
            @staticmethod
            def announce():
                pass

        self.assertEqual(list(discover_arguments(Settings)), ["verbose"])
        self.assertEqual(list(discover_commands(Settings)), ["verbose"])

    def testNamesAreCaseSensitive(self):
        class Window:
            width = Argument("width")
            Width = Argument("Width")

        self.assertEqual(list(discover_arguments(Window)), ["width", "Width"])


if __name__ == "__main__":
    unittest.main()
