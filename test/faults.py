"""
Fault tests (codes, options, rendering and triggering).

Scope
- Validate that every concrete fault carries a stable FaultCode and a title.
- Validate option handling (message, options proxy, overrides through copy.replace).
- Validate trigger(): raising/warning in library mode, rendering and exiting in shell mode.
- Validate host configuration through __main__ (__codes__, __docs__, __prog__).

Conventions
- Test method names follow CamelCase per project convention.
- Rich output is captured with a Console writing into io.StringIO (no colors).
"""

from __future__ import annotations

import __main__
import copy
import io
import unittest
from unittest import TestCase, mock

from rich.console import Console

from argosy import faults
from argosy.faults import (
    FaultCode,
    ArgosyError,
    ArgosyWarning,
    SpecificationError,
    BindingError,
    MissingIdentifierError,
    InvalidOptionValueError,
    DuplicateOptionError,
    MalformedEnvironmentWarning,
    trigger,
    getdoc,
)


def concrete(base):
    for cls in base.__subclasses__():
        yield from concrete(cls)
        if cls.__code__ is not faults.Unset:
            yield cls


class CaptureTest(TestCase):
    """Shared setup: route the fault console into a buffer."""

    def setUp(self):
        self.buffer = io.StringIO()
        patcher = mock.patch.object(faults, "console", Console(file=self.buffer, width=100, color_system=None))
        patcher.start()
        self.addCleanup(patcher.stop)

    @property
    def output(self):
        return self.buffer.getvalue()


class TestFaultCodes(TestCase):
    """Behavioral tests for the fault code catalogue."""

    def testEveryConcreteFaultHasUniqueCode(self):
        classes = list(concrete(ArgosyError)) + list(concrete(ArgosyWarning))
        codes = [cls.__code__ for cls in classes]
        self.assertTrue(all(isinstance(code, FaultCode) for code in codes))
        self.assertEqual(len(codes), len(set(codes)))
        self.assertEqual(set(codes), set(FaultCode))

    def testDomains(self):
        self.assertTrue(all(21000 <= cls.__code__ < 22000 for cls in concrete(SpecificationError)))
        self.assertTrue(all(23000 <= cls.__code__ < 24000 for cls in concrete(BindingError)))

    def testNormalize(self):
        self.assertEqual(FaultCode.MISSING_IDENTIFIER.normalize(), "21101")
        with mock.patch.object(__main__, "__codes__", {FaultCode.MISSING_IDENTIFIER: "E-SPEC"}, create=True):
            self.assertEqual(FaultCode.MISSING_IDENTIFIER.normalize(), "E-SPEC")


class TestFaultOptions(TestCase):
    """Behavioral tests for fault construction and options."""

    def testMessageAndOptions(self):
        error = MissingIdentifierError("expected an identifier", spec="", offset=0)
        self.assertEqual(str(error), "expected an identifier")
        self.assertEqual(error.spec, "")
        self.assertEqual(error.offset, 0)
        self.assertIs(error.code, FaultCode.MISSING_IDENTIFIER)
        with self.assertRaises(TypeError):
            error.options["spec"] = "x"  # type: ignore[index]

    def testOverrides(self):
        error = InvalidOptionValueError("bad", title="custom title", hint="try again")
        self.assertEqual(error.title, "custom title")
        self.assertEqual(error.hint, "try again")

    def testReplaceKeepsTypeAndMessage(self):
        error = DuplicateOptionError("option name '-v' is already defined", name="v")
        replaced = copy.replace(error, shell=True)
        self.assertIsInstance(replaced, DuplicateOptionError)
        self.assertEqual(replaced.message, error.message)
        self.assertEqual(replaced.options["name"], "v")
        self.assertTrue(replaced.options["shell"])
        self.assertNotIn("shell", error.options)

    def testSpecificationErrorsAreValueErrors(self):
        self.assertTrue(issubclass(SpecificationError, ValueError))
        self.assertTrue(issubclass(DuplicateOptionError, ValueError))

    def testGetdoc(self):
        self.assertIsNone(getdoc(FaultCode.DUPLICATE_OPTION))
        with mock.patch.object(__main__, "__docs__", {FaultCode.DUPLICATE_OPTION: "see the manual"}, create=True):
            self.assertEqual(getdoc(FaultCode.DUPLICATE_OPTION), "see the manual")
        with self.assertRaises(TypeError):
            getdoc(22101)


class TestTrigger(CaptureTest):
    """Behavioral tests for trigger()."""

    def testLibraryModeRaises(self):
        cause = ValueError("not a number")
        error = InvalidOptionValueError("tool: invalid value", label="tool", name="foo", cause=cause)
        with self.assertRaises(InvalidOptionValueError) as context:
            trigger(error)
        self.assertIs(context.exception.__cause__, cause)
        self.assertEqual(self.output, "")

    def testLibraryModeWarns(self):
        with self.assertWarns(MalformedEnvironmentWarning):
            trigger(MalformedEnvironmentWarning("entry 'X' has no '='"))

    def testShellModeExits(self):
        with self.assertRaises(SystemExit) as context:
            trigger(MissingIdentifierError("expected an identifier"), shell=True, colorful=False, prog="tool")
        self.assertEqual(context.exception.code, 1)
        self.assertIn("[ tool — 21101 | Missing Identifier ]", self.output)
        self.assertIn("expected an identifier", self.output)

    def testShellModeDeferred(self):
        trigger(
            MissingIdentifierError("expected an identifier"),
            shell=True,
            deferred=True,
            colorful=False,
            prog="tool",
        )
        self.assertIn("expected an identifier", self.output)
        self.assertIn("write a name such as 'FILE'", self.output)

    def testShellModeWarningPrintsOnly(self):
        trigger(MalformedEnvironmentWarning("entry 'X' has no '='"), shell=True, colorful=False, prog="tool")
        self.assertIn("29101", self.output)
        self.assertIn("Malformed Environment Entry", self.output)

    def testHostProgramName(self):
        with mock.patch.object(__main__, "__prog__", "hosted", create=True):
            trigger(MissingIdentifierError("oops"), shell=True, deferred=True, colorful=False)
        self.assertIn("[ hosted — ", self.output)

    def testFancyPanel(self):
        trigger(MissingIdentifierError("oops"), shell=True, deferred=True, colorful=False, fancy=True, prog="tool")
        self.assertIn("╭", self.output)
        self.assertIn("oops", self.output)

    def testUnknownCodeRendersPlaceholder(self):
        trigger(ArgosyError("generic"), shell=True, deferred=True, colorful=False, prog="tool")
        self.assertIn("-----", self.output)

    def testRejectsNonFaults(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"))


if __name__ == "__main__":
    unittest.main()
