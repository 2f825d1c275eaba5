"""
Specification grammar tests (argument and option specs, descriptors).

Scope
- Validate accepted argument/option specification strings and the descriptors they yield.
- Validate that every malformed specification raises the dedicated error, with
  the offending spec and offset attached.
- Validate descriptor value semantics (purity/idempotence, equality, replace).

Conventions
- Test method names follow CamelCase per project convention.
- Error expectations use the most specific class; SpecificationError stays a ValueError.
"""

from __future__ import annotations

import copy
import unittest
from unittest import TestCase

from rich.text import Text

from argosy import (
    Argument,
    Option,
    ValueMode,
    IntValue,
    parse_argument,
    parse_option,
)
from argosy.faults import (
    SpecificationError,
    MissingIdentifierError,
    EmptyIdentifierError,
    UnexpectedWhitespaceError,
    UnterminatedBracketError,
    InvalidOptionNameError,
    ShortNameTooLongError,
    MissingDashPrefixError,
    EmptyValueNameError,
    ExpectedEqualsError,
    UnexpectedTrailingInputError,
)


class TestArgumentSpecification(TestCase):
    """Behavioral tests for parse_argument()."""

    def testRequired(self):
        for name in ("X", "MEMENTO", "galaxy-quest", "file_1", "héllo", "a.b:c"):
            with self.subTest(name=name):
                argument = parse_argument(name)
                self.assertEqual(argument.name, name)
                self.assertTrue(argument.required)

    def testAnyNonBracketCharacter(self):
        # names are any run without whitespace or brackets, punctuation included
        for name in ("A$B", "A,B", "A=B", "--X"):
            with self.subTest(name=name):
                self.assertEqual(parse_argument(name).name, name)
                self.assertEqual(parse_argument("[" + name + "]").name, name)

    def testOptional(self):
        for name in ("X", "MEMENTO", "galaxy-quest"):
            with self.subTest(name=name):
                argument = parse_argument("[" + name + "]")
                self.assertEqual(argument.name, name)
                self.assertFalse(argument.required)

    def testDescriptorStartsUnattached(self):
        argument = parse_argument("[MEMENTO]")
        self.assertIsNone(argument.value)
        self.assertIsNone(argument.descr)

    def testEmpty(self):
        with self.assertRaises(MissingIdentifierError):
            parse_argument("")

    def testLeadingClosingBracket(self):
        with self.assertRaises(MissingIdentifierError):
            parse_argument("]")

    def testEmptyBrackets(self):
        for spec in ("[]", "["):
            with self.subTest(spec=spec):
                with self.assertRaises(EmptyIdentifierError):
                    parse_argument(spec)

    def testUnterminatedBracket(self):
        with self.assertRaises(UnterminatedBracketError):
            parse_argument("[MEMENTO")

    def testWhitespace(self):
        for spec in ("A B", " A", "A ", "[A B]", "A\tB"):
            with self.subTest(spec=spec):
                with self.assertRaises(UnexpectedWhitespaceError):
                    parse_argument(spec)

    def testTrailingInput(self):
        for spec in ("A]", "[A]B", "[A]]", "A[B]"):
            with self.subTest(spec=spec):
                with self.assertRaises(UnexpectedTrailingInputError):
                    parse_argument(spec)

    def testErrorCarriesSpecAndOffset(self):
        with self.assertRaises(UnexpectedWhitespaceError) as context:
            parse_argument("GALAXY QUEST")
        self.assertEqual(context.exception.spec, "GALAXY QUEST")
        self.assertEqual(context.exception.offset, 6)

    def testErrorsAreValueErrors(self):
        with self.assertRaises(ValueError):
            parse_argument("")
        self.assertTrue(issubclass(MissingIdentifierError, SpecificationError))

    def testNonStringRejected(self):
        with self.assertRaises(TypeError):
            parse_argument(42)

    def testIdempotent(self):
        self.assertEqual(parse_argument("[MEMENTO]"), parse_argument("[MEMENTO]"))
        self.assertEqual(hash(parse_argument("X")), hash(parse_argument("X")))
        self.assertNotEqual(parse_argument("X"), parse_argument("[X]"))


class TestOptionSpecification(TestCase):
    """Behavioral tests for parse_option()."""

    def testNamesWithoutValue(self):
        option = parse_option("-g, --galaxy-quest")
        self.assertEqual(option.names, ("g", "galaxy-quest"))
        self.assertIs(option.mode, ValueMode.NONE)
        self.assertIsNone(option.metavar)

    def testNameOrderIsKept(self):
        option = parse_option("--galaxy-quest, -g")
        self.assertEqual(option.names, ("galaxy-quest", "g"))
        self.assertEqual(option.primary, "galaxy-quest")
        self.assertEqual(option.shorts, ("g",))
        self.assertEqual(option.longs, ("galaxy-quest",))

    def testRequiredValue(self):
        option = parse_option("-g, --galaxy-quest=ALAN_RICKMAN")
        self.assertIs(option.mode, ValueMode.REQUIRED)
        self.assertEqual(option.metavar, "ALAN_RICKMAN")

    def testOptionalValue(self):
        option = parse_option("--foo[=BAR]")
        self.assertIs(option.mode, ValueMode.OPTIONAL)
        self.assertEqual(option.metavar, "BAR")

    def testWhitespaceBetweenTokensIsSkipped(self):
        self.assertEqual(parse_option("-g,--galaxy-quest"), parse_option("-g ,  --galaxy-quest"))
        self.assertEqual(parse_option("--foo = BAR").metavar, "BAR")

    def testShortNameTooLong(self):
        with self.assertRaises(ShortNameTooLongError):
            parse_option("-abc")

    def testInvalidName(self):
        for spec in ("--$$$", "-$", "--a", "--foo$", "-"):
            with self.subTest(spec=spec):
                with self.assertRaises(InvalidOptionNameError):
                    parse_option(spec)

    def testRepeatedName(self):
        with self.assertRaises(InvalidOptionNameError):
            parse_option("-a, -a")

    def testMissingDashPrefix(self):
        for spec in ("abc", "", "-a, b", "=FOO"):
            with self.subTest(spec=spec):
                with self.assertRaises(MissingDashPrefixError):
                    parse_option(spec)

    def testEmptyValueName(self):
        for spec in ("--foo=", "--foo[=]"):
            with self.subTest(spec=spec):
                with self.assertRaises(EmptyValueNameError):
                    parse_option(spec)

    def testExpectedEquals(self):
        for spec in ("--foo[]", "--foo[", "--foo[BAR]"):
            with self.subTest(spec=spec):
                with self.assertRaises(ExpectedEqualsError):
                    parse_option(spec)

    def testUnterminatedBracket(self):
        with self.assertRaises(UnterminatedBracketError):
            parse_option("--foo[=BAR")

    def testTrailingInput(self):
        for spec in ("--foo=BAR]", "-a -b", "--foo=BAR BAZ", "--foo[=BAR]x", "--foo]"):
            with self.subTest(spec=spec):
                with self.assertRaises(UnexpectedTrailingInputError):
                    parse_option(spec)

    def testErrorCarriesSpecAndOffset(self):
        with self.assertRaises(UnexpectedTrailingInputError) as context:
            parse_option("--foo=BAR]")
        self.assertEqual(context.exception.spec, "--foo=BAR]")
        self.assertEqual(context.exception.offset, 9)

    def testIdempotent(self):
        self.assertEqual(parse_option("-g, --galaxy-quest=X"), parse_option("-g, --galaxy-quest=X"))
        self.assertEqual(hash(parse_option("--foo[=BAR]")), hash(parse_option("--foo[=BAR]")))


class TestDescriptors(TestCase):
    """Behavioral tests for Argument/Option value objects."""

    def testArgumentRepr(self):
        self.assertEqual(
            repr(parse_argument("[MEMENTO]")),
            "argument(name='MEMENTO', required=False, value=None, descr=None)",
        )

    def testReplaceAttachesValue(self):
        cell = IntValue()
        option = copy.replace(parse_option("--count=N"), value=cell, descr="how many")
        self.assertIs(option.value, cell)
        self.assertEqual(option.descr, "how many")
        self.assertEqual(option.names, ("count",))

    def testReplaceValidates(self):
        with self.assertRaises(TypeError):
            copy.replace(parse_argument("X"), unknown=1)
        with self.assertRaises(ValueError):
            copy.replace(parse_argument("X"), name="A B")
        with self.assertRaises(TypeError):
            copy.replace(parse_option("-x"), value="not a cell")

    def testHashWithTextDescr(self):
        argument = copy.replace(parse_argument("X"), descr=Text("who to greet"))
        option = copy.replace(parse_option("-v, --verbose"), value=IntValue(), descr=Text("talk more", style="bold"))
        self.assertEqual(hash(argument), hash(copy.replace(parse_argument("X"), descr=Text("who to greet"))))
        self.assertIn(option, {option})
        self.assertEqual(len({argument, option}), 2)

    def testFieldsAreReadOnly(self):
        argument = parse_argument("X")
        with self.assertRaises(AttributeError):
            argument.name = "Y"  # type: ignore[misc]

    def testDirectConstruction(self):
        self.assertEqual(Argument("X"), parse_argument("X"))
        self.assertEqual(Option("g", "galaxy-quest"), parse_option("-g, --galaxy-quest"))
        self.assertEqual(
            Option("foo", mode=ValueMode.OPTIONAL, metavar="BAR"),
            parse_option("--foo[=BAR]"),
        )

    def testDirectConstructionValidates(self):
        with self.assertRaises(ValueError):
            Argument("")
        with self.assertRaises(TypeError):
            Option()
        with self.assertRaises(ValueError):
            Option("not valid")
        with self.assertRaises(ValueError):
            Option("x", "x")
        with self.assertRaises(ValueError):
            Option("x", descr="   ")


if __name__ == "__main__":
    unittest.main()
