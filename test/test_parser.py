r"""
Parser behavioral tests (token classification, dispatch, faults).

Scope
- Validate long options (inline and spaced values, flags, unknown names).
- Validate short option groups ('-abc 42', '-j5', misplaced value options).
- Validate positionals, free arguments, the tail marker and the backslash escape.
- Validate post-parse required checks and fault context (codes, positions).

Conventions
- Test method names follow CamelCase per project convention.
- Every parser is built with its own empty global registry so suites sharing
  the process never see each other's global options.
"""
import math
import unittest
from dataclasses import dataclass
from unittest import TestCase

from argosy import Parser, Registry
from argosy.faults import *


@dataclass
class IntPair:
    x: int
    y: int


def int_pair(token):
    x, y = token.split(",")
    return IntPair(int(x), int(y))


class Unordered:
    def __init__(self, token):
        self.token = token


def isolated():
    return Parser(globals=Registry())


class TestBasics(TestCase):

    def testMixedOptions(self):
        parser = isolated()
        int1 = parser.add_arg("integer1", type=int)
        int2 = parser.add_arg("integer2", "i", type=int)
        int3 = parser.add_arg("integer3", type=int).default(-1)
        int4 = parser.add_arg("integer4", type=int)
        bool1 = parser.add_flag("boolean1")
        bool2 = parser.add_flag("boolean2")
        doubles = parser.add_multi_arg("doubles", "d", type=float)

        parser.parse_args([
            "binary", "--integer1", "42", "-i", "-2147483648",
            "--boolean1", "--doubles", "3.14", "-d", "2.71",
        ])

        self.assertTrue(int1)
        self.assertEqual(int1.value, 42)
        self.assertEqual(int2.value, -2147483648)
        self.assertTrue(int3.has_value())
        self.assertEqual(int3.value, -1)
        self.assertFalse(int4.has_value())
        self.assertTrue(bool1)
        self.assertFalse(bool2)
        self.assertEqual(doubles.values(), [3.14, 2.71])

    def testProgramNameIsSkipped(self):
        parser = isolated()
        parser.parse_args(["--not-an-option"])

    def testAbsentValueAccessFails(self):
        parser = isolated()
        value = parser.add_arg("value")
        parser.parse_args(["prog"])
        with self.assertRaises(DeclarationError) as context:
            value.value
        self.assertEqual(context.exception.code, FaultCode.ABSENT_VALUE)

    def testFlagCountsRepeats(self):
        parser = isolated()
        verbose = parser.add_flag("verbose", "v")
        parser.parse_args(["prog", "-vvv", "--verbose"])
        self.assertEqual(verbose.count, 4)
        self.assertEqual(int(verbose), 4)


class TestLongOptions(TestCase):

    def testInlineAndSpacedValuesAreEquivalent(self):
        for tokens in (["prog", "--opt=value"], ["prog", "--opt", "value"]):
            parser = isolated()
            option = parser.add_arg("opt")
            parser.parse_args(tokens)
            self.assertEqual(option.value, "value")

    def testInlineValueSplitsAtFirstEquals(self):
        parser = isolated()
        strings = parser.add_multi_arg("string")
        parser.parse_args(["binary", "--string=--double-dash", "--string=-dash=with=equal=signs"])
        self.assertEqual(strings.values(), ["--double-dash", "-dash=with=equal=signs"])

    def testSpacedValueIsTakenVerbatim(self):
        parser = isolated()
        option = parser.add_arg("opt")
        parser.parse_args(["prog", "--opt", "--looks-like-an-option"])
        self.assertEqual(option.value, "--looks-like-an-option")

    def testInlineValueOnFlagFails(self):
        parser = isolated()
        parser.add_flag("flag")
        with self.assertRaises(FlagAssignmentError) as context:
            parser.parse_args(["prog", "--flag=value"])
        self.assertEqual(context.exception.options["index"], 1)

    def testUnknownLongOptionFails(self):
        parser = isolated()
        parser.add_arg("threads", type=int)
        with self.assertRaises(UnknownOptionError) as context:
            parser.parse_args(["prog", "--threds=4"])
        self.assertEqual(context.exception.code, FaultCode.UNKNOWN_LONG_OPTION)
        self.assertIn("--threads", context.exception.options["hint"])

    def testMissingTrailingValueFails(self):
        parser = isolated()
        parser.add_arg("opt")
        with self.assertRaises(MissingValueError):
            parser.parse_args(["prog", "--opt"])

    def testSingleValuedRejectsSecondValue(self):
        parser = isolated()
        parser.add_arg("x", type=int)
        with self.assertRaises(DuplicateValueError) as context:
            parser.parse_args(["prog", "--x", "1", "--x", "2"])
        self.assertEqual(context.exception.options["index"], 4)

    def testMultiValuedCollectsValues(self):
        parser = isolated()
        x = parser.add_multi_arg("x", type=int)
        parser.parse_args(["prog", "--x", "1", "--x", "2"])
        self.assertEqual(x.values(), [1, 2])
        self.assertEqual(x.size(), 2)
        self.assertEqual(x[1], 2)
        self.assertEqual(list(x), [1, 2])
        self.assertFalse(x.empty())

    def testMultiValuedDefaultIsReplaced(self):
        parser = isolated()
        x = parser.add_multi_arg("x", type=int).default([9])
        parser.parse_args(["prog", "--x=1"])
        self.assertEqual(x.values(), [1])

    def testCastFailureFails(self):
        parser = isolated()
        parser.add_arg("x", type=int)
        with self.assertRaises(CastError):
            parser.parse_args(["prog", "--x", "one"])


class TestShortOptions(TestCase):

    def testGroupEndingWithValueOption(self):
        parser = isolated()
        a = parser.add_flag("flag1", "a")
        b = parser.add_flag("flag2", "b")
        d = parser.add_flag("flag3", "d")
        c = parser.add_arg("int", "c", type=int)
        parser.parse_args(["binary", "-abc", "42"])
        self.assertTrue(a)
        self.assertTrue(b)
        self.assertFalse(d)
        self.assertEqual(c.value, 42)

    def testValueOptionFirstInGroupTakesRemainder(self):
        parser = isolated()
        parser.add_flag("flag1", "a")
        parser.add_flag("flag2", "b")
        parser.add_arg("int", "c", type=int)
        with self.assertRaises(CastError):
            parser.parse_args(["binary", "-cab", "42"])

    def testValueOptionInTheMiddleFails(self):
        parser = isolated()
        parser.add_flag("flag1", "a")
        parser.add_flag("flag2", "b")
        parser.add_arg("int", "c", type=int)
        with self.assertRaises(MisplacedShortOptionError) as context:
            parser.parse_args(["binary", "-acb", "42"])
        self.assertIn("middle of a short options group", context.exception.message)

    def testAttachedAndSeparateValuesAreEquivalent(self):
        for tokens in (["prog", "-j5"], ["prog", "-j", "5"]):
            parser = isolated()
            jobs = parser.add_arg("jobs", "j", type=int)
            parser.parse_args(tokens)
            self.assertEqual(jobs.value, 5)

    def testPipefailStyle(self):
        parser = isolated()
        flags = [parser.add_flag(name, name) for name in "eux"]
        option = parser.add_arg("option", "o")
        parser.parse_args(["bash", "-euxo", "pipefail"])
        self.assertTrue(all(flags))
        self.assertEqual(option.value, "pipefail")

    def testUnknownShortOptionFails(self):
        parser = isolated()
        parser.add_flag("all", "a")
        with self.assertRaises(UnknownOptionError) as context:
            parser.parse_args(["prog", "-az"])
        self.assertEqual(context.exception.code, FaultCode.UNKNOWN_SHORT_OPTION)

    def testMissingValueAtEndFails(self):
        parser = isolated()
        parser.add_arg("jobs", "j", type=int)
        with self.assertRaises(MissingValueError):
            parser.parse_args(["prog", "-j"])

    def testNegativeNumberNeedsEscape(self):
        parser = isolated()
        parser.add_positional_arg(type=int)
        with self.assertRaises(UnknownOptionError):
            parser.parse_args(["prog", "-5"])

        parser = isolated()
        number = parser.add_positional_arg(type=int)
        parser.parse_args(["prog", "\\-5"])
        self.assertEqual(number.value, -5)


class TestPositionalsAndFreeArguments(TestCase):

    def testEscapedPositionalAndFreeArguments(self):
        parser = isolated()
        parser.enable_free_args()
        string = parser.add_positional_arg()
        integer = parser.add_positional_arg(type=int)
        parser.parse_args(["prog", "\\--n", "64", "free", "args"])
        self.assertEqual(string.value, "--n")
        self.assertEqual(integer.value, 64)
        self.assertEqual(parser.free_args, ["free", "args"])

    def testMultiplePositionals(self):
        parser = isolated()
        string, integer, number = parser.add_positional_args(str, int, float)
        parser.enable_free_args()
        parser.parse_args(["binary", "\\--number", "64", "3.14", "free", "args", "go", "here"])
        self.assertEqual(string.value, "--number")
        self.assertEqual(integer.value, 64)
        self.assertEqual(number.value, 3.14)
        self.assertEqual(parser.free_args, ["free", "args", "go", "here"])

    def testEscapeIsStrippedOnce(self):
        parser = isolated()
        value = parser.add_arg("value")
        parser.parse_args(["prog", "--value", "\\\\x"])
        self.assertEqual(value.value, "\\x")

    def testEscapeAppliesToAttachedValues(self):
        parser = isolated()
        value = parser.add_arg("value", "v")
        parser.parse_args(["prog", "-v\\-x"])
        self.assertEqual(value.value, "-x")

    def testFreeArgumentsDisabledByDefault(self):
        parser = isolated()
        self.assertIsNone(parser.free_args)
        with self.assertRaises(FreeArgumentsError) as context:
            parser.parse_args(["binary", "free_arg"])
        self.assertIn("free arguments are not enabled", context.exception.message)

    def testFreeArgumentsAfterOptions(self):
        parser = isolated()
        parser.enable_free_args()
        integer = parser.add_arg("integer", type=int)
        parser.parse_args(["binary", "--integer", "5", "free_arg"])
        self.assertEqual(parser.free_args, ["free_arg"])
        self.assertEqual(integer.value, 5)

    def testLoneDashAndEmptyTokenAreNotOptions(self):
        parser = isolated()
        parser.enable_free_args()
        dash = parser.add_positional_arg()
        parser.parse_args(["prog", "-", ""])
        self.assertEqual(dash.value, "-")
        self.assertEqual(parser.free_args, [""])

    def testRequiredPositionalMissing(self):
        parser = isolated()
        parser.add_positional_arg()
        parser.add_positional_arg(type=int).required()
        with self.assertRaises(MissingRequiredError) as context:
            parser.parse_args(["prog", "only-one"])
        self.assertIn("second positional argument", context.exception.message)


class TestTailMarker(TestCase):

    def testTailTokensAreCopiedVerbatim(self):
        parser = isolated()
        verbose = parser.add_flag("verbose", "v")
        parser.parse_args(["prog", "-v", "--", "--unknown", "-xyz", "\\raw"], tail_marker="--")
        self.assertTrue(verbose)
        self.assertEqual(parser.tail_args, ["--unknown", "-xyz", "\\raw"])

    def testNoMarkerMeansNoTail(self):
        parser = isolated()
        parser.add_flag("verbose", "v")
        parser.parse_args(["prog", "-v"], tail_marker="--")
        self.assertEqual(parser.tail_args, [])

    def testTailSkipsRequiredValidationOfTokens(self):
        parser = isolated()
        parser.add_arg("name").required()
        with self.assertRaises(MissingRequiredError):
            parser.parse_args(["prog", "--", "--name", "x"], tail_marker="--")


class TestConstraints(TestCase):

    def testAllowList(self):
        parser = isolated()
        parser.add_arg("integer", type=int).options([1, 2])
        with self.assertRaises(IllegalValueError):
            parser.parse_args(["binary", "--integer", "5"])

        parser = isolated()
        parser.add_arg("integer", type=int).options([1, 2])
        parser.parse_args(["binary"])

        parser = isolated()
        integer = parser.add_arg("integer", type=int).options([1, 2])
        parser.parse_args(["binary", "--integer", "1"])
        self.assertEqual(integer.value, 1)

    def testRequiredOptionMissing(self):
        parser = isolated()
        parser.add_arg("name").required()
        with self.assertRaises(MissingRequiredError) as context:
            parser.parse_args(["prog"])
        self.assertIn("--name", context.exception.message)

    def testRequiredOptionProvided(self):
        parser = isolated()
        name = parser.add_arg("name").required()
        parser.parse_args(["prog", "--name", "argosy"])
        self.assertEqual(name.value, "argosy")

    def testModifierConflictsFailAtRegistration(self):
        parser = isolated()
        with self.assertRaises(DeclarationError) as first:
            parser.add_arg("a", type=int).required().default(5)
        with self.assertRaises(DeclarationError) as second:
            parser.add_arg("b", type=int).default(5).required()
        self.assertEqual(first.exception.code, second.exception.code)
        self.assertEqual(first.exception.code, FaultCode.INCOMPATIBLE_MODIFIERS)

    def testDuplicateNamesFailAtRegistration(self):
        parser = isolated()
        parser.add_flag("verbose", "v")
        with self.assertRaises(DeclarationError):
            parser.add_arg("verbose")
        with self.assertRaises(DeclarationError):
            parser.add_multi_arg("values", "v")
        with self.assertRaises(DeclarationError):
            parser.add_flag("help")


class TestCustomTypes(TestCase):

    def testCastUsing(self):
        parser = isolated()
        integers = parser.add_arg("integers", type=IntPair).cast_using(int_pair)
        parser.parse_args(["binary", "--integers", "1,2"])
        self.assertEqual(integers.value, IntPair(1, 2))

    def testCastUsingWithAllowList(self):
        parser = isolated()
        integers = parser.add_arg("integers", type=IntPair).cast_using(int_pair).options([IntPair(0, 1)])
        with self.assertRaises(IllegalValueError):
            parser.parse_args(["binary", "--integers", "1,2"])
        self.assertFalse(integers.has_value())

    def testAllowListNeedsEquality(self):
        parser = isolated()
        with self.assertRaises(DeclarationError) as context:
            parser.add_arg("values", type=Unordered).options([Unordered("a")])
        self.assertEqual(context.exception.code, FaultCode.NO_EQUALITY)
        with self.assertRaises(DeclarationError):
            parser.add_multi_arg("others", type=Unordered).options([Unordered("a")])

    def testUncastableCustomType(self):
        parser = isolated()
        parser.add_arg("integers", type=IntPair)
        with self.assertRaises(CastError):
            parser.parse_args(["binary", "--integers", "whatever"])

    def testCustomCaster(self):
        parser = isolated()
        number = parser.add_arg("number", type=float).cast_using(lambda token: math.sqrt(float(token)))
        parser.parse_args(["binary", "--number", "64"])
        self.assertEqual(number.value, 8)


class TestLogging(TestCase):

    def testDispatchIsLoggedAtDebug(self):
        parser = isolated()
        parser.add_arg("jobs", "j", type=int)
        with self.assertLogs("argosy.parser", "DEBUG") as logs:
            parser.parse_args(["prog", "-j4"])
        self.assertTrue(any("--jobs" in line for line in logs.output))


if __name__ == "__main__":
    unittest.main()
