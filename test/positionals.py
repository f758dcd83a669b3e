"""
Positional allocator behavioral tests.

Scope
- Validate how tokens are shared between slots with different arities.
- Validate defaulted slots (they may receive nothing).
- Validate the positional faults and their messages.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (ArgParser.positional / positional_list).
"""

import unittest
from unittest import TestCase

from bindargs import (
    ArgParser,
    MissingRequiredPositionalArgumentError,
    UnexpectedPositionalArgumentError,
)


def tokens(count):
    return [str(index) for index in range(count)]


class TestAllocation(TestCase):
    """Behavioral tests for the token split between slots."""

    def declare(self, count):
        parser = ArgParser(tokens(count))
        start = parser.positional_list("START", help="", nargs=range(3, 5))
        end = parser.positional_list("END", help="", nargs=range(3, 6))
        return start, end

    def testMinimumsOnly(self):
        start, end = self.declare(6)
        self.assertEqual(start.value, ["0", "1", "2"])
        self.assertEqual(end.value, ["3", "4", "5"])

    def testSurplusGoesToEarliestSlot(self):
        start, end = self.declare(7)
        self.assertEqual(start.value, ["0", "1", "2", "3"])
        self.assertEqual(end.value, ["4", "5", "6"])

    def testSurplusOverflowsToLaterSlot(self):
        start, end = self.declare(9)
        self.assertEqual(start.value, ["0", "1", "2", "3"])
        self.assertEqual(end.value, ["4", "5", "6", "7", "8"])

    def testTooFewTokens(self):
        start, end = self.declare(5)
        with self.assertRaises(MissingRequiredPositionalArgumentError) as context:
            start.value
        self.assertEqual(context.exception.message, "missing END operand")
        self.assertEqual(context.exception.options["argument"], "END")

    def testTooManyTokens(self):
        start, end = self.declare(10)
        with self.assertRaises(UnexpectedPositionalArgumentError) as context:
            end.value
        self.assertEqual(context.exception.message, "unexpected argument after END")

    def testOptionalBeforeRequired(self):
        parser = ArgParser(["a"])
        optional = parser.positional_list("OPTIONAL", help="", nargs="?")
        required = parser.positional_list("REQUIRED", help="", nargs="+")
        self.assertEqual(optional.value, [])
        self.assertEqual(required.value, ["a"])

    def testOptionalFilledBySurplus(self):
        parser = ArgParser(["a", "b", "c"])
        optional = parser.positional_list("OPTIONAL", help="", nargs="?")
        required = parser.positional_list("REQUIRED", help="", nargs="+")
        self.assertEqual(optional.value, ["a"])
        self.assertEqual(required.value, ["b", "c"])

    def testGreedyListBeforeSingle(self):
        parser = ArgParser(["a", "b", "c"])
        sources = parser.positional_list("SOURCE", help="")
        destination = parser.positional("DEST", help="")
        self.assertEqual(sources.value, ["a", "b"])
        self.assertEqual(destination.value, "c")

    def testSingleListSingleFourTokens(self):
        parser = ArgParser(["1", "2", "3", "4"])
        a = parser.positional("A", help="")
        b = parser.positional_list("B", help="")
        c = parser.positional("C", help="")
        self.assertEqual(a.value, "1")
        self.assertEqual(b.value, ["2", "3"])
        self.assertEqual(c.value, "4")

    def testEmptyStarIsSet(self):
        parser = ArgParser([])
        rest = parser.positional_list("REST", help="", nargs="*")
        self.assertEqual(rest.value, [])
        self.assertTrue(rest.has_value)

    def testExactCount(self):
        parser = ArgParser(["1", "2"])
        pair = parser.positional_list("PAIR", help="", nargs=2, transform=int)
        self.assertEqual(pair.value, [1, 2])

    def testUnexpectedWithoutSlots(self):
        parser = ArgParser(["stray"])
        flag = parser.flag("-x", help="")
        with self.assertRaises(UnexpectedPositionalArgumentError) as context:
            flag.value
        self.assertEqual(context.exception.message, "unexpected argument")
        self.assertNotIn("argument", context.exception.options)

    def testMissingSingle(self):
        parser = ArgParser([])
        source = parser.positional("SOURCE", help="")
        with self.assertRaises(MissingRequiredPositionalArgumentError) as context:
            source.value
        self.assertEqual(context.exception.message, "missing SOURCE operand")


class TestDefaultedSlots(TestCase):
    """Behavioral tests for positionals with defaults."""

    def testDefaultAppliesWhenNoTokenLeft(self):
        parser = ArgParser(["in"])
        source = parser.positional("SOURCE", help="")
        destination = parser.positional("DEST", help="").default("out")
        self.assertEqual(source.value, "in")
        self.assertEqual(destination.value, "out")

    def testDefaultedSlotStillTakesSurplus(self):
        parser = ArgParser(["in", "there"])
        source = parser.positional("SOURCE", help="")
        destination = parser.positional("DEST", help="").default("out")
        self.assertEqual(source.value, "in")
        self.assertEqual(destination.value, "there")

    def testDefaultedSlotFirst(self):
        parser = ArgParser(["in"])
        mode = parser.positional("MODE", help="").default("fast")
        source = parser.positional("SOURCE", help="")
        self.assertEqual(mode.value, "fast")
        self.assertEqual(source.value, "in")

    def testDefaultedList(self):
        parser = ArgParser([])
        sources = parser.positional_list("SOURCE", help="").default(["-"])
        self.assertEqual(sources.value, ["-"])

    def testDefaultedSlotNeverMissing(self):
        parser = ArgParser([])
        source = parser.positional("SOURCE", help="", transform=int).default(0)
        self.assertEqual(source.value, 0)


if __name__ == "__main__":
    unittest.main()
