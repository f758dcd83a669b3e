"""
Sample program behavioral tests (main.py calculator).

Scope
- Validate that the calculator declares its bindings through parse_into and
  computes with them.

Conventions
- Test method names follow CamelCase per project convention.
"""

import unittest
from unittest import TestCase

from bindargs import ArgParser, OptionMissingRequiredArgumentError, UnexpectedPositionalArgumentError
from main import Calculation


class TestCalculation(TestCase):

    def testDefaultOperationIsAddition(self):
        calculation = ArgParser(["-n", "2", "-n", "3", "-n", "4"]).parse_into(Calculation)
        self.assertEqual(calculation.run(), 9)

    def testMultiplication(self):
        calculation = ArgParser(["--mul", "-n2", "--number=5"]).parse_into(Calculation)
        self.assertEqual(calculation.run(), 10)

    def testLastOperationWins(self):
        calculation = ArgParser(["--mul", "--sub", "-n", "10", "-n", "4"]).parse_into(Calculation)
        self.assertEqual(calculation.run(), 6)

    def testStrayArgument(self):
        with self.assertRaises(UnexpectedPositionalArgumentError):
            ArgParser(["-n", "1", "extra"]).parse_into(Calculation)

    def testNoNumbers(self):
        calculation = ArgParser([]).parse_into(Calculation)
        self.assertEqual(calculation.numbers.value, [])
        self.assertIs(calculation.show.value, False)

    def testNumberWithoutArgument(self):
        with self.assertRaises(OptionMissingRequiredArgumentError):
            ArgParser(["-n"]).parse_into(Calculation)


if __name__ == "__main__":
    unittest.main()
