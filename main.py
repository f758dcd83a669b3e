import functools
import operator
import sys

from rich.pretty import pprint

from bindargs import *

__prog__ = "calc"


class Calculation:
    def __init__(self, parser):
        self.operation = parser.mapping(
            {
                "--add": operator.add,
                "--sub": operator.sub,
                "--mul": operator.mul,
            },
            help="operation to apply",
        ).default(operator.add)
        self.numbers = parser.accumulating(
            "-n", "--number",
            help="operand, may be given several times",
            transform=int,
        )
        self.show = parser.flag("-s", "--show-result", help="print the result")
        self.debug = parser.flag("-d", "--debug", help="dump the parsed bindings")

    def run(self):
        if self.debug.value:
            pprint(self.operation.parser)
        result = functools.reduce(self.operation.value, self.numbers.value)
        if self.show.value:
            print(result)
        return result


def main():
    parser = ArgParser(sys.argv[1:], version="0.0.0")
    calculation = parser.parse_into(Calculation)
    if not calculation.numbers.value:
        raise InvalidArgumentError("at least one --number is required", hint="try '%s -n 1 -n 2 -s'" % __prog__)
    calculation.run()


if __name__ == '__main__':
    main_body(main)
