"""
bindargs help formatting.

A help formatter turns the HelpValue records of a parser into the text shown
for -h/--help:

    usage: prog [-h] -o OUTPUT [-v]... SOURCE...

    required arguments:
      -o OUTPUT,          directory in which all output should
      --output OUTPUT     be generated

    optional arguments:
      -h, --help          show this help message and exit

    positional arguments:
      SOURCE              source file
"""
import sys
import textwrap
from abc import ABC, abstractmethod
from itertools import zip_longest

# Keeps "-o OUTPUT" together when wrapping; turned back into a space at the end.
NBSP = "\u00a0"
INDENT = "  "
USAGE = "usage:"


def wrap(text, width):
    """
    Word-wrap text to width, keeping blank-line separated paragraphs apart.
    Returns the list of lines.
    """
    lines = []
    for paragraph in textwrap.dedent(text).strip().split("\n\n"):
        if lines:
            lines.append("")
        lines.extend(textwrap.wrap(
            paragraph,
            max(width, 1),
            break_long_words=False,
            break_on_hyphens=False,
        ))
    return lines


def columnize(left, right, width):
    """
    Lay out two lists of lines side by side; the left column is at least width wide.
    """
    width = max([width, *map(len, left)])
    return "\n".join(
        (first.ljust(width) + second).rstrip()
        for first, second in zip_longest(left, right, fillvalue="")
    )


class HelpFormatter(ABC):
    """
    Produces help text from the HelpValue records of a parser.
    """

    @abstractmethod
    def format(self, prog, columns, values):
        """
        - prog: program name, or None
        - columns: width to wrap to; 0 means no wrapping
        - values: one HelpValue per binding, in registration order
        """
        raise NotImplementedError


class DefaultHelpFormatter(HelpFormatter):
    """
    UNIX-style help: a usage line, an optional prologue, the required,
    optional and positional sections, and an optional epilogue.
    """

    def __init__(self, prologue=None, epilogue=None):
        self.prologue = prologue
        self.epilogue = epilogue

    def format(self, prog, columns, values):
        if columns < 0:
            raise ValueError("columns must be non-negative, not %d" % columns)
        width = columns or sys.maxsize
        values = list(values)

        parts = [self._usage(prog, width, values), "\n"]

        if self.prologue:
            parts.extend(("\n", "\n".join(wrap(self.prologue, width)), "\n"))

        required = [value for value in values if not value.positional and value.required]
        optional = [value for value in values if not value.positional and not value.required]
        positional = [value for value in values if value.positional]

        usages = [self._usage_text(value) for value in values]
        if columns:
            longest = max((len(word) for usage in usages for word in usage.split(" ")), default=0)
            longest = min(longest, width // 2)
        else:
            longest = max(map(len, usages), default=0)
        usage_columns = 2 * len(INDENT) - 1 + longest

        for name, section in (("required", required), ("optional", optional), ("positional", positional)):
            if section:
                parts.extend(("\n", "%s arguments:\n" % name))
                for value in section:
                    left = [INDENT + line for line in wrap(self._usage_text(value), usage_columns - len(INDENT))]
                    right = [INDENT + line for line in wrap(value.help, width - usage_columns - 2 * len(INDENT))]
                    parts.extend((columnize(left, right, usage_columns), "\n\n"))

        if self.epilogue:
            parts.extend(("\n", "\n".join(wrap(self.epilogue, width)), "\n"))

        return "".join(parts).replace(NBSP, " ")

    @staticmethod
    def _usage_text(value):
        return ", ".join(usage.replace(" ", NBSP) for usage in value.usages)

    @staticmethod
    def _usage(prog, width, values):
        start = USAGE if prog is None else "%s %s" % (USAGE, prog)
        usages = []
        for value in values:
            if value.usages:
                usage = value.usages[0].replace(" ", NBSP)
                if not value.required:
                    usage = "[%s]" % usage
                if value.repeating:
                    usage += "..."
                usages.append(usage)
        body = " ".join(usages)

        if len(start) > width // 2:
            indent = " " * len(USAGE + " " + INDENT)
            return "\n".join([start, *(indent + line for line in wrap(body, width - len(indent)))])
        start += " "
        return columnize([start], wrap(body, width - len(start)), 0)


__all__ = (
    "HelpFormatter",
    "DefaultHelpFormatter",
)
