"""
bindargs faults (errors and help/version signals) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing fault.
- ParseExit: base type for everything the parser raises at the user. Each fault
  carries a short message, a read-only options mapping (the offending option,
  argument name, hint, ...) and a suggested process return code.
- ConfigError: programmer misuse detected while declaring bindings (bad names,
  bad arity, registering after parsing started). Not a ParseExit: it is a bug in
  the host program, not something to print to its user.
- trigger(): central entry point to surface a fault (print it and exit).
- main_body(): run a CLI body and trigger any ParseExit it raises.

Rendering
- render(prog, columns) gives the plain text a fault stands for: "prog: message"
  for errors, the formatted help for HelpRequested, the version string for
  VersionRequested.
- __rich__ gives a styled rich Text ending with the fault code; styles can be
  overridden by the host with a __styles__ mapping in __main__, the program
  name with __prog__, the code labels with __codes__.
- Return code 0 prints to stdout, anything else to stderr.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)
stdout = Console()


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - options (1111x): UNRECOGNIZED_OPTION, UNEXPECTED_OPTION_ARGUMENT,
      OPTION_MISSING_REQUIRED_ARGUMENT
    - positionals (1112x): MISSING_REQUIRED_POSITIONAL, UNEXPECTED_POSITIONAL
    - values (1113x): MISSING_VALUE, INVALID_ARGUMENT
    - requests (1210x): HELP_REQUESTED, VERSION_REQUESTED
    """
    # --- option errors ---
    UNRECOGNIZED_OPTION              = 11111
    UNEXPECTED_OPTION_ARGUMENT       = 11112
    OPTION_MISSING_REQUIRED_ARGUMENT = 11113

    # --- positional errors ---
    MISSING_REQUIRED_POSITIONAL      = 11121
    UNEXPECTED_POSITIONAL            = 11122

    # --- value errors ---
    MISSING_VALUE                    = 11131
    INVALID_ARGUMENT                 = 11132

    # --- requests (not errors) ---
    HELP_REQUESTED                   = 12101
    VERSION_REQUESTED                = 12102

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ConfigError(ValueError):
    """
    Raised when bindings are declared incorrectly.

    Examples: malformed or duplicated option spellings, invalid positional
    names or arity, adding a default after validators, registering after the
    arguments have been parsed.
    """


class ParseExit(Exception):
    code = Unset
    returncode = 2

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def render(self, prog=None, columns=0):
        """
        plain-text rendering of this fault, as it should be shown to the user.
        """
        leader = "" if prog is None else "%s: " % prog
        return "%s%s\n" % (leader, self.message)

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            "prog-name": "bold",
            "error-message": "red",
            "code": "dim cyan",
            "hint-arrow": "green dim",
            "hint": "italic green",
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            return Text(str(fragment), styles[style] if colorful else "")

        prog = self.options.get("prog", getattr(main, "__prog__", None))

        message = Text.assemble(
            text(prog and "%s: " % prog, "prog-name"),
            text(self.message, "error-message"),
            text(self.code and " (%s)" % self.code.normalize(), "code"),
        )
        if hint := self.options.get("hint"):
            return Text.assemble(message, "\n", text(" → ", "hint-arrow"), text(hint, "hint"))
        return message

    def __trigger__(self):
        (console if self.returncode else stdout).print(self, soft_wrap=True, highlight=False)
        sys.exit(self.returncode)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnrecognizedOptionError(ParseExit):
    code = FaultCode.UNRECOGNIZED_OPTION


class UnexpectedOptionArgumentError(ParseExit):
    code = FaultCode.UNEXPECTED_OPTION_ARGUMENT


class OptionMissingRequiredArgumentError(ParseExit):
    code = FaultCode.OPTION_MISSING_REQUIRED_ARGUMENT


class MissingRequiredPositionalArgumentError(ParseExit):
    code = FaultCode.MISSING_REQUIRED_POSITIONAL


class UnexpectedPositionalArgumentError(ParseExit):
    code = FaultCode.UNEXPECTED_POSITIONAL


class MissingValueError(ParseExit):
    code = FaultCode.MISSING_VALUE


class InvalidArgumentError(ParseExit):
    """
    Raised by validators and transforms when a supplied value is unacceptable.
    """
    code = FaultCode.INVALID_ARGUMENT


class _Request(ParseExit):
    """
    Base of the faults that are not errors: they carry a producer
    (prog, columns) -> text and ask the CLI boundary to print it and exit 0.
    """
    returncode = 0

    def render(self, prog=None, columns=0):
        return self.options["producer"](prog, columns)

    def __rich__(self):
        main = __import__("__main__")
        prog = self.options.get("prog", getattr(main, "__prog__", None))
        return Text(self.render(prog, self.options.get("columns", console.width)))


class HelpRequested(_Request):
    code = FaultCode.HELP_REQUESTED


class VersionRequested(_Request):
    code = FaultCode.VERSION_REQUESTED


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see ParseExit).
    - options are merged into the fault via copy.replace(fault, **options).
    - the fault prints itself through rich (stdout for return code 0, stderr
      otherwise) and exits the process with its return code.

    typical options
    - prog, columns, colorful, hint.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def main_body(body, /, prog=Unset, columns=Unset):
    """
    Run body() and turn any ParseExit it raises into printed output and an exit.

        def main():
            parser = ArgParser(sys.argv[1:])
            ...

        main_body(main, prog="calc")

    prog defaults to __main__.__prog__ (or nothing), columns to the console width.
    """
    try:
        return body()
    except ParseExit as fault:
        options = {"columns": coalesce(columns, console.width)}
        prog = coalesce(prog, getattr(__import__("__main__"), "__prog__", None))
        if prog is not None:
            options["prog"] = prog
        trigger(fault, **options)


__all__ = (
    "FaultCode",
    "ConfigError",
    "ParseExit",
    "UnrecognizedOptionError",
    "UnexpectedOptionArgumentError",
    "OptionMissingRequiredArgumentError",
    "MissingRequiredPositionalArgumentError",
    "UnexpectedPositionalArgumentError",
    "MissingValueError",
    "InvalidArgumentError",
    "HelpRequested",
    "VersionRequested",
    "trigger",
    "main_body",
)
