"""
bindargs parser: the registry, the option scanner and the positional allocator.

Usage

    parser = ArgParser(sys.argv[1:])
    verbose = parser.flag("-v", "--verbose", help="enable verbose mode")
    output = parser.storing("-o", "--output", help="output file").default("out.txt")
    sources = parser.positional_list("SOURCE", help="source files")

    sources.value  # first read scans, allocates and validates everything

Scanning rules (GNU mode)
- "--" ends option processing; every later token is positional.
- "--name=value" passes an inline argument, "--name value" a separate one.
- "-abc" is a cluster of short options; the first option taking an argument
  claims the rest of the token ("-ofile") or the following tokens.
- "-" alone and every other bare token is positional, options may follow.
POSIX mode stops option processing at the first positional token.

A parser instance is meant for a single thread; declare everything, then read.
"""
import copy
import difflib
import sys
from collections.abc import MutableSet
from enum import Enum

from .bindings import *
from .faults import *
from .formatting import DefaultHelpFormatter
from .utils import *

MAXIMUM = sys.maxsize


class Mode(Enum):
    """
    Option processing mode.

    - GNU: options and positionals may be interleaved
    - POSIX: the first positional ends option processing
    """
    GNU = "gnu"
    POSIX = "posix"


class ArgParser:
    """
    Command-line parser built around an argument vector (without the program name).

    Parameters
    - args: the argument tokens, e.g. sys.argv[1:]
    - mode: Mode.GNU (default) or Mode.POSIX
    - help_formatter: formatter used by -h/--help; None disables help
    - version: version string; enables -v/--version when given
    """
    Mode = Mode

    def __init__(self, args, mode=Mode.GNU, help_formatter=Unset, version=None):
        if not isinstance(mode, Mode):
            raise TypeError("mode must be a Mode, not %s" % type(mode).__name__)
        self._args = list(args)
        self._mode = mode
        self._shorts = {}
        self._longs = {}
        self._slots = []
        self._bindings = []
        self._started = False
        self._scanning = False
        self._validating = False
        self._finished = False
        self._fault = None
        self._help_formatter = coalesce(help_formatter, DefaultHelpFormatter())

        if self._help_formatter is not None:
            @rename("help")
            def handler(invocation):
                values = self.help_values()
                formatter = self._help_formatter
                raise HelpRequested(
                    "help was requested",
                    producer=lambda prog, columns: formatter.format(prog, columns, values),
                )

            self.option(
                "-h", "--help",
                error_name="HELP",
                help="show this help message and exit",
                handler=handler,
            ).default(None)

        if version is not None:
            if not isinstance(version, str):
                raise TypeError("version must be a string")

            @rename("version")
            def handler(invocation):
                raise VersionRequested(
                    "version was requested",
                    producer=lambda prog, columns: "%s\n" % version,
                )

            self.option(
                "-v", "--version",
                error_name="VERSION",
                help="show the version and exit",
                handler=handler,
            ).default(None)

        self._builtins = len(self._bindings)

    args = mirror("args")
    mode = mirror("mode")
    help_formatter = mirror("help_formatter")
    bindings = mirror("bindings")

    # --- binding constructors ---

    def option(self, *names, help="", error_name=None, arg_names=(), repeating=False, handler):
        """
        Generic option: names are its spellings, arg_names the arguments each
        occurrence takes (or their count), handler computes the new value from
        an Invocation.

            parser.option("--range", arg_names=["LOW", "HIGH"], help="...",
                          handler=lambda invocation: tuple(map(int, invocation.arguments)))
        """
        if not names:
            raise ConfigError("need at least one option name")
        error_name = error_name or argname(representative(names))
        if isinstance(arg_names, str):
            raise TypeError("arg_names must be a sequence of names or a count, not a string")
        if isinstance(arg_names, int) and not isinstance(arg_names, bool):
            match arg_names:
                case 0:
                    arg_names = ()
                case 1:
                    arg_names = (error_name,)
                case count if count > 1:
                    arg_names = tuple("%s_%d" % (error_name, index) for index in range(1, count + 1))
                case _:
                    raise ConfigError("option arity must be non-negative, not %d" % arg_names)
        binding = OptionBinding(self, names, error_name, help, arg_names, repeating, handler)
        self._register(binding)
        return binding

    def flag(self, *names, help=""):
        """
        Boolean switch: False unless one of its spellings is present.
        """
        return self.option(*names, help=help, handler=rename(lambda invocation: True, "flag")).default(False)

    def counter(self, *names, help=""):
        """
        Occurrence counter: 0 unless present, incremented on every occurrence.
        """
        return self.option(
            *names,
            help=help,
            repeating=True,
            handler=rename(lambda invocation: coalesce(invocation.value, 0) + 1, "counter"),
        ).default(0)

    def storing(self, *names, help="", arg_name=None, transform=str):
        """
        Option taking one argument; the last occurrence wins. Required unless defaulted.
        """
        if not names:
            raise ConfigError("need at least one option name")
        arg_name = arg_name or argname(representative(names))
        return self.option(
            *names,
            help=help,
            error_name=arg_name,
            arg_names=(arg_name,),
            handler=rename(lambda invocation: transform(invocation.arguments.next()), "storing"),
        )

    def accumulating(self, *names, help="", arg_name=None, transform=str, initial=Unset):
        """
        Option taking one argument per occurrence, collecting every argument in
        order. The binding owns a fresh list (or a copy of initial), which is
        also its default. arg_name only names the argument; the error name
        still comes from the spellings.
        """
        owned = [] if initial is Unset else copy.copy(initial)

        @rename("accumulating")
        def handler(invocation):
            collection = coalesce(invocation.value, owned)
            element = transform(invocation.arguments.next())
            if isinstance(collection, MutableSet):
                collection.add(element)
            else:
                collection.append(element)
            return collection

        if not names:
            raise ConfigError("need at least one option name")
        arg_name = arg_name or argname(representative(names))
        return self.option(
            *names,
            help=help,
            arg_names=(arg_name,),
            repeating=True,
            handler=handler,
        ).default(owned)

    def mapping(self, table, /, *, help=""):
        """
        Mutually exclusive switches selecting a value: table maps each spelling
        to the value it stands for; the last one given wins.

            mode = parser.mapping({"--fast": "fast", "--small": "small"}, help="...")
        """
        table = dict(table)
        return self.option(
            *table,
            help=help,
            error_name="|".join(table),
            handler=rename(lambda invocation: table[invocation.option_name], "mapping"),
        )

    def positional(self, name, /, *, help="", transform=str):
        """
        Positional argument taking exactly one token.
        """
        return Wrapped(
            self.positional_list(name, help=help, nargs=1, transform=transform),
            rename(lambda values: values[0], "positional"),
        )

    def positional_list(self, name, /, *, help="", nargs="+", transform=str):
        """
        Positional argument taking a list of tokens.

        nargs: "?" (0 or 1), "*" (0 or more), "+" (1 or more), an exact count,
        or a range of counts with step 1 (range(2, 5) means 2 to 4).
        """
        minimum, maximum = self._arity(nargs)
        binding = PositionalBinding(self, name, minimum, maximum, help, transform)
        self._register(binding)
        return binding

    @staticmethod
    def _arity(nargs):
        match nargs:
            case "?":
                return 0, 1
            case "*":
                return 0, MAXIMUM
            case "+":
                return 1, MAXIMUM
            case bool():
                raise TypeError("nargs must be '?', '*', '+', an int or a range")
            case int():
                return nargs, nargs
            case range(step=1) if len(nargs):
                return nargs.start, nargs.stop - 1
            case range(step=1):
                raise ConfigError("empty or backwards ranges are not allowed: %r" % nargs)
            case range():
                raise ConfigError("step size must be 1, not %d" % nargs.step)
            case _:
                raise TypeError("nargs must be '?', '*', '+', an int or a range")

    # --- registry ---

    def _check_not_parsed(self):
        if self._started:
            raise ConfigError("arguments have already been parsed")

    def _register_option(self, name, binding):
        if name.startswith("--"):
            if len(name) == 2:
                raise ConfigError("long option '%s' must have at least one character after hyphen" % name)
            if name in self._longs:
                raise ConfigError("long option '%s' already in use" % name)
            self._longs[name] = binding
        elif name.startswith("-"):
            if len(name) != 2:
                raise ConfigError("short option '%s' can only have one character after hyphen" % name)
            key = name[1]
            if key in self._shorts:
                raise ConfigError("short option '%s' already in use" % name)
            self._shorts[key] = binding
        else:
            raise ConfigError("illegal option name '%s' -- must start with '-' or '--'" % name)

    def _register(self, binding):
        self._check_not_parsed()
        if isinstance(binding, OptionBinding):
            if len(set(binding.names)) != len(binding.names):
                raise ConfigError("option names must be distinct: %s" % ", ".join(binding.names))
            taken = [
                name for name in binding.names
                if name in self._longs or (not name.startswith("--") and name[1:] in self._shorts)
            ]
            if taken:
                raise ConfigError("option '%s' already in use" % taken[0])
            for name in binding.names:
                self._register_option(name, binding)
        else:
            self._slots.append([binding, False])
        self._bindings.append(binding)

    def _reroot(self, old, new):
        """
        Put a wrapping binding in place of the binding it wraps.
        """
        self._check_not_parsed()
        for index, binding in enumerate(self._bindings):
            if binding is old:
                self._bindings[index] = new
                break
        else:
            raise ConfigError("%r is not a registered binding (was it wrapped already?)" % old)
        if isinstance(new, Defaulted):
            leaf = new._leaf()
            for slot in self._slots:
                if slot[0] is leaf:
                    if leaf.minimum != 1:
                        raise ConfigError(
                            "default value can only be applied to a positional that requires "
                            "a minimum of 1 arguments, %s requires %d" % (leaf.error_name, leaf.minimum)
                        )
                    slot[1] = True

    def help_values(self):
        """
        Help records for every binding, in registration order.
        """
        return [binding.help_value() for binding in self._bindings]

    # --- scanning ---

    def _scan(self):
        self._started = True
        self._scanning = True
        try:
            args = self._args
            positionals = []
            index = 0
            while index < len(args):
                token = args[index]
                if token == "--":
                    index += 1
                    break
                elif token.startswith("--"):
                    index += self._parse_long(index, args)
                elif token.startswith("-") and token != "-":
                    index += self._parse_short(index, args)
                else:
                    positionals.append(token)
                    index += 1
                    if self._mode is Mode.POSIX:
                        break
            positionals.extend(args[index:])
            self._allocate(positionals)
        finally:
            self._scanning = False

    def _parse_long(self, index, args):
        """
        Parse "--name" or "--name=value" at args[index]; returns the number of tokens used.
        """
        name, equals, first = args[index].partition("=")
        if not equals:
            first = None
        if (binding := self._longs.get(name)) is None:
            options = {"option": name}
            if matches := difflib.get_close_matches(name, self._longs, 1):
                options["hint"] = "did you mean '%s'?" % matches[0]
            raise UnrecognizedOptionError("unrecognized option '%s'" % name, **options)
        if first is not None and not binding.arg_names:
            raise UnexpectedOptionArgumentError("option '%s' doesn't allow an argument" % name, option=name)
        consumed = binding._consume(name, first, index + 1, args)
        if first is not None:
            consumed -= 1
        return 1 + consumed

    def _parse_short(self, index, args):
        """
        Parse the short option cluster at args[index]; returns the number of tokens used.
        """
        token = args[index]
        position = 1
        while position < len(token):
            key = token[position]
            position += 1
            if (binding := self._shorts.get(key)) is None:
                raise UnrecognizedOptionError("unrecognized option '-%s'" % key, option="-" + key)
            first = token[position:] or None
            consumed = binding._consume("-" + key, first, index + 1, args)
            if consumed > 0:
                return consumed + (1 if first is None else 0)
        return 1

    def _allocate(self, tokens):
        """
        Hand the positional tokens to the slots in declaration order.

        Every slot first gets its minimum (zero when it has a default), then
        the surplus goes to the earliest slots up to their maximum.
        """
        extra = max(0, len(tokens) - sum(binding.minimum for binding, defaulted in self._slots if not defaulted))
        position = 0
        for binding, defaulted in self._slots:
            minimum = 0 if defaulted else binding.minimum
            chunk = min(minimum + extra, binding.maximum)
            if chunk > len(tokens) - position:
                raise MissingRequiredPositionalArgumentError(
                    "missing %s operand" % binding.error_name,
                    argument=binding.error_name,
                )
            if chunk or not defaulted:
                binding._fill(tokens[position:position + chunk])
            position += chunk
            extra -= chunk - minimum
        if position < len(tokens):
            if self._slots:
                name = self._slots[-1][0].error_name
                raise UnexpectedPositionalArgumentError(
                    "unexpected argument after %s" % name,
                    argument=name,
                )
            raise UnexpectedPositionalArgumentError("unexpected argument")

    # --- lifecycle ---

    def force(self):
        """
        Parse the arguments if that has not happened yet.

        Scans, checks that every binding has a value, then runs validators in
        registration order. Any fault raised along the way is remembered and
        raised again by later calls. Does nothing while scanning or validating,
        so transforms and validators may read other values.
        """
        if self._scanning or self._validating or self._finished:
            return
        if self._fault is not None:
            raise self._fault
        try:
            self._scan()
            self._validating = True
            try:
                for binding in self._bindings:
                    binding._check_has_value()
                for binding in self._bindings:
                    binding._validate()
            finally:
                self._validating = False
        except Exception as fault:
            self._fault = fault
            raise
        self._finished = True

    def parse_into(self, constructor, /):
        """
        Build an object whose attributes are bindings of this parser, then parse.

            class Args:
                def __init__(self, parser):
                    self.verbose = parser.flag("-v", "--verbose", help="...")

            arguments = ArgParser(sys.argv[1:]).parse_into(Args)

        The parser must not have other bindings yet.
        """
        if len(self._bindings) != self._builtins:
            raise ConfigError("parse_into can only be used with a clean ArgParser instance")
        result = constructor(self)
        self.force()
        return result

    def __rich_repr__(self):
        yield "args", self.args
        yield "mode", self.mode
        yield "bindings", self.bindings

    def __repr__(self):
        return "ArgParser(args=%r, mode=%s)" % (self._args, self._mode)


__all__ = (
    "Mode",
    "ArgParser",
)
