r"""
bindargs bindings: the objects the parser hands back for every declaration.

Overview
- Binding: base of every declaration. Exposes a lazily forced `value`, an
  `error_name` used in messages, `help`, validators, and default composition.
- OptionBinding: owns one or more option spellings and a handler computing the
  new value from an Invocation. Flags, counters, storing, accumulating and
  mapping options are all OptionBindings with synthesized handlers.
- PositionalBinding: one positional slot with a (minimum, maximum) arity; its
  value is the list of transformed tokens it received.
- Wrapped: maps an inner binding's value (single positional = first token).
- Defaulted: substitutes a fallback when the inner binding was never set.

Cells
- Every parsing binding exclusively owns a Cell. A cell is either unset
  (holding the Unset sentinel) or set to a value, None included.

Lifecycle
- Reading `value` calls parser.force() first, so the first read anywhere scans
  and validates the whole command line. Reads during the scan (from transforms)
  or during validation (from validators) see the values set so far.
"""
import functools
import operator
from collections import namedtuple

from .faults import ConfigError, MissingValueError, OptionMissingRequiredArgumentError
from .utils import *

HelpValue = namedtuple("HelpValue", (
    "usages",
    "required",
    "repeating",
    "positional",
    "help",
))
HelpValue.__doc__ = """
Record describing one binding for a help formatter.

- usages: usage strings, e.g. ("-o OUTPUT", "--output OUTPUT")
- required: whether the binding must be supplied
- repeating: whether repeating it makes sense
- positional: whether it is a positional argument
- help: help text given at declaration time
"""

Invocation = namedtuple("Invocation", ("value", "option_name", "arguments"))
Invocation.__doc__ = """
What an option handler receives for one occurrence of its option.

- value: the value accumulated so far, or Unset on the first occurrence
- option_name: the spelling that matched, e.g. "-x" or "--ecks"
- arguments: an Arguments iterator over this occurrence's argument tokens
"""


class Cell:
    """
    Exactly-once-or-default value holder owned by a single binding.
    """
    __slots__ = ("content",)

    def __init__(self):
        self.content = Unset

    @property
    def set(self):
        return self.content is not Unset

    def put(self, value):
        self.content = value

    def __repr__(self):
        return "Cell(%r)" % (self.content,)


class Arguments:
    """
    Iterator over the argument tokens of one option occurrence.

    - peek(): next token without consuming it (Unset when exhausted)
    - has_next(): whether a token remains
    - next(): consume and return the next token; raises
      OptionMissingRequiredArgumentError when exhausted
    - len() and indexing address all tokens regardless of position
    """

    def __init__(self, option_name, tokens):
        self._option_name = option_name
        self._tokens = tuple(tokens)
        self._position = 0

    def peek(self):
        if not self.has_next():
            return Unset
        return self._tokens[self._position]

    def has_next(self):
        return self._position < len(self._tokens)

    def next(self):
        if not self.has_next():
            raise OptionMissingRequiredArgumentError(
                "option '%s' is missing a required argument" % self._option_name,
                option=self._option_name,
            )
        self._position += 1
        return self._tokens[self._position - 1]

    def __iter__(self):
        return self

    def __next__(self):
        if not self.has_next():
            raise StopIteration
        return self.next()

    def __len__(self):
        return len(self._tokens)

    def __getitem__(self, index):
        return self._tokens[index]

    def __repr__(self):
        return "Arguments(%r)" % (list(self._tokens),)


class Binding:
    """
    Base of every declaration made on an ArgParser.

    Subclasses provide value, has_value, error_name, help, has_validators,
    add_validator(), help_value(), _validate() and _leaf().
    """

    def __init__(self, parser):
        self._parser = parser

    parser = mirror("parser")

    def _check_has_value(self):
        if not self.has_value:
            raise MissingValueError("missing %s" % self.error_name, name=self.error_name)

    def default(self, value, /):
        """
        Return a new binding that yields `value` when this one was never set.

        The new binding takes this one's place in the parser. Defaults must be
        added before validators.
        """
        return Defaulted(self, rename(lambda: value, "default"))

    def default_factory(self, factory, /):
        """
        Like default(), but the fallback is computed by factory() on first use
        (at most once). The factory may read other bindings.
        """
        if not callable(factory):
            raise TypeError("default_factory() argument must be callable")
        return Defaulted(self, factory)

    def __rich_repr__(self):
        yield "error_name", self.error_name
        yield "help", self.help

    def __repr__(self):
        return f"{type(self).__name__}({
            ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
        })"


class _Parsing(Binding):
    """
    A binding that owns a cell and a validator chain.
    """

    def __init__(self, parser, error_name, help):
        super().__init__(parser)
        if not isinstance(help, str):
            raise TypeError("help must be a string")
        self._error_name = error_name
        self._help = help
        self._cell = Cell()
        self._validators = []

    error_name = mirror("error_name")
    help = mirror("help")

    @property
    def value(self):
        self._parser.force()
        if not self._cell.set:
            raise MissingValueError("missing %s" % self._error_name, name=self._error_name)
        return self._cell.content

    @property
    def has_value(self):
        return self._cell.set

    @property
    def has_validators(self):
        return bool(self._validators)

    def add_validator(self, validator, /):
        """
        Add validation logic, run after parsing in registration order.

        The validator receives this binding and should raise
        InvalidArgumentError on failure.
        """
        if not callable(validator):
            raise TypeError("add_validator() argument must be callable")
        self._validators.append(validator)
        return self

    def _validate(self):
        for validator in self._validators:
            validator(self)

    def _leaf(self):
        return self


class OptionBinding(_Parsing):
    """
    Binding for one or more option spellings.

    Each occurrence of any of its spellings gathers len(arg_names) argument
    tokens and calls handler(Invocation(value, option_name, arguments)); the
    handler's result becomes the new value.
    """

    def __init__(self, parser, names, error_name, help, arg_names, repeating, handler):
        super().__init__(parser, error_name, help)
        for name in names:
            if not isinstance(name, str) or not OPTION_NAME.fullmatch(name):
                raise ConfigError("%r is not a valid option name" % (name,))
        for name in arg_names:
            if not isinstance(name, str) or not ARG_NAME.fullmatch(name):
                raise ConfigError("%r is not a valid argument name" % (name,))
        if not callable(handler):
            raise TypeError("handler must be callable")
        self._names = list(names)
        self._arg_names = list(arg_names)
        self._repeating = bool(repeating)
        self._handler = handler

    names = mirror("names")
    arg_names = mirror("arg_names")
    repeating = mirror("repeating")

    def _consume(self, name, first, index, args):
        """
        Handle one occurrence of this option.

        - name: the spelling that matched
        - first: inline argument ("--name=value" or the rest of a short cluster), or None
        - index: position in args of the first token after the option token
        Returns how many argument tokens the option takes (inline one included).
        """
        arguments = []
        if self._arg_names:
            if first is not None:
                arguments.append(first)
            required = len(self._arg_names) - len(arguments)
            available = len(args) - index
            if required > available:
                # Only name the argument when there is more than one to choose from.
                if len(self._arg_names) > 1:
                    missing = self._arg_names[len(arguments) + available]
                    raise OptionMissingRequiredArgumentError(
                        "option '%s' is missing the required argument %s" % (name, missing),
                        option=name,
                        argument=missing,
                    )
                raise OptionMissingRequiredArgumentError(
                    "option '%s' is missing a required argument" % name,
                    option=name,
                )
            arguments.extend(args[index:index + required])
        self._cell.put(self._handler(Invocation(self._cell.content, name, Arguments(name, arguments))))
        return len(self._arg_names)

    def help_value(self):
        if self._arg_names:
            usages = tuple("%s %s" % (name, " ".join(self._arg_names)) for name in self._names)
        else:
            usages = tuple(self._names)
        return HelpValue(
            usages=usages,
            required=not self._cell.set,
            repeating=self._repeating,
            positional=False,
            help=self._help,
        )

    def __rich_repr__(self):
        yield "names", self.names
        yield "arg_names", self.arg_names
        yield from super().__rich_repr__()


class PositionalBinding(_Parsing):
    """
    Binding for one positional slot accepting minimum..maximum tokens.
    """

    def __init__(self, parser, name, minimum, maximum, help, transform):
        super().__init__(parser, name, help)
        if not isinstance(name, str) or not ARG_NAME.fullmatch(name):
            raise ConfigError("%r is not a valid argument name" % (name,))
        if minimum < 0:
            raise ConfigError("positional %s cannot start at %d, must be non-negative" % (name, minimum))
        if minimum > maximum:
            raise ConfigError("backwards ranges are not allowed: %d > %d" % (minimum, maximum))
        if maximum < 1:
            raise ConfigError("positional %s only allows %d arguments, must allow at least 1" % (name, maximum))
        if not callable(transform):
            raise TypeError("transform must be callable")
        self._minimum = minimum
        self._maximum = maximum
        self._transform = transform

    minimum = mirror("minimum")
    maximum = mirror("maximum")

    def _fill(self, tokens):
        self._cell.put([self._transform(token) for token in tokens])

    def help_value(self):
        return HelpValue(
            usages=(self._error_name,),
            required=self._minimum > 0,
            repeating=self._maximum > 1,
            positional=True,
            help=self._help,
        )

    def __rich_repr__(self):
        yield "minimum", self.minimum
        yield "maximum", self.maximum
        yield from super().__rich_repr__()


class Wrapped(Binding):
    """
    Decorator mapping the inner binding's value through wrap().

    Takes the inner binding's place in the parser.
    """

    def __init__(self, inner, wrap):
        super().__init__(inner.parser)
        self._inner = inner
        self._wrap = wrap
        self._parser._reroot(inner, self)

    @property
    def value(self):
        return self._wrap(self._inner.value)

    @property
    def has_value(self):
        return self._inner.has_value

    @property
    def error_name(self):
        return self._inner.error_name

    @property
    def help(self):
        return self._inner.help

    @property
    def has_validators(self):
        return self._inner.has_validators

    def add_validator(self, validator, /):
        if not callable(validator):
            raise TypeError("add_validator() argument must be callable")
        self._inner.add_validator(rename(lambda inner: validator(self), "validator"))
        return self

    def help_value(self):
        return self._inner.help_value()

    def _validate(self):
        self._inner._validate()

    def _leaf(self):
        return self._inner._leaf()


class Defaulted(Binding):
    """
    Decorator yielding a fallback when the inner binding was never set.

    - value: the inner value when set, otherwise factory() (computed once).
    - has_value: always True, so a defaulted binding is never missing.
    - validators added here run against the defaulted value.
    - takes the inner binding's place in the parser; a positional slot behind
      it may then receive zero tokens.
    """

    def __init__(self, inner, factory):
        super().__init__(inner.parser)
        if inner.has_validators:
            raise ConfigError("cannot add default after adding validators")
        self._inner = inner
        self._factory = factory
        self._fallback = Unset
        self._parser._reroot(inner, self)

    @property
    def value(self):
        self._parser.force()
        if self._inner.has_value:
            return self._inner.value
        if self._fallback is Unset:
            self._fallback = self._factory()
        return self._fallback

    @property
    def has_value(self):
        return True

    @property
    def error_name(self):
        return self._inner.error_name

    @property
    def help(self):
        return self._inner.help

    @property
    def has_validators(self):
        return self._inner.has_validators

    def add_validator(self, validator, /):
        if not callable(validator):
            raise TypeError("add_validator() argument must be callable")
        self._inner.add_validator(rename(lambda inner: validator(self), "validator"))
        return self

    def help_value(self):
        return self._inner.help_value()._replace(required=False)

    def _validate(self):
        self._inner._validate()

    def _leaf(self):
        return self._inner._leaf()


__all__ = (
    "HelpValue",
    "Invocation",
    "Cell",
    "Arguments",
    "Binding",
    "OptionBinding",
    "PositionalBinding",
    "Wrapped",
    "Defaulted",
)
