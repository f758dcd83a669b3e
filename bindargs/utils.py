import builtins
import functools
import re


class UnsetType:
    """
    Internal singleton sentinel for "not provided" / "not set".

    Intent
    - Used by the binding cells and the public API to distinguish "no value"
      from a user-supplied value (including None or other falsy values).
    - A cell holding Unset is unset; a cell holding None is set to None.

    Behavior
    - truthiness: bool(Unset) is False.
    - identity: Unset is a process-wide singleton (see __new__).
    - display: repr(Unset) -> "Unset".
    - final: subclassing is forbidden to preserve semantics.

    Typical use
    - Use Unset as a default to signal "no user input".
    - Downstream, call coalesce(value, default) to materialize a concrete value.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in annotations (e.g., str | UnsetType).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Support reversed PEP 604 unions when UnsetType appears on the right.
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        """
        Ensure a single instance for this sentinel type.
        """
        return super().__new__(cls)

    def __bool__(self):
        """
        Falsey sentinel: allows simple truthiness checks without equating Unset to None.
        """
        return False

    def __repr__(self):
        """
        Human-friendly representation used in errors.
        """
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        """
        Disallow subclassing to preserve sentinel semantics.
        """
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    This returns the given object unless it is the Unset sentinel, in which case
    the provided default is returned. Falsey values like None, 0, "", or [] are
    preserved as-is: they are not treated as "unset".

    This is the idiom option handlers use to read the value accumulated so far:

        parser.option("-v", help="...", handler=lambda invocation: coalesce(invocation.value, 0) + 1)

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable (updated in place)
    - rename(name) -> decorator

    Keeps the handlers synthesized by the binding constructors readable in
    tracebacks and reprs (``flag`` instead of ``ArgParser.flag.<locals>.<lambda>``).
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                # Some callables (e.g., built-ins) disallow attribute updates.
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The generated property reads "_{name}" from the instance. Lists are
    served as tuples so callers cannot mutate registration data through the
    public API.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        object = getattr(self, "_" + name)
        if isinstance(object, list):
            return tuple(object)
        return object

    return property(getter)


# Option spellings: "-x" or "--name", segments of letters/digits joined by '-', '_' or '.'.
OPTION_NAME = re.compile(r"(-[a-zA-Z0-9])|(--[a-zA-Z0-9]+([-_.][a-zA-Z0-9]+)*)")

# Argument and positional names: upper-case segments joined by '-', '_' or '.'.
ARG_NAME = re.compile(r"[A-Z]+([-_.][A-Z0-9]+)*")


def representative(names, /):
    """
    Pick the spelling used to talk about an option: the first long spelling,
    or the first spelling when there is no long one.
    """
    if not names:
        raise ValueError("need at least one option name")
    for name in names:
        if name.startswith("--"):
            return name
    return names[0]


def argname(name, /):
    """
    Derive an argument name from an option spelling.

    - argname("--dry-run") -> "DRY_RUN"
    - argname("-x")        -> "X"
    """
    return re.sub(r"^-{1,2}", "", name).upper().replace("-", "_")


Unset = UnsetType()
"""
Sentinel for "not provided" / "not set".

Notes
- Singleton: there is only one Unset instance.
- Distinct from None: a binding set to None has a value, a binding holding Unset does not.
- Falsey: bool(Unset) is False, but it is not equivalent to None or 0.
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "representative",
    "argname",

    # Patterns
    "OPTION_NAME",
    "ARG_NAME",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
