r"""
Argtab table entries (option descriptors) and their factories.

Overview
- Entries
  • Literal: presence-only switch (no payload), e.g. -v/--verbose.
  • Integer, Double, String: value-bearing options converted at match time.
  • Regex: string option whose value must match a configured pattern.
  • File: filename option, also keeps each value's basename and extension.
  • Date: option parsed against a configured strptime format.
  • Remark: glossary-only line; never matched by the parser.
  • End: terminating error sentinel collecting parse faults.

- Factories
  • literal(), integer(), double(), string(), regex(), filename(), date(), remark(), end()
  Each factory builds the matching entry and returns None (instead of raising) when
  the value storage cannot be allocated. validate(table) catches that in one step.

Tags and positionals
- shortopts: characters usable as -x, given as "vV" or as an iterable of characters.
- longopts: names usable as --name, given as "verbose,chatty" or as an iterable.
- An entry with neither is positional: it binds untagged tokens in table order.

Metadata (sanitized on construction)
- datatype: Unset | str. Unset selects the kind default ("<int>", the regex pattern,
  the date format...). An explicit "" suppresses the label in rendered text.
- glossary: Unset | str. Unset or empty means “omit from glossaries”.
- mincount/maxcount: inclusive occurrence bounds, 0 <= mincount <= maxcount, maxcount >= 1.
  maxcount also sizes the value storage.

Validation highlights
- Bad types raise TypeError, bad values (bounds, forms, patterns) raise ValueError.
- Short forms are single characters other than '-', '=' and whitespace.
- Long forms must not start with '-' nor contain '=', ',' or whitespace.

Quick example:
    >>> from argtab import literal, integer, filename, end
    >>> table = [
    ...     literal("v", "verbose", glossary="print more"),
    ...     integer(None, "level", "<n>", glossary="verbosity level"),
    ...     filename(None, None, mincount=1, maxcount=100),
    ...     end(20),
    ... ]
"""
import functools
import logging
import ntpath
import operator
import re
from datetime import datetime

from .faults import TooManyErrorsError
from .utils import *

logger = logging.getLogger(__name__)


class EntryType(type):
    """
    Metaclass that turns entry classes into introspectable descriptors.

    Responsibilities
    - Derive __typename__ from the class name ("Integer" → "integer") for messages.
    - Provide stable, readable __repr__/__rich_repr__ implementations.
    - Expose every name listed in __introspectable__ as a read-only property over
      the private backing field "_<name>" (see mirror()).
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - integer(shortopts=('l',), longopts=('level',), datatype='<int>', ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize the label and glossary shared by every entry kind.

    - datatype: Unset → the kind default (cls.__datatype__, possibly None);
      any string, including "", is kept verbatim.
    - glossary: Unset or blank → None; otherwise the trimmed text.

    Raises
    - TypeError: when either value is neither a string nor Unset.
    """
    if not isinstance(datatype := metadata.get("datatype", Unset), str | Unset):
        raise TypeError(f"{cls.__typename__} 'datatype' must be a string")
    metadata["datatype"] = coalesce(datatype, metadata.pop("fallback", cls.__datatype__))

    if not isinstance(glossary := metadata["glossary"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'glossary' must be a string")
    metadata["glossary"] = (glossary.strip() or None) if glossary else None


def _sanitize_tagged_metadata(cls, metadata, /):
    r"""
    Internal: validate and normalize short and long option forms.

    - shortopts: None/Unset/"" → (); a string is split into characters; any other
      iterable must yield one-character strings.
    - longopts: None/Unset/"" → (); a string is split on ','; any other iterable
      must yield strings.
    - duplicates within one entry are rejected.

    Name rules
    - short: one character, not '-', '=' or whitespace.
    - long: r"[^\s=,\-][^\s=,]*" (no leading dash, no '=', ',' or whitespace).
    """
    shortopts = metadata["shortopts"]
    if shortopts is None or shortopts is Unset:
        shortopts = ()
    elif not isinstance(shortopts, str):
        try:
            shortopts = tuple(shortopts)
        except TypeError:
            raise TypeError(f"{cls.__typename__} 'shortopts' must be a string or an iterable of characters") from None

    sanitized = []
    for char in shortopts:
        if not isinstance(char, str):
            raise TypeError(f"{cls.__typename__} 'shortopts' must contain strings")
        elif len(char) != 1 or char in "-=" or char.isspace():
            raise ValueError(f"{cls.__typename__} short option {char!r} must be a single character other than '-', '=' or whitespace")
        elif char in sanitized:
            raise ValueError(f"{cls.__typename__} 'shortopts' cannot contain duplicates")
        sanitized.append(char)
    metadata["shortopts"] = tuple(sanitized)

    longopts = metadata["longopts"]
    if longopts is None or longopts is Unset:
        longopts = ()
    elif isinstance(longopts, str):
        longopts = longopts.split(",") if longopts else ()
    else:
        try:
            longopts = tuple(longopts)
        except TypeError:
            raise TypeError(f"{cls.__typename__} 'longopts' must be a string or an iterable of strings") from None

    sanitized = []
    for name in longopts:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'longopts' must contain strings")
        elif not re.fullmatch(r"[^\s=,\-][^\s=,]*", name):
            raise ValueError(f"{cls.__typename__} long option {name!r} is not a valid option name")
        elif name in sanitized:
            raise ValueError(f"{cls.__typename__} 'longopts' cannot contain duplicates")
        sanitized.append(name)
    metadata["longopts"] = tuple(sanitized)


def _sanitize_bounded_metadata(cls, metadata, /):
    """
    Internal: validate occurrence bounds.

    Rules
    - both bounds are integers (bool is rejected).
    - maxcount >= 1, mincount >= 0 and mincount <= maxcount.
    """
    for name in ("mincount", "maxcount"):
        if not isinstance(metadata[name], int) or isinstance(metadata[name], bool):
            raise TypeError(f"{cls.__typename__} {name!r} must be an integer")

    if metadata["maxcount"] < 1:
        raise ValueError(f"{cls.__typename__} 'maxcount' must be a positive integer")
    if metadata["mincount"] < 0:
        raise ValueError(f"{cls.__typename__} 'mincount' cannot be negative")
    if metadata["mincount"] > metadata["maxcount"]:
        raise ValueError(f"{cls.__typename__} 'mincount' cannot exceed 'maxcount'")


class Entry(metaclass=EntryType):
    """
    Base of every option kind except End.

    Subclasses declare
    - __datatype__: default label used when the caller leaves datatype Unset.
    - __default__: value prefilled into every storage slot.
    - hasvalue: whether a tagged match consumes a value.
    - __extras__: names of the kind-specific keyword arguments accepted on construction.
    - convert(text): turn a raw token into a stored value (raise ValueError on failure).

    State written by the parser
    - count: occurrences accepted during the latest parse.
    - values: storage list sized to maxcount. Slots keep their preset content
      until a parse overwrites them with an accepted value.
    """

    __introspectable__ = (
        "shortopts",
        "longopts",
        "datatype",
        "mincount",
        "maxcount",
        "glossary",
        "count",
    )

    __datatype__ = None
    __default__ = None
    hasvalue = False
    __extras__ = ()

    def __new__(
            cls,
            shortopts=Unset,
            longopts=Unset,
            datatype=Unset,
            mincount=0,
            maxcount=1,
            glossary=Unset,
            *,
            default=Unset,
            **extra
    ):
        if unknown := [name for name in extra if name not in cls.__extras__]:
            raise TypeError(f"{cls.__typename__}() got an unexpected keyword argument {unknown[0]!r}")

        metadata = {
            "shortopts": shortopts,
            "longopts": longopts,
            "datatype": datatype,
            "mincount": mincount,
            "maxcount": maxcount,
            "glossary": glossary,
        } | extra
        cls.__sanitize__(metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        self._count = 0
        self._default = coalesce(default, cls.__default__)
        self._allocate()
        return self

    @classmethod
    def __sanitize__(cls, metadata, /):
        _sanitize_metadata(cls, metadata)
        _sanitize_tagged_metadata(cls, metadata)
        _sanitize_bounded_metadata(cls, metadata)

    @property
    def positional(self):
        """
        True when the entry has no short and no long forms.
        """
        return not self._shortopts and not self._longopts

    @property
    def values(self):
        """
        Live value storage (length maxcount). Callers may preset slots before parsing.
        """
        return self._values

    def convert(self, text, /):
        return text

    def _allocate(self):
        # MemoryError, or OverflowError past sys.maxsize; factories turn both into None.
        self._values = [self._default] * self._maxcount

    def _store(self, text, value, /):
        self._values[self._count] = value
        self._count += 1

    def _reset(self):
        self._count = 0

    def _detach(self):
        values = self._values
        self._allocate()
        return values

    def _release(self):
        self._values.clear()
        self._count = 0


class Literal(Entry):
    """
    Presence-only switch such as -v/--verbose. Carries a count and no values.
    """

    __introspectable__ = (
        "shortopts",
        "longopts",
        "mincount",
        "maxcount",
        "glossary",
        "count",
    )

    def __new__(cls, shortopts=Unset, longopts=Unset, mincount=0, maxcount=1, glossary=Unset):
        return super().__new__(cls, shortopts, longopts, Unset, mincount, maxcount, glossary)

    @property
    def values(self):
        raise AttributeError(f"{type(self).__typename__} entries carry no values")

    def _allocate(self):
        self._values = []

    def _store(self, text, value, /):
        self._count += 1


_INTEGER = re.compile(
    r"(?P<sign>[+-]?)"
    r"(?:0[xX](?P<hex>[0-9a-fA-F]+)|0[oO](?P<oct>[0-7]+)|0[bB](?P<bin>[01]+)|(?P<dec>[0-9]+))"
    r"(?P<suffix>[kKmMgG][bB])?"
)

# multiplier applied for a KB/MB/GB suffix
_MAGNITUDES = {"k": 1 << 10, "m": 1 << 20, "g": 1 << 30}


class Integer(Entry):
    """
    Integer option.

    Accepted spellings: optional sign, then decimal digits, 0x hex, 0o octal or
    0b binary, then an optional KB/MB/GB suffix (case-insensitive) that scales by
    1024, 1024**2 or 1024**3. Underscores and whitespace are rejected.
    """

    __datatype__ = "<int>"
    __default__ = 0
    hasvalue = True

    def convert(self, text, /):
        if not (match := _INTEGER.fullmatch(text)):
            raise ValueError(f"invalid integer {text!r}")
        for base, group in ((16, "hex"), (8, "oct"), (2, "bin"), (10, "dec")):
            if match[group] is not None:
                value = int(match[group], base)
                break
        if match["suffix"]:
            value *= _MAGNITUDES[match["suffix"][0].lower()]
        return -value if match["sign"] == "-" else value


_DOUBLE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


class Double(Entry):
    """
    Floating-point option in plain decimal or exponential notation.
    """

    __datatype__ = "<double>"
    __default__ = 0.0
    hasvalue = True

    def convert(self, text, /):
        if not _DOUBLE.fullmatch(text):
            raise ValueError(f"invalid double {text!r}")
        return float(text)


class String(Entry):
    """
    Free-form string option.
    """

    __datatype__ = "<string>"
    __default__ = ""
    hasvalue = True


class Regex(Entry):
    """
    String option whose value must match a regular expression.

    The pattern is searched (not anchored) in each value, and doubles as the
    default datatype label. Pass flags=re.IGNORECASE for case-insensitive matching.
    """

    __introspectable__ = Entry.__introspectable__ + ("pattern", "flags")
    __extras__ = ("pattern", "flags")
    __default__ = ""
    hasvalue = True

    def __new__(
            cls,
            shortopts=Unset,
            longopts=Unset,
            pattern=Unset,
            datatype=Unset,
            mincount=0,
            maxcount=1,
            glossary=Unset,
            *,
            flags=0,
            default=Unset
    ):
        return super().__new__(
            cls, shortopts, longopts, datatype, mincount, maxcount, glossary,
            default=default, pattern=pattern, flags=flags
        )

    @classmethod
    def __sanitize__(cls, metadata, /):
        if not isinstance(pattern := metadata["pattern"], str):
            raise TypeError(f"{cls.__typename__} 'pattern' must be a string")
        elif not pattern:
            raise ValueError(f"{cls.__typename__} 'pattern' cannot be empty")
        if not isinstance(metadata["flags"], int):
            raise TypeError(f"{cls.__typename__} 'flags' must be an integer")
        try:
            metadata["compiled"] = re.compile(pattern, metadata["flags"])
        except re.error as error:
            raise ValueError(f"{cls.__typename__} 'pattern' is not a valid regular expression: {error}") from None
        metadata["fallback"] = pattern
        super().__sanitize__(metadata)

    def convert(self, text, /):
        if not self._compiled.search(text):
            raise ValueError(f"{text!r} does not match {self._pattern!r}")
        return text


def _basename(path):
    return ntpath.basename(path)


def _extension(basename):
    if basename in (".", ".."):
        return ""
    index = basename.rfind(".")
    # hidden files ('.profile') and a lone trailing dot carry no extension
    if index <= 0 or index == len(basename) - 1:
        return ""
    return basename[index:]


class File(Entry):
    """
    Filename option. Besides the raw value, each accepted value also records
    its basename and extension (including the leading dot, '' when absent).
    """

    __datatype__ = "<file>"
    __default__ = ""
    hasvalue = True

    @property
    def basenames(self):
        return self._basenames

    @property
    def extensions(self):
        return self._extensions

    def _allocate(self):
        super()._allocate()
        self._basenames = [""] * self._maxcount
        self._extensions = [""] * self._maxcount

    def _store(self, text, value, /):
        self._basenames[self._count] = basename = _basename(value)
        self._extensions[self._count] = _extension(basename)
        super()._store(text, value)

    def _release(self):
        self._basenames.clear()
        self._extensions.clear()
        super()._release()


class Date(Entry):
    """
    Date/time option parsed with datetime.strptime against the entry's format.
    The format doubles as the default datatype label; unmatched slots hold None.
    """

    __introspectable__ = Entry.__introspectable__ + ("format",)
    __extras__ = ("format",)
    hasvalue = True

    def __new__(
            cls,
            shortopts=Unset,
            longopts=Unset,
            format=Unset,
            datatype=Unset,
            mincount=0,
            maxcount=1,
            glossary=Unset,
            *,
            default=Unset
    ):
        return super().__new__(
            cls, shortopts, longopts, datatype, mincount, maxcount, glossary,
            default=default, format=format
        )

    @classmethod
    def __sanitize__(cls, metadata, /):
        if not isinstance(format := metadata["format"], str):
            raise TypeError(f"{cls.__typename__} 'format' must be a string")
        elif not format:
            raise ValueError(f"{cls.__typename__} 'format' cannot be empty")
        metadata["fallback"] = format
        super().__sanitize__(metadata)

    def convert(self, text, /):
        return datetime.strptime(text, self._format)


class Remark(Entry):
    """
    Glossary-only entry: contributes its label to the syntax line and a line of
    text to glossaries, and is otherwise invisible to the parser.
    """

    __introspectable__ = (
        "datatype",
        "glossary",
    )

    positional = False

    def __new__(cls, datatype=Unset, glossary=Unset):
        return super().__new__(cls, Unset, Unset, datatype, 1, 1, glossary)

    def _allocate(self):
        self._values = []


class End(metaclass=EntryType):
    """
    Terminating error sentinel of a table.

    Holds at most `capacity` structured ParseError records in append order. Any
    fault arriving while full sets a single TooManyErrorsError marker instead;
    later ones are dropped.
    """

    __introspectable__ = (
        "capacity",
        "errors",
        "overflow",
    )

    def __new__(cls, capacity=20):
        if not isinstance(capacity, int) or isinstance(capacity, bool):
            raise TypeError(f"{cls.__typename__} 'capacity' must be an integer")
        if capacity < 1:
            raise ValueError(f"{cls.__typename__} 'capacity' must be a positive integer")

        self = super().__new__(cls)
        self._capacity = capacity
        self._errors = []
        self._overflow = None
        return self

    @property
    def count(self):
        """
        Number of recorded faults, the overflow marker included.
        """
        return len(self._errors) + (self._overflow is not None)

    def record(self, fault, /):
        if len(self._errors) < self._capacity:
            self._errors.append(fault)
        elif self._overflow is None:
            self._overflow = TooManyErrorsError.create()

    def clear(self):
        self._errors.clear()
        self._overflow = None

    def __iter__(self):
        """
        Iterate recorded faults in append order, then the overflow marker if set.
        """
        yield from self._errors
        if self._overflow is not None:
            yield self._overflow

    def _reset(self):
        self.clear()

    def _release(self):
        self.clear()


def _build(cls, /, *args, **kwargs):
    """
    Build an entry, turning a storage allocation failure into None.
    """
    try:
        return cls(*args, **kwargs)
    except (MemoryError, OverflowError):
        logger.warning("could not allocate storage for %s entry %r", cls.__typename__, args)
        return None


def literal(shortopts=Unset, longopts=Unset, mincount=0, maxcount=1, glossary=Unset):
    """
    Build a Literal switch, e.g. literal("v", "verbose", glossary="print more").

    Returns None when storage cannot be allocated.
    """
    return _build(Literal, shortopts, longopts, mincount, maxcount, glossary)


def integer(shortopts=Unset, longopts=Unset, datatype=Unset, mincount=0, maxcount=1, glossary=Unset, *, default=Unset):
    """
    Build an Integer entry. `default` prefills every value slot (0 otherwise).

    Returns None when storage cannot be allocated.
    """
    return _build(Integer, shortopts, longopts, datatype, mincount, maxcount, glossary, default=default)


def double(shortopts=Unset, longopts=Unset, datatype=Unset, mincount=0, maxcount=1, glossary=Unset, *, default=Unset):
    return _build(Double, shortopts, longopts, datatype, mincount, maxcount, glossary, default=default)


def string(shortopts=Unset, longopts=Unset, datatype=Unset, mincount=0, maxcount=1, glossary=Unset, *, default=Unset):
    return _build(String, shortopts, longopts, datatype, mincount, maxcount, glossary, default=default)


def regex(
        shortopts=Unset,
        longopts=Unset,
        pattern=Unset,
        datatype=Unset,
        mincount=0,
        maxcount=1,
        glossary=Unset,
        *,
        flags=0,
        default=Unset
):
    """
    Build a Regex entry whose values must match `pattern` (re.search semantics).

    Returns None when storage cannot be allocated.
    """
    return _build(
        Regex, shortopts, longopts, pattern, datatype, mincount, maxcount, glossary, flags=flags, default=default
    )


def filename(shortopts=Unset, longopts=Unset, datatype=Unset, mincount=0, maxcount=1, glossary=Unset, *, default=Unset):
    """
    Build a File entry. Positional use: filename(None, None, mincount=1, maxcount=100).

    Returns None when storage cannot be allocated.
    """
    return _build(File, shortopts, longopts, datatype, mincount, maxcount, glossary, default=default)


def date(
        shortopts=Unset,
        longopts=Unset,
        format=Unset,
        datatype=Unset,
        mincount=0,
        maxcount=1,
        glossary=Unset,
        *,
        default=Unset
):
    """
    Build a Date entry parsed with datetime.strptime(value, format).

    Returns None when storage cannot be allocated.
    """
    return _build(Date, shortopts, longopts, format, datatype, mincount, maxcount, glossary, default=default)


def remark(datatype=Unset, glossary=Unset):
    return _build(Remark, datatype, glossary)


def end(capacity=20):
    """
    Build the End sentinel that terminates a table and collects up to `capacity` faults.
    """
    return _build(End, capacity)


__all__ = (
    # Classes (entries)
    "Entry",
    "Literal",
    "Integer",
    "Double",
    "String",
    "Regex",
    "File",
    "Date",
    "Remark",
    "End",

    # Factories
    "literal",
    "integer",
    "double",
    "string",
    "regex",
    "filename",
    "date",
    "remark",
    "end",
)

# Keep the metaclass out of star-imports; it is not part of the public API.
del EntryType
