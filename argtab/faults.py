"""
Argtab faults (parse errors) and their rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every parse-time issue.
  Codes are grouped by domain to keep messages consistent and make logs/searches
  predictable.
- ParseError: base record type carrying a message plus options (entry, token, value,
  option display). One subclass per fault kind, each with a fixed message template.
- TableError: raised for lifecycle misuse of a table (e.g. releasing it twice).

Collection, not control flow
- parse() never raises a ParseError. Faults are built with ParseError.create(...) and
  appended to the table's End entry, which keeps at most `capacity` of them plus one
  TooManyErrorsError marker.
- The caller decides whether to print them (render_errors / print_errors).

Rendering
- str(fault) is the plain message, e.g. 'invalid option "--levle"'.
- __rich__ renders a one-line, optionally colored Text prefixed by the program name.
  Styles are configurable via __styles__ in __main__, fault labels via __codes__.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.text import Text

from .utils import Unset, coalesce


class FaultCode(IntEnum):
    """
    canonical fault codes produced by the parser (stable identifiers).

    grouping (by high-level domain)
    - matching (2110x)
      • INVALID_OPTION, UNEXPECTED_ARGUMENT
    - values (2111x)
      • MISSING_VALUE, BAD_VALUE
    - occurrences (2112x)
      • TOO_MANY_OCCURRENCES, MISSING_OCCURRENCES
    - sentinel (2119x)
      • TOO_MANY_ERRORS

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- matching errors (2110x) ---
    INVALID_OPTION              = 21101
    UNEXPECTED_ARGUMENT         = 21102

    # --- value errors (2111x) ---
    MISSING_VALUE               = 21111
    BAD_VALUE                   = 21112

    # --- occurrence errors (2112x) ---
    TOO_MANY_OCCURRENCES        = 21121
    MISSING_OCCURRENCES         = 21122

    # --- error sentinel (2119x) ---
    TOO_MANY_ERRORS             = 21199

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ParseError(Exception):
    """
    structured record of one parse-time fault.

    options (all optional, stored read-only)
    - entry: the table entry the fault refers to, None for table-level faults.
    - token: the offending token or option spelling as typed by the user.
    - value: associated value string, if any.
    - option: display form of the entry (see render_option).
    - label: datatype label of the entry.
    - progname, colorful: rendering hints merged in by print_errors via copy.replace.
    """
    code = None
    template = ""

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    @classmethod
    def create(cls, **options):
        """
        build a fault whose message is the class template filled from options.
        """
        fields = defaultdict(str, {key: coalesce(value, "") for key, value in options.items()})
        return cls(cls.template % fields, **options)

    @property
    def entry(self):
        return self.options.get("entry")

    @property
    def token(self):
        return self.options.get("token")

    @property
    def value(self):
        return self.options.get("value")

    def __str__(self):
        return coalesce(self.message, "")

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, str(self))

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", False)

        styles = defaultdict(str, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-message": "#FF4DA6",  # pinky message
            "overflow": "italic #FFB400",  # amber overflow marker
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        line = Text()
        if progname := self.options.get("progname"):
            line.append(str(progname), styler("prog-name")).append(": ")
        if colorful and self.options.get("coded"):
            line.append("[").append(self.code.normalize(), styler("code")).append("] ")
        style = "overflow" if self.code is FaultCode.TOO_MANY_ERRORS else "error-message"
        return line.append(str(self), styler(style))

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class InvalidOptionError(ParseError):
    code = FaultCode.INVALID_OPTION
    template = 'invalid option "%(token)s"'


class UnexpectedArgumentError(ParseError):
    code = FaultCode.UNEXPECTED_ARGUMENT
    template = 'unexpected argument "%(token)s"'


class MissingValueError(ParseError):
    code = FaultCode.MISSING_VALUE
    template = "missing %(label)s to option %(token)s"


class BadValueError(ParseError):
    code = FaultCode.BAD_VALUE
    template = 'invalid argument "%(token)s" to option %(option)s'


class TooManyOccurrencesError(ParseError):
    code = FaultCode.TOO_MANY_OCCURRENCES
    template = "excess option %(option)s"


class MissingOccurrencesError(ParseError):
    code = FaultCode.MISSING_OCCURRENCES
    template = "missing option %(option)s"


class TooManyErrorsError(ParseError):
    code = FaultCode.TOO_MANY_ERRORS
    template = "too many errors"


class TableError(Exception):
    """
    misuse of a table as a whole (for example releasing it twice).
    """


__all__ = (
    "FaultCode",
    "ParseError",
    "InvalidOptionError",
    "UnexpectedArgumentError",
    "MissingValueError",
    "BadValueError",
    "TooManyOccurrencesError",
    "MissingOccurrencesError",
    "TooManyErrorsError",
    "TableError",
)
