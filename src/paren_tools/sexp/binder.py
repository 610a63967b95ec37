"""
Structural field binding for records.

A record is read from a run of sibling forms. Each field of the record is a
slot of one of four kinds:

- positional: the next untagged form, in declaration order
- required: exactly one ``(name value...)`` form
- optional: at most one ``(name value...)`` form
- repeated: any number of ``(name value...)`` forms, kept in order

Tagged forms may appear in any order and interleaved with positional forms.
A list whose head symbol is a declared tag always goes to that tag's slot,
never to a positional slot.

Example::

    @record
    class Pin:
        number: int
        name: str = required()
        alias: Optional[str] = optional()
        net: list[Symbol] = repeated()

    read(Pin, '1 (net gnd) (name "GND") (net shield)')
    # Pin(number=1, name='GND', alias=None, net=[Symbol('gnd'), Symbol('shield')])

Schemas can also be built by hand and bound without a dataclass::

    schema = Schema([Slot.positional("id", int), Slot.required("label", str)])
    schema.bind(lex('7 (label "x")').view())   # {'id': 7, 'label': 'x'}
"""

from __future__ import annotations

import dataclasses
import logging
import typing
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

from paren_tools.exceptions import (
    ConfigurationError,
    DuplicateFieldError,
    MissingFieldError,
    UnexpectedFormError,
)

from .protocol import (
    InputStream,
    OutputStream,
    TokenTree,
    TreeKind,
    expect,
    from_parens,
    is_readable_shape,
    to_parens,
    unwrap_optional,
)

logger = logging.getLogger(__name__)

METADATA_KEY = "paren_tools"


class SlotKind(Enum):
    """How a slot is matched against sibling forms."""

    POSITIONAL = "positional"
    REQUIRED = "required"
    OPTIONAL = "optional"
    REPEATED = "repeated"


@dataclass(frozen=True)
class Slot:
    """
    One field of a record schema.

    Attributes:
        name: Key the bound value is stored under
        kind: Matching rule
        shape: Shape the value (or the tail of the tagged form) is read as;
            for repeated slots, the shape of one occurrence
        tag: Head symbol of tagged forms (defaults to ``name``)
    """

    name: str
    kind: SlotKind
    shape: Any
    tag: Optional[str] = None

    def __post_init__(self):
        if self.kind is SlotKind.POSITIONAL:
            if self.tag is not None:
                raise ConfigurationError(
                    "Positional slots cannot have a tag",
                    context={"slot": self.name, "tag": self.tag},
                )
        elif self.tag is None:
            object.__setattr__(self, "tag", self.name)

    @property
    def is_tagged(self) -> bool:
        return self.kind is not SlotKind.POSITIONAL

    @classmethod
    def positional(cls, name: str, shape: Any) -> Slot:
        return cls(name, SlotKind.POSITIONAL, shape)

    @classmethod
    def required(cls, name: str, shape: Any, tag: Optional[str] = None) -> Slot:
        return cls(name, SlotKind.REQUIRED, shape, tag)

    @classmethod
    def optional(cls, name: str, shape: Any, tag: Optional[str] = None) -> Slot:
        return cls(name, SlotKind.OPTIONAL, shape, tag)

    @classmethod
    def repeated(cls, name: str, shape: Any, tag: Optional[str] = None) -> Slot:
        return cls(name, SlotKind.REPEATED, shape, tag)


def is_record(shape: Any) -> bool:
    """True for classes decorated with :func:`record`."""
    return isinstance(shape, type) and getattr(shape, "__paren_record__", False)


def _wrapped(shape: Any) -> bool:
    """Positional values of these shapes are written inside their own list."""
    return is_record(shape) or typing.get_origin(shape) in (list, tuple)


def _head_tag(tree: TokenTree) -> Optional[str]:
    """Head symbol of a list form, or None for atoms and lists not starting with a symbol."""
    if tree.kind is not TreeKind.LIST:
        return None
    head = tree.value.peek()
    if head is None or head.kind is not TreeKind.SYMBOL:
        return None
    return str(head.value)


class Schema:
    """
    Ordered list of slots, interpreted against a run of sibling forms.

    A schema holds no state between calls; each :meth:`bind` starts with
    fresh counters.

    Raises:
        ConfigurationError: On duplicate slot names or tags, or slots whose
            shape cannot be read
    """

    def __init__(self, slots: Iterable[Slot], name: str = "record"):
        self.name = name
        self.slots: List[Slot] = list(slots)
        self.positional: List[Slot] = [s for s in self.slots if not s.is_tagged]
        self.tagged: Dict[str, Slot] = {}

        seen = set()
        for slot in self.slots:
            if slot.name in seen:
                raise ConfigurationError(
                    "Duplicate slot name in record schema",
                    context={"record": name, "slot": slot.name},
                )
            seen.add(slot.name)

            if not is_readable_shape(slot.shape):
                raise ConfigurationError(
                    "Unsupported slot shape",
                    context={"record": name, "slot": slot.name, "shape": repr(slot.shape)},
                    suggestions=["Use str, Symbol, bool, int, float, Value, a record, or list/Optional of those"],
                )

            if slot.is_tagged:
                if slot.tag in self.tagged:
                    raise ConfigurationError(
                        "Duplicate tag in record schema",
                        context={"record": name, "tag": slot.tag},
                        suggestions=["Give every tagged field a distinct tag"],
                    )
                self.tagged[slot.tag] = slot

    def __repr__(self) -> str:
        return f"Schema({self.name!r}, {len(self.slots)} slots)"

    def bind(self, input: InputStream) -> Dict[str, Any]:
        """
        Bind every remaining form of ``input`` to the slots.

        Returns:
            Mapping from slot name to bound value. Absent optional slots map
            to None and repeated slots to a (possibly empty) list.

        Raises:
            DuplicateFieldError: A required or optional tag appeared twice
            MissingFieldError: A required tag or positional value is missing
            UnexpectedFormError: A form was left after all positional slots
                were filled
            ParseError: A form's contents did not match its slot's shape
        """
        counts: Counter = Counter()
        values: Dict[str, Any] = {}
        repeated: Dict[str, List[Any]] = {s.name: [] for s in self.slots if s.kind is SlotKind.REPEATED}
        next_positional = 0

        while not input.is_end():
            tree = input.peek()
            tag = _head_tag(tree)
            slot = self.tagged.get(tag) if tag is not None else None

            if slot is not None:
                input.next()
                span = input.span()
                counts[slot.name] += 1
                if slot.kind is not SlotKind.REPEATED and counts[slot.name] > 1:
                    raise DuplicateFieldError(slot.tag, span)

                inner = tree.value
                inner.next()
                value = from_parens(slot.shape, inner)
                inner.expect_end()

                if slot.kind is SlotKind.REPEATED:
                    repeated[slot.name].append(value)
                else:
                    values[slot.name] = value
                continue

            if next_positional >= len(self.positional):
                input.next()
                raise UnexpectedFormError(input.span(), reason=f"unexpected form in {self.name}")

            slot = self.positional[next_positional]
            next_positional += 1
            values[slot.name] = self._read_positional(slot, input.next_stream())

        if next_positional < len(self.positional):
            raise MissingFieldError(self.positional[next_positional].name, input.parent_span())

        for slot in self.slots:
            if slot.kind is SlotKind.REQUIRED and counts[slot.name] == 0:
                raise MissingFieldError(slot.tag, input.parent_span())
            if slot.kind is SlotKind.OPTIONAL and slot.name not in values:
                values[slot.name] = None
            if slot.kind is SlotKind.REPEATED:
                values[slot.name] = repeated[slot.name]

        logger.debug(f"Bound {self.name}: {len(self.positional)} positional, {sum(counts.values())} tagged forms")
        return values

    def _read_positional(self, slot: Slot, stream: InputStream) -> Any:
        if _wrapped(slot.shape):
            inner = expect(stream, TreeKind.LIST, f"list for '{slot.name}'")
            value = from_parens(slot.shape, inner)
            inner.expect_end()
        else:
            value = from_parens(slot.shape, stream)
        stream.expect_end()
        return value

    def write(self, values: Mapping[str, Any], output: OutputStream) -> None:
        """
        Write bound values in declaration order.

        Positional values come out as they are (records and sequences wrapped
        in a list), tagged values as ``(tag value...)`` forms; absent optional
        values are skipped.
        """
        for slot in self.slots:
            value = values[slot.name]
            if slot.kind is SlotKind.POSITIONAL:
                if _wrapped(slot.shape):
                    output.write_list(lambda out, value=value: to_parens(value, out))
                else:
                    to_parens(value, output)
            elif slot.kind is SlotKind.REPEATED:
                for item in value:
                    _write_tagged(slot.tag, item, output)
            elif value is not None or slot.kind is SlotKind.REQUIRED:
                _write_tagged(slot.tag, value, output)


def _write_tagged(tag: str, value: Any, output: OutputStream) -> None:
    def write(out: OutputStream) -> None:
        out.write_symbol(tag)
        to_parens(value, out)

    output.write_list(write)


# ---------------------------------------------------------------------------
# Dataclass records
# ---------------------------------------------------------------------------


def positional(**kwargs) -> Any:
    """Field matched by position among untagged forms (the default)."""
    return dataclasses.field(metadata={METADATA_KEY: (SlotKind.POSITIONAL, None)}, **kwargs)


def required(tag: Optional[str] = None, **kwargs) -> Any:
    """Field read from exactly one ``(tag value...)`` form."""
    return dataclasses.field(metadata={METADATA_KEY: (SlotKind.REQUIRED, tag)}, **kwargs)


def optional(tag: Optional[str] = None, **kwargs) -> Any:
    """Field read from at most one ``(tag value...)`` form; defaults to None."""
    if "default_factory" not in kwargs:
        kwargs.setdefault("default", None)
    return dataclasses.field(metadata={METADATA_KEY: (SlotKind.OPTIONAL, tag)}, **kwargs)


def repeated(tag: Optional[str] = None, **kwargs) -> Any:
    """Field collected from every ``(tag value...)`` form, in order; defaults to []."""
    if "default" not in kwargs:
        kwargs.setdefault("default_factory", list)
    return dataclasses.field(metadata={METADATA_KEY: (SlotKind.REPEATED, tag)}, **kwargs)


def schema_of(cls: type) -> Schema:
    """
    Schema of a record class, built on first use.

    Building is deferred so that records can refer to records defined later
    in the same module.
    """
    schema = cls.__dict__.get("__paren_schema__")
    if schema is None:
        schema = _build_schema(cls)
        setattr(cls, "__paren_schema__", schema)
    return schema


def _build_schema(cls: type) -> Schema:
    hints = typing.get_type_hints(cls)
    slots = []

    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        kind, tag = f.metadata.get(METADATA_KEY, (SlotKind.POSITIONAL, None))
        shape = hints[f.name]

        if kind is SlotKind.OPTIONAL:
            inner = unwrap_optional(shape)
            if inner is not None:
                shape = inner
        elif kind is SlotKind.REPEATED:
            args = typing.get_args(shape)
            if typing.get_origin(shape) is not list or not args:
                raise ConfigurationError(
                    "Repeated fields must be annotated as list[T]",
                    context={"record": cls.__name__, "field": f.name, "annotation": repr(shape)},
                )
            shape = args[0]

        slots.append(Slot(f.name, kind, shape, tag))

    logger.debug(f"Built schema for {cls.__name__} with {len(slots)} slots")
    return Schema(slots, name=cls.__name__)


def _record_from_parens(cls, input: InputStream):
    return cls(**schema_of(cls).bind(input))


def _record_to_parens(self, output: OutputStream) -> None:
    schema = schema_of(type(self))
    schema.write({slot.name: getattr(self, slot.name) for slot in schema.slots}, output)


def record(cls: Optional[type] = None):
    """
    Class decorator turning a dataclass into a readable/writable record.

    Plain classes are made into dataclasses first. Field kinds come from
    :func:`positional`, :func:`required`, :func:`optional` and
    :func:`repeated`; fields without one are positional.

    Annotations are resolved with ``typing.get_type_hints``, so record classes
    (and the types they mention) should live at module level.
    """

    def wrap(cls: type) -> type:
        if not dataclasses.is_dataclass(cls):
            cls = dataclass(cls)
        cls.__paren_record__ = True
        cls.from_parens = classmethod(_record_from_parens)
        cls.to_parens = _record_to_parens
        return cls

    if cls is None:
        return wrap
    return wrap(cls)
