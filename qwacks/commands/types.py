from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Mapping

PRIMITIVE_KINDS = ("int", "float", "bool", "string")

_PY_TYPES: dict[str, type] = {"int": int, "float": float, "bool": bool, "string": str}
_KIND_BY_PY_TYPE: dict[type, str] = {int: "int", float: "float", bool: "bool", str: "string"}


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: str
    default: Any = None

    def __post_init__(self) -> None:
        if self.kind not in PRIMITIVE_KINDS:
            raise TypeError(f"record field {self.name!r} must be one of {PRIMITIVE_KINDS}, got {self.kind!r}")
        if self.default is None:
            object.__setattr__(self, "default", _PY_TYPES[self.kind]())


@dataclass(frozen=True)
class TypeDescriptor:
    """Target shape for one handler parameter.

    ``kind`` is one of the primitive kinds or ``"record"``. Records carry an
    ordered tuple of primitive fields and an optional ``factory`` that builds
    the decoded value from a ``{field: value}`` mapping.
    """

    kind: str
    name: str
    fields: tuple[FieldSpec, ...] = ()
    factory: Callable[..., Any] | None = None

    @property
    def is_record(self) -> bool:
        return self.kind == "record"

    def defaults(self) -> dict[str, Any]:
        return {f.name: f.default for f in self.fields}


INT = TypeDescriptor(kind="int", name="int")
FLOAT = TypeDescriptor(kind="float", name="float")
BOOL = TypeDescriptor(kind="bool", name="bool")
STRING = TypeDescriptor(kind="string", name="string")

_PRIMITIVES = {"int": INT, "float": FLOAT, "bool": BOOL, "string": STRING}


class Record(Mapping[str, Any]):
    """Decoded structured payload when no factory was declared."""

    def __init__(self, type_name: str, values: dict[str, Any]):
        self._type_name = type_name
        self._values = dict(values)

    @property
    def type_name(self) -> str:
        return self._type_name

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __getattr__(self, key: str) -> Any:
        try:
            return self.__dict__["_values"][key]
        except KeyError:
            raise AttributeError(key) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Record):
            return self._type_name == other._type_name and self._values == other._values
        if isinstance(other, Mapping):
            return self._values == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v!r}" for k, v in self._values.items())
        return f"{self._type_name}({inner})"


def record(name: str, **fields: Any) -> TypeDescriptor:
    """Declare a named record descriptor.

    Each keyword maps a field name to a kind (``"float"``), a Python type
    (``float``) or a ``(kind, default)`` pair. Field order follows keyword order.
    """
    specs: list[FieldSpec] = []
    for field_name, spec in fields.items():
        default = None
        if isinstance(spec, tuple):
            spec, default = spec
        specs.append(FieldSpec(name=field_name, kind=_kind_of(spec), default=default))
    return TypeDescriptor(kind="record", name=name, fields=tuple(specs))


def record_type(cls: type) -> TypeDescriptor:
    """Derive a record descriptor from a dataclass; decoded values are ``cls`` instances."""
    if not dataclasses.is_dataclass(cls) or not isinstance(cls, type):
        raise TypeError(f"record_type expects a dataclass type, got {cls!r}")
    specs: list[FieldSpec] = []
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        default = None
        if f.default is not dataclasses.MISSING:
            default = f.default
        elif f.default_factory is not dataclasses.MISSING:
            default = f.default_factory()
        specs.append(FieldSpec(name=f.name, kind=_kind_of(f.type), default=default))
    return TypeDescriptor(kind="record", name=cls.__name__, fields=tuple(specs), factory=cls)


def as_descriptor(spec: Any) -> TypeDescriptor:
    if isinstance(spec, TypeDescriptor):
        return spec
    if isinstance(spec, type) and dataclasses.is_dataclass(spec):
        return record_type(spec)
    return _PRIMITIVES[_kind_of(spec)]


def _kind_of(spec: Any) -> str:
    if isinstance(spec, str):
        # dataclass annotations are strings under postponed evaluation
        aliases = {"str": "string", "int": "int", "float": "float", "bool": "bool"}
        if spec in PRIMITIVE_KINDS:
            return spec
        if spec in aliases:
            return aliases[spec]
    elif isinstance(spec, type) and spec in _KIND_BY_PY_TYPE:
        return _KIND_BY_PY_TYPE[spec]
    raise TypeError(f"unsupported parameter type: {spec!r}")
