from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DispatchError(Exception):
    code: str
    message: str
    command: str | None = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class InvalidNameError(DispatchError):
    pass


class EmptyMessageError(DispatchError):
    pass


class MalformedJsonError(DispatchError):
    pass


class EnvelopeParseError(DispatchError):
    pass


class MissingCommandNameError(DispatchError):
    pass


class UnknownCommandError(DispatchError):
    pass


class UnsupportedArityError(DispatchError):
    pass


@dataclass(frozen=True)
class MissingArgumentError(DispatchError):
    slot: str = ""


@dataclass(frozen=True)
class ArgumentDecodeError(DispatchError):
    slot: str = ""
    target_type: str = ""
    raw_payload: str = ""
    cause: DecodeError | None = None


@dataclass(frozen=True)
class HandlerExecutionError(DispatchError):
    original: BaseException | None = None


@dataclass(frozen=True)
class DecodeError(Exception):
    code: str
    message: str
    target_type: str
    raw_payload: str

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class NumberFormatError(DecodeError):
    pass


class BoolFormatError(DecodeError):
    pass


class StructureParseError(DecodeError):
    pass


@dataclass(frozen=True)
class SchemaInvalid(Exception):
    code: str
    message: str

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class ConfigInvalid(SchemaInvalid):
    pass


class DuplicateRegistrationWarning(UserWarning):
    pass
