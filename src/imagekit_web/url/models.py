"""Typed request models for URL building.

A transformation chain is a tuple of TransformationStep values. Each step is
an ordered list of (name, value) pairs; values are restricted to plain scalars,
integer lists and nested Overlay layers, which carry their own chain.
"""

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from imagekit_web.errors import InvalidInputError, UnsupportedTransformationError

ABSOLUTE_URL_PREFIXES = ("http://", "https://")


class TransformationPosition(str, Enum):
    """Where the serialized transformation string goes in the URL."""

    QUERY = "query"
    PATH = "path"


class OverlayPosition(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    x: int | str | None = None
    y: int | str | None = None
    focus: str | None = None


class OverlayTiming(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    start: int | float | str | None = None
    end: int | float | str | None = None
    duration: int | float | str | None = None


class Overlay(BaseModel):
    """A text, image, video, subtitle or solid color layer placed on the asset."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["text", "image", "video", "subtitle", "solid_color"]
    text: str | None = None
    input: str | None = None
    color: str | None = None
    encoding: Literal["auto", "plain", "base64"] = "auto"
    position: OverlayPosition = OverlayPosition()
    timing: OverlayTiming = OverlayTiming()
    transformation: tuple["TransformationStep", ...] = ()

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value):
        if value == "solidColor":
            return "solid_color"
        return value

    @field_validator("transformation", mode="before")
    @classmethod
    def _coerce_transformation(cls, value):
        return coerce_steps(value)


StepValue = bool | int | float | str | tuple[int, ...] | Overlay


class TransformationStep(BaseModel):
    """One stage of a transformation chain."""

    model_config = ConfigDict(frozen=True)

    params: tuple[tuple[str, StepValue], ...] = ()

    @classmethod
    def from_mapping(cls, mapping: Mapping) -> "TransformationStep":
        """Build a step from a plain dict.

        Pairs are sorted by parameter name so equal dicts always serialize to
        the same string. ``None`` values are dropped.
        """
        pairs = []
        for name in sorted(mapping, key=str):
            value = mapping[name]
            if value is None:
                continue
            pairs.append((str(name), _coerce_value(str(name), value)))
        return cls(params=tuple(pairs))

    @classmethod
    def of(cls, *pairs: tuple[str, StepValue]) -> "TransformationStep":
        """Build a step whose pairs keep the given order."""
        return cls(params=tuple(pairs))


Overlay.model_rebuild()


def _coerce_value(name: str, value) -> StepValue:
    if isinstance(value, (bool, int, float, str, Overlay)):
        return value
    if name == "overlay" and isinstance(value, Mapping):
        try:
            return Overlay.model_validate(value)
        except ValidationError as exc:
            raise InvalidInputError(f"Invalid overlay: {exc}") from exc
    if isinstance(value, (list, tuple)) and all(
        isinstance(v, int) and not isinstance(v, bool) for v in value
    ):
        return tuple(value)
    raise UnsupportedTransformationError(
        f"Unsupported value for transformation '{name}': {value!r}"
    )


def coerce_steps(value) -> tuple[TransformationStep, ...]:
    """Turn a list of dicts (or steps) into a tuple of TransformationStep."""
    if value is None:
        return ()
    if isinstance(value, (TransformationStep, Mapping)):
        value = [value]
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise InvalidInputError("transformation must be a list of mappings")
    steps = []
    for item in value:
        if isinstance(item, TransformationStep):
            steps.append(item)
        elif isinstance(item, Mapping):
            steps.append(TransformationStep.from_mapping(item))
        else:
            raise InvalidInputError(f"Invalid transformation step: {item!r}")
    return tuple(steps)


def is_absolute_url(path: str | None) -> bool:
    return bool(path) and path.startswith(ABSOLUTE_URL_PREFIXES)


class SrcOptions(BaseModel):
    """Everything needed to build one asset URL."""

    model_config = ConfigDict(frozen=True)

    path: str | None = None
    url_endpoint: str | None = None
    transformation: tuple[TransformationStep, ...] = ()
    position: TransformationPosition = TransformationPosition.QUERY
    query_parameters: dict[str, str] = {}
    signed: bool = False
    expires_in: int | None = None

    @field_validator("transformation", mode="before")
    @classmethod
    def _coerce_transformation(cls, value):
        return coerce_steps(value)

    @field_validator("position", mode="before")
    @classmethod
    def _coerce_position(cls, value):
        if value is None:
            return TransformationPosition.QUERY
        if isinstance(value, str):
            return value.lower()
        return value

    @field_validator("query_parameters", mode="before")
    @classmethod
    def _stringify_query(cls, value):
        if value is None:
            return {}
        return {str(k): str(v) for k, v in value.items()}

    @property
    def is_absolute(self) -> bool:
        return is_absolute_url(self.path)

    @property
    def effective_position(self) -> TransformationPosition:
        """Absolute URLs always carry transformations in the query string."""
        if self.is_absolute:
            return TransformationPosition.QUERY
        return self.position

    @property
    def needs_signature(self) -> bool:
        return self.signed or bool(self.expires_in and self.expires_in > 0)

    @classmethod
    def create(cls, **fields) -> "SrcOptions":
        """Validate fields, reporting bad input as InvalidInputError."""
        try:
            return cls(**fields)
        except ValidationError as exc:
            raise InvalidInputError(str(exc)) from exc
