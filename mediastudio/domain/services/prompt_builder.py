"""Natural-language instructions sent to the image and video models."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from mediastudio.config import DEFAULT_EDIT_MODEL
from mediastudio.domain.errors import ValidationError

ADJUSTMENT_MIN = -100
ADJUSTMENT_MAX = 100

MIN_VIDEO_DURATION = 1
MAX_VIDEO_DURATION = 180

MIN_IMAGE_COUNT = 1
MAX_IMAGE_COUNT = 4


@dataclass(frozen=True)
class PhotoModel:
    id: str
    name: str


# Both entries map to the same backend model id.
PHOTO_MODELS: tuple[PhotoModel, ...] = (
    PhotoModel(id=DEFAULT_EDIT_MODEL, name="Creative Edit"),
    PhotoModel(id=DEFAULT_EDIT_MODEL, name="Subtle Adjust (Concept)"),
)


class AspectRatio(str, Enum):
    SQUARE = "1:1"
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"
    CLASSIC = "4:3"
    CLASSIC_PORTRAIT = "3:4"


class VideoQuality(str, Enum):
    STANDARD = "Standard"
    HIGH = "High"


class VideoStyle(str, Enum):
    CINEMATIC = "Cinematic"
    REALISTIC = "Realistic"
    ANIMATED = "Animated"
    TIME_LAPSE = "Time-lapse"
    SURREAL = "Surreal"
    DREAMLIKE = "Dreamlike"


class VideoEffect(str, Enum):
    NONE = "None"
    SLOW_MOTION = "Slow-motion"
    FAST_FORWARD = "Fast-forward"
    CINEMATIC_COLOR_GRADE = "Cinematic Color Grade"
    BLACK_AND_WHITE = "Black and White"
    VINTAGE_FILM = "Vintage Film"


# {core} is "a N-second video of: ...", {tail} is the style/quality phrase
_EFFECT_TEMPLATES: dict[VideoEffect, str] = {
    VideoEffect.NONE: "{core}, {tail}.",
    VideoEffect.SLOW_MOTION: "A slow-motion version of {core}, {tail}.",
    VideoEffect.FAST_FORWARD: "A fast-forward version of {core}, {tail}.",
    VideoEffect.CINEMATIC_COLOR_GRADE: "{core} with a cinematic color grade, {tail}.",
    VideoEffect.BLACK_AND_WHITE: "A black and white version of {core}, {tail}.",
    VideoEffect.VINTAGE_FILM: "{core} with a vintage film effect, {tail}.",
}


@dataclass(frozen=True)
class Adjustments:
    brightness: int = 0
    contrast: int = 0
    saturation: int = 0

    def __post_init__(self) -> None:
        for name, value in self.items():
            if not ADJUSTMENT_MIN <= value <= ADJUSTMENT_MAX:
                raise ValidationError(
                    f"{name} must be between {ADJUSTMENT_MIN} and {ADJUSTMENT_MAX}, got {value}"
                )

    def items(self) -> list[tuple[str, int]]:
        return [
            ("brightness", self.brightness),
            ("contrast", self.contrast),
            ("saturation", self.saturation),
        ]

    @property
    def is_neutral(self) -> bool:
        return all(value == 0 for _, value in self.items())


def build_adjustment_clause(adjustments: Adjustments) -> str:
    """``"brightness: +20%, saturation: -10%"``; zero values are left out."""
    parts = [
        f"{name}: {'+' if value > 0 else ''}{value}%"
        for name, value in adjustments.items()
        if value != 0
    ]
    return ", ".join(parts)


def build_edit_instruction(prompt: str, adjustments: Adjustments | None = None) -> str:
    instruction = f"{prompt.strip()}."
    clause = build_adjustment_clause(adjustments or Adjustments())
    if clause:
        instruction += f" Apply the following adjustments: {clause}."
    return instruction


def build_video_instruction(
    prompt: str,
    duration: int = 5,
    quality: VideoQuality = VideoQuality.HIGH,
    style: VideoStyle = VideoStyle.CINEMATIC,
    effect: VideoEffect | None = None,
) -> str:
    core = f"a {duration}-second video of: {prompt.strip()}"
    tail = f"in a {VideoStyle(style).value.lower()} style and {VideoQuality(quality).value.lower()} quality"
    template = _EFFECT_TEMPLATES[VideoEffect(effect or VideoEffect.NONE)]
    return template.format(core=core, tail=tail)
