"""Partial submission state accumulated across the wizard steps."""

from dataclasses import dataclass, fields, replace
from typing import FrozenSet, Optional

from ..capture.blobs import AudioBlobRef, ImageBlobRef

BIOMETRIC_PARTS = ("ear_pattern", "horn_geometry", "muzzle_pattern")


@dataclass(frozen=True)
class Biometrics:
    ear_pattern: Optional[ImageBlobRef] = None
    horn_geometry: Optional[ImageBlobRef] = None
    muzzle_pattern: Optional[ImageBlobRef] = None

    @property
    def complete(self):
        return all(getattr(self, p) is not None for p in BIOMETRIC_PARTS)

    def parts(self):
        return {p: getattr(self, p) for p in BIOMETRIC_PARTS if getattr(self, p) is not None}


@dataclass(frozen=True)
class Submission:
    image: Optional[ImageBlobRef] = None
    audio: Optional[AudioBlobRef] = None
    cultural_markers: Optional[FrozenSet[str]] = None
    biometrics: Optional[Biometrics] = None

    @property
    def has_complete_biometrics(self):
        return self.biometrics is not None and self.biometrics.complete


_TYPES = {
    "image": ImageBlobRef,
    "audio": AudioBlobRef,
    "cultural_markers": frozenset,
    "biometrics": Biometrics,
}


class StepDataAccumulator:
    """Holds the Submission for one session. `set` replaces exactly one field;
    calling it again for the same field is last-write-wins, and None clears it."""

    def __init__(self):
        self._submission = Submission()

    @property
    def submission(self):
        return self._submission

    def set(self, field, value):
        if field not in {f.name for f in fields(Submission)}:
            raise ValueError(f"unknown submission field: {field}")
        if field == "cultural_markers" and isinstance(value, (set, list, tuple)):
            value = frozenset(value)
        if value is not None and not isinstance(value, _TYPES[field]):
            raise TypeError(f"{field} expects {_TYPES[field].__name__}, got {type(value).__name__}")
        self._submission = replace(self._submission, **{field: value})
        return self._submission
