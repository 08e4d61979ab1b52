"""
steps.py

Step-local state for the four capture steps of the wizard. Each step owns the
device handles it opened and gives them back in `release()`; the controller
calls that whenever the step is left.
"""

import logging

from .. import config
from ..capture.quality import QualityAnalyzer
from ..classify import biometrics
from ..errors import InvalidTransition, LowQualityCapture
from . import markers
from .submission import BIOMETRIC_PARTS, Biometrics

log = logging.getLogger(__name__)

PART_ALIASES = {"ear": "ear_pattern", "horn": "horn_geometry", "muzzle": "muzzle_pattern"}


def resolve_part(part):
    part = PART_ALIASES.get(part, part)
    if part not in BIOMETRIC_PARTS:
        raise ValueError(f"unknown biometric part: {part}")
    return part


class ImageStep:
    def __init__(self, media, analyzer=None, threshold=config.QUALITY_THRESHOLD):
        self.media = media
        self.analyzer = analyzer or QualityAnalyzer()
        self.threshold = threshold
        self.stream = None
        self.candidate = None
        self.pending = None

    def start_camera(self):
        if self.stream is None:
            self.stream = self.media.start_video()
        return self.stream

    def capture(self):
        if self.stream is None:
            raise InvalidTransition("camera is not started")
        stream, self.stream = self.stream, None
        return self._take(self.media.capture_frame(stream))

    def upload(self, data, mimetype, filename=None):
        ref = self.media.upload_file(data, mimetype, "image/", filename)
        self.release()
        return self._take(ref)

    def _take(self, ref):
        self.candidate = ref
        self.pending = self.analyzer.submit(ref)
        return ref

    def can_confirm(self):
        return self.candidate is not None and self.candidate.score >= self.threshold

    def confirm(self, ref_id=None):
        ref = self.candidate
        if ref is None:
            raise InvalidTransition("no image captured")
        if ref_id is not None and ref_id != ref.ref_id:
            raise LowQualityCapture(f"{ref_id} was retaken; confirm the current capture")
        if ref.score < self.threshold:
            raise LowQualityCapture(f"image quality {ref.score} is below {self.threshold}")
        return ref

    def retake(self):
        self.candidate = None
        self.pending = None
        return self.start_camera()

    def release(self):
        if self.stream is not None:
            self.stream.release()
            self.stream = None


class CulturalStep:
    def __init__(self):
        self._selected = set()

    def toggle(self, marker_id):
        if not markers.is_marker(marker_id):
            raise ValueError(f"unknown cultural marker: {marker_id}")
        self._selected ^= {marker_id}
        return self.selected

    @property
    def selected(self):
        return markers.in_catalog_order(self._selected)

    def release(self):
        pass


class AudioStep:
    def __init__(self, media, analyzer=None):
        self.media = media
        self.analyzer = analyzer or QualityAnalyzer()
        self.handle = None
        self.recording = None
        self.pending = None

    @property
    def is_recording(self):
        return self.handle is not None

    @property
    def elapsed(self):
        if self.handle is not None:
            return self.handle.elapsed
        return self.recording.duration if self.recording is not None else 0

    def start_recording(self):
        if self.handle is not None:
            return self.handle
        if self.recording is not None:
            raise InvalidTransition("retake before recording again")
        self.handle = self.media.start_audio()
        return self.handle

    def stop_recording(self):
        if self.handle is None:
            raise InvalidTransition("not recording")
        handle, self.handle = self.handle, None
        return self._take(self.media.stop_audio(handle))

    def upload(self, data, mimetype, filename=None):
        ref = self.media.upload_file(data, mimetype, "audio/", filename)
        self.release()
        return self._take(ref)

    def _take(self, ref):
        self.recording = ref
        self.pending = self.analyzer.submit(ref)
        return ref

    def retake(self):
        self.release()
        self.recording = None
        self.pending = None

    def release(self):
        # an unfinished recording is discarded
        if self.handle is not None:
            self.handle.release()
            self.handle = None


class BiometricStep:
    """Ear, horn and muzzle close-ups, filled strictly in that order."""

    def __init__(self, media, analyzer=None, duplicate_distance=config.BIOMETRIC_DUPLICATE_DISTANCE):
        self.media = media
        self.analyzer = analyzer or QualityAnalyzer()
        self.duplicate_distance = duplicate_distance
        self.stream = None
        self.captured = {}
        self.notes = {}

    @property
    def next_part(self):
        for part in BIOMETRIC_PARTS:
            if part not in self.captured:
                return part
        return None

    @property
    def complete(self):
        return self.next_part is None

    def _expect(self, part):
        part = resolve_part(part or self.next_part or "")
        if part != self.next_part:
            raise InvalidTransition(f"capture {self.next_part or 'nothing'} next, not {part}")
        return part

    def start_camera(self):
        if self.stream is None:
            self.stream = self.media.start_video()
        return self.stream

    def capture(self, part=None):
        part = self._expect(part)
        if self.stream is None:
            raise InvalidTransition("camera is not started")
        stream, self.stream = self.stream, None
        return self._add(part, self.media.capture_frame(stream))

    def upload(self, part, data, mimetype, filename=None):
        part = self._expect(part)
        ref = self.media.upload_file(data, mimetype, "image/", filename)
        self.release()
        return self._add(part, ref)

    def _add(self, part, ref):
        ref.signature = biometrics.signature(ref.data)
        others = {p: r.signature for p, r in self.captured.items()}
        dup = biometrics.find_duplicate(ref.signature, others, self.duplicate_distance)
        self.notes[part] = [f"Image matches the {dup} capture"] if dup else []
        self.captured[part] = ref
        self.analyzer.submit(ref)
        log.info("biometric %s captured (%s)", part, ref.ref_id)
        return ref

    def clear(self, part):
        part = resolve_part(part)
        self.captured.pop(part, None)
        self.notes.pop(part, None)

    def to_biometrics(self):
        return Biometrics(**self.captured)

    def release(self):
        if self.stream is not None:
            self.stream.release()
            self.stream = None
