"""
quality.py

Advisory quality scoring for captured images and audio. Analysis runs on a
small worker pool after capture; until it resolves a ref reads score 0.
"""

import io
import logging
from concurrent.futures import ThreadPoolExecutor

import cv2
import numpy as np
import soundfile as sf

from .. import config
from .blobs import AudioBlobRef, QualityReport

log = logging.getLogger(__name__)


def _clamp01(x):
    return max(0.0, min(1.0, float(x)))


def analyze_image_quality(data, sharpness_ref=config.SHARPNESS_REFERENCE, min_pixels=config.MIN_PIXELS):
    """Score 0-100 from sharpness (variance of Laplacian), exposure and resolution."""
    img = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
    if img is None:
        return QualityReport(0, ("Image could not be decoded",))
    gray = cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)

    sharp = _clamp01(cv2.Laplacian(gray, cv2.CV_64F).var() / sharpness_ref)
    brightness = float(gray.mean())
    exposure = _clamp01(1.0 - abs(brightness - 128.0) / 128.0)
    h, w = gray.shape
    resolution = _clamp01((h * w) / float(min_pixels))

    score = int(round(100 * (0.5 * sharp + 0.3 * exposure + 0.2 * resolution)))
    issues = []
    if sharp < 0.8:
        issues.append("Image could be clearer")
    if brightness < 60 or brightness > 200:
        issues.append("Better lighting recommended")
    if resolution < 1.0:
        issues.append("Ensure full animal is visible")
    return QualityReport(score, tuple(issues))


def analyze_audio_quality(data, min_seconds=config.AUDIO_MIN_SECONDS, max_seconds=config.AUDIO_MAX_SECONDS):
    """Score 0-100 from level (RMS dBFS), clipping and duration."""
    try:
        samples, samplerate = sf.read(io.BytesIO(data), dtype="float32", always_2d=True)
    except RuntimeError as e:
        log.warning("audio analysis failed: %s", e)
        return QualityReport(0, ("Audio could not be decoded",))
    if samples.size == 0:
        return QualityReport(0, ("Recording is empty",))

    mono = samples.mean(axis=1)
    rms = float(np.sqrt(np.mean(mono ** 2)))
    dbfs = 20 * np.log10(rms + 1e-9)
    clipped = float(np.mean(np.abs(mono) >= 0.99))
    duration = len(mono) / float(samplerate)

    # -20 dBFS and louder is a usable level, -60 dBFS is silence
    level = _clamp01((dbfs + 60.0) / 40.0)
    clipping = _clamp01(1.0 - clipped * 20)
    length = _clamp01(duration / min_seconds)

    score = int(round(100 * (0.4 * level + 0.3 * clipping + 0.3 * length)))
    issues = []
    if level < 0.5:
        issues.append("Keep the microphone close to the animal")
    if clipped > 0.01:
        issues.append("Recording is distorted")
    if duration < min_seconds:
        issues.append(f"Record at least {min_seconds} seconds")
    elif duration > max_seconds * 3:
        issues.append(f"{min_seconds}-{max_seconds} seconds of clear sound is sufficient")
    return QualityReport(score, tuple(issues))


class QualityAnalyzer:
    """Runs analysis off the caller thread and stores each report on the ref
    it was computed for, so a late report can never land on a newer capture."""

    def __init__(self, executor=None, image_fn=analyze_image_quality, audio_fn=analyze_audio_quality):
        self._executor = executor or ThreadPoolExecutor(max_workers=config.QUALITY_WORKERS,
                                                        thread_name_prefix="quality")
        self._image_fn = image_fn
        self._audio_fn = audio_fn

    def analyze(self, ref):
        fn = self._audio_fn if isinstance(ref, AudioBlobRef) else self._image_fn
        report = fn(ref.data)
        ref.set_quality(report)
        log.info("%s quality %d %s", ref.ref_id, report.score, list(report.issues))
        return report

    def submit(self, ref):
        return self._executor.submit(self.analyze, ref)

    def shutdown(self):
        self._executor.shutdown(wait=False)
