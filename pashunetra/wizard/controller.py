"""
controller.py

Five-step identification wizard:

    IMAGE -> CULTURAL -> AUDIO -> BIOMETRIC -> RESULTS

- IMAGE -> CULTURAL fires AUTO_ADVANCE_DELAY after the image is confirmed
- CULTURAL and AUDIO are left with next() (writes what the step holds now)
  or skip() (clears that evidence)
- BIOMETRIC -> RESULTS needs all three biometric close-ups and runs the
  result aggregator
- back() goes one step back from CULTURAL/AUDIO/BIOMETRIC and keeps every
  captured field
- RESULTS is terminal; new_identification() starts over at IMAGE
"""

import logging
import threading
import uuid
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

from .. import config
from ..capture.quality import QualityAnalyzer
from ..errors import IncompleteBiometrics, InvalidTransition
from .steps import AudioStep, BiometricStep, CulturalStep, ImageStep
from .submission import StepDataAccumulator

log = logging.getLogger(__name__)


class Step(IntEnum):
    IMAGE = 0
    CULTURAL = 1
    AUDIO = 2
    BIOMETRIC = 3
    RESULTS = 4


@dataclass
class CaptureSession:
    accumulator: StepDataAccumulator = field(default_factory=StepDataAccumulator)
    current_step: Step = Step.IMAGE
    results: Optional[object] = None
    is_processing: bool = False
    progress: int = 0
    stage: Optional[str] = None
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])

    @property
    def submission(self):
        return self.accumulator.submission


def timer_schedule(delay, fn):
    t = threading.Timer(delay, fn)
    t.daemon = True
    t.start()
    return t


class WizardController:
    def __init__(self, media, aggregator, analyzer=None,
                 advance_delay=config.AUTO_ADVANCE_DELAY, schedule=timer_schedule,
                 quality_threshold=config.QUALITY_THRESHOLD):
        self.media = media
        self.aggregator = aggregator
        self.analyzer = analyzer or QualityAnalyzer()
        self.advance_delay = advance_delay
        self.quality_threshold = quality_threshold
        self._schedule = schedule
        self._listeners = []
        self._lock = threading.RLock()
        self._start_session()

    def _start_session(self):
        self.session = CaptureSession()
        self.image = ImageStep(self.media, self.analyzer, self.quality_threshold)
        self.cultural = CulturalStep()
        self.audio = AudioStep(self.media, self.analyzer)
        self.biometric = BiometricStep(self.media, self.analyzer)
        log.info("identification session %s started", self.session.session_id)

    @property
    def step(self):
        return self.session.current_step

    def step_view(self, step=None):
        step = self.step if step is None else step
        return {
            Step.IMAGE: self.image,
            Step.CULTURAL: self.cultural,
            Step.AUDIO: self.audio,
            Step.BIOMETRIC: self.biometric,
        }.get(step)

    def active(self, step):
        """The view for `step`, provided the wizard is currently on it."""
        self._require(f"{step.name.lower()} action", step)
        return self.step_view(step)

    def start_camera(self):
        with self._lock:
            self._require("start camera", Step.IMAGE, Step.BIOMETRIC)
            return self.step_view().start_camera()

    def stop_camera(self):
        with self._lock:
            if self.step in (Step.IMAGE, Step.BIOMETRIC):
                self.step_view().release()

    def on_step_change(self, callback):
        self._listeners.append(callback)
        return lambda: self._listeners.remove(callback)

    # ---------- transitions ----------
    def _require(self, action, *allowed):
        if self.step not in allowed:
            raise InvalidTransition(f"{action} is not allowed at {self.step.name}")

    def _move(self, target):
        old = self.step
        if abs(int(target) - int(old)) != 1:
            raise InvalidTransition(f"cannot jump from {old.name} to {target.name}")
        view = self.step_view(old)
        if view is not None:
            view.release()
        self.session.current_step = target
        log.info("session %s: %s -> %s", self.session.session_id, old.name, target.name)
        for cb in list(self._listeners):
            cb(old, target)

    def confirm_image(self, ref_id=None):
        with self._lock:
            self._require("confirm image", Step.IMAGE)
            ref = self.image.confirm(ref_id)
            self.session.accumulator.set("image", ref)
            session = self.session
            self._schedule(self.advance_delay, lambda: self._auto_advance(session, ref))
            return ref

    def _auto_advance(self, session, ref):
        with self._lock:
            if session is not self.session or self.step != Step.IMAGE or session.submission.image is not ref:
                log.debug("auto-advance for %s dropped", ref.ref_id)
                return
            self._move(Step.CULTURAL)

    def retake_image(self):
        """Drop the current capture and reopen the camera. A previously
        confirmed image no longer counts until a new one is confirmed."""
        with self._lock:
            self._require("retake image", Step.IMAGE)
            self.session.accumulator.set("image", None)
            return self.image.retake()

    def next(self):
        with self._lock:
            self._require("next", Step.IMAGE, Step.CULTURAL, Step.AUDIO)
            acc = self.session.accumulator
            if self.step == Step.IMAGE:
                image = acc.submission.image
                if image is None or image is not self.image.candidate:
                    raise InvalidTransition("confirm an image first")
            elif self.step == Step.CULTURAL:
                # what the step holds now replaces anything written earlier
                acc.set("cultural_markers", frozenset(self.cultural.selected) or None)
            elif self.step == Step.AUDIO:
                if self.audio.is_recording:
                    raise InvalidTransition("stop the recording first")
                acc.set("audio", self.audio.recording)
            self._move(Step(self.step + 1))

    def skip(self):
        with self._lock:
            self._require("skip", Step.CULTURAL, Step.AUDIO)
            field = "cultural_markers" if self.step == Step.CULTURAL else "audio"
            self.session.accumulator.set(field, None)
            self._move(Step(self.step + 1))

    def back(self):
        with self._lock:
            self._require("back", Step.CULTURAL, Step.AUDIO, Step.BIOMETRIC)
            self._move(Step(self.step - 1))

    def identify(self, on_progress=None):
        with self._lock:
            self._require("identify", Step.BIOMETRIC)
            if not self.biometric.complete:
                raise IncompleteBiometrics(f"capture {self.biometric.next_part} first")
            session = self.session
            session.accumulator.set("biometrics", self.biometric.to_biometrics())
            self._move(Step.RESULTS)
            session.is_processing = True
            session.progress = 0
            submission = session.submission

        def progress(pct, stage):
            session.progress = pct
            session.stage = stage
            if on_progress is not None:
                on_progress(pct, stage)

        # runs outside the lock so progress stays readable meanwhile
        try:
            result = self.aggregator.run(submission, on_progress=progress)
        except Exception:
            with self._lock:
                if session is self.session and self.step == Step.RESULTS:
                    log.warning("identification failed; session %s back at BIOMETRIC", session.session_id)
                    self._move(Step.BIOMETRIC)
            raise
        finally:
            session.is_processing = False
        session.results = result
        return result

    def new_identification(self):
        with self._lock:
            self.media.release_all()
            old = self.session.session_id
            self._start_session()
            log.info("session %s discarded", old)
            return self.session

    def close(self):
        with self._lock:
            self.media.release_all()

    # ---------- view state ----------
    def state(self):
        s = self.session
        sub = s.submission
        return {
            "session_id": s.session_id,
            "step": self.step.name.lower(),
            "step_index": int(self.step),
            "is_processing": s.is_processing,
            "progress": s.progress,
            "stage": s.stage,
            "image": {
                "camera_on": self.image.stream is not None,
                "candidate": self.image.candidate.to_dict() if self.image.candidate else None,
                "can_confirm": self.image.can_confirm(),
                "threshold": self.quality_threshold,
            },
            "cultural": {"selected": self.cultural.selected},
            "audio": {
                "recording": self.audio.is_recording,
                "elapsed": self.audio.elapsed,
                "clip": self.audio.recording.to_dict() if self.audio.recording else None,
            },
            "biometric": {
                "next_part": self.biometric.next_part,
                "captured": {p: r.to_dict() for p, r in self.biometric.captured.items()},
                "notes": self.biometric.notes,
            },
            "submission": {
                "image": sub.image.ref_id if sub.image else None,
                "audio": sub.audio.ref_id if sub.audio else None,
                "cultural_markers": sorted(sub.cultural_markers) if sub.cultural_markers else [],
                "biometrics": sorted(sub.biometrics.parts()) if sub.biometrics else [],
            },
            "results": s.results.to_dict() if s.results is not None else None,
        }
