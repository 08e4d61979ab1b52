"""Shared fixtures: fake camera and microphone, stub quality analysis,
immediate scheduling and a no-op sleep so nothing waits on real time."""

import io
from concurrent.futures import Future

import cv2
import numpy as np
import pytest
import soundfile as sf

from pashunetra.capture import MediaCaptureAdapter, QualityReport
from pashunetra.classify import PlaceholderClassifier, ResultAggregator
from pashunetra.wizard import WizardController


def noise_frame(seed=0, h=480, w=640):
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(h, w, 3), dtype=np.uint8)


def jpeg_bytes(frame):
    ok, buf = cv2.imencode(".jpg", frame)
    assert ok
    return buf.tobytes()


def wav_bytes(seconds=6.0, amplitude=0.5, samplerate=16000):
    t = np.arange(int(seconds * samplerate)) / samplerate
    tone = (amplitude * np.sin(2 * np.pi * 180 * t)).astype(np.float32)
    buf = io.BytesIO()
    sf.write(buf, tone, samplerate, format="WAV", subtype="PCM_16")
    return buf.getvalue()


class FakeCapture:
    def __init__(self, frame, opened=True):
        self.frame = frame
        self.opened = opened
        self.released = False
        self.props = {}

    def isOpened(self):
        return self.opened

    def set(self, prop, value):
        self.props[prop] = value
        return True

    def read(self):
        if self.released:
            return False, None
        return True, self.frame.copy()

    def release(self):
        self.released = True


class FakeCamera:
    """Stands in for cv2.VideoCapture; remembers every handle it opened."""

    def __init__(self, opened=True):
        self.opened = opened
        self.captures = []
        self.seed = 0

    def __call__(self, index):
        self.seed += 1
        cap = FakeCapture(noise_frame(self.seed), opened=self.opened)
        self.captures.append(cap)
        return cap

    @property
    def live(self):
        return [c for c in self.captures if not c.released]


class FakeInputStream:
    def __init__(self, samplerate, channels, dtype, callback, fail_start=False):
        self.samplerate = samplerate
        self.channels = channels
        self.callback = callback
        self.started = False
        self.closed = False
        self.fail_start = fail_start

    def start(self):
        if self.fail_start:
            raise OSError("PortAudio: device unavailable")
        self.started = True
        chunk = (np.ones((self.samplerate // 4, self.channels)) * 8000).astype(np.int16)
        for _ in range(4):
            self.callback(chunk, len(chunk), None, None)

    def stop(self):
        self.started = False

    def close(self):
        self.closed = True


class FakeMicrophone:
    def __init__(self, fail=False, fail_start=False):
        self.fail = fail
        self.fail_start = fail_start
        self.streams = []

    def __call__(self, **kwargs):
        if self.fail:
            raise OSError("PortAudio: permission denied")
        s = FakeInputStream(fail_start=self.fail_start, **kwargs)
        self.streams.append(s)
        return s


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class StubAnalyzer:
    """Resolves every analysis immediately with a fixed score."""

    def __init__(self, score=80):
        self.score = score
        self.submitted = []

    def submit(self, ref):
        report = QualityReport(self.score, ())
        ref.set_quality(report)
        self.submitted.append(ref)
        f = Future()
        f.set_result(report)
        return f


@pytest.fixture
def camera():
    return FakeCamera()


@pytest.fixture
def microphone():
    return FakeMicrophone()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def media(camera, microphone, clock):
    return MediaCaptureAdapter(video_factory=camera, audio_factory=microphone, clock=clock)


@pytest.fixture
def analyzer():
    return StubAnalyzer(80)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def aggregator(sleeps):
    return ResultAggregator(PlaceholderClassifier(), sleep=sleeps.append)


@pytest.fixture
def controller(media, aggregator, analyzer):
    return WizardController(media, aggregator, analyzer, schedule=lambda delay, fn: fn())


@pytest.fixture
def image_data():
    return jpeg_bytes(noise_frame(42))


@pytest.fixture
def biometric_images():
    return {part: jpeg_bytes(noise_frame(seed)) for part, seed in (("ear", 7), ("horn", 8), ("muzzle", 9))}
