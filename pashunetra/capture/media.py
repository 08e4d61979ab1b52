"""
media.py

Camera and microphone access for the capture station.

- camera frames come from OpenCV (cv2.VideoCapture) and are JPEG-encoded
- microphone audio is buffered from a sounddevice InputStream callback and
  written out as a single WAV container
- uploaded files are accepted as an alternative to live capture

The adapter owns at most one camera handle and one microphone handle. A second
start while a handle is live raises DeviceBusy; every handle is released on
stop, retake, step change or teardown.
"""

import io
import logging
import threading
import time

import cv2
import numpy as np
import soundfile as sf
from PIL import Image

from .. import config
from ..errors import DeviceBusy, DeviceUnavailable, UnsupportedFileType
from .blobs import AudioBlobRef, ImageBlobRef

log = logging.getLogger(__name__)


def _sounddevice_stream(**kwargs):
    # imported lazily: sounddevice needs PortAudio at import time
    import sounddevice as sd
    return sd.InputStream(**kwargs)


def encode_jpeg(frame, quality=config.JPEG_QUALITY):
    ok, buf = cv2.imencode(".jpg", frame, [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)])
    if not ok:
        raise DeviceUnavailable("could not encode camera frame")
    return buf.tobytes()


class VideoStream:
    """A live camera handle. Only the adapter creates these."""

    def __init__(self, capture, on_release):
        self._cap = capture
        self._on_release = on_release
        # the preview feed and a capture may read from different request threads
        self._lock = threading.Lock()
        self.released = False

    def read_frame(self):
        with self._lock:
            if self.released:
                raise DeviceUnavailable("camera stream already released")
            ok, frame = self._cap.read()
        if not ok or frame is None:
            raise DeviceUnavailable("camera returned no frame")
        return frame

    def preview_jpeg(self, quality=70):
        return encode_jpeg(self.read_frame(), quality)

    def release(self):
        with self._lock:
            if self.released:
                return
            self._cap.release()
            self.released = True
        self._on_release(self)


class RecordingHandle:
    """Buffers PCM chunks pushed by the audio callback."""

    def __init__(self, samplerate, channels, clock, on_release):
        self.samplerate = samplerate
        self.channels = channels
        self.stream = None
        self.released = False
        self._clock = clock
        self._on_release = on_release
        self._chunks = []
        self._lock = threading.Lock()
        self._started_at = clock()
        self._stopped_at = None

    def callback(self, indata, frames, time_info, status):
        if status:
            log.debug("audio callback status: %s", status)
        with self._lock:
            self._chunks.append(indata.copy())

    @property
    def elapsed(self):
        """Whole seconds recorded so far; frozen once the handle is released."""
        end = self._stopped_at if self._stopped_at is not None else self._clock()
        return int(end - self._started_at)

    def samples(self):
        with self._lock:
            if not self._chunks:
                return np.zeros((0, self.channels), dtype=np.int16)
            return np.concatenate(self._chunks, axis=0)

    def release(self):
        if self.released:
            return
        self._stopped_at = self._clock()
        try:
            if self.stream is not None:
                self.stream.stop()
                self.stream.close()
        finally:
            self.released = True
            self._on_release(self)


class MediaCaptureAdapter:
    def __init__(self, camera_index=config.CAMERA_INDEX,
                 width=config.PREFERRED_WIDTH, height=config.PREFERRED_HEIGHT,
                 jpeg_quality=config.JPEG_QUALITY,
                 samplerate=config.AUDIO_SAMPLE_RATE, channels=config.AUDIO_CHANNELS,
                 video_factory=None, audio_factory=None, clock=time.monotonic):
        self.camera_index = camera_index
        self.width = width
        self.height = height
        self.jpeg_quality = jpeg_quality
        self.samplerate = samplerate
        self.channels = channels
        self._video_factory = video_factory or cv2.VideoCapture
        self._audio_factory = audio_factory or _sounddevice_stream
        self._clock = clock
        self._video = None
        self._recording = None

    # ---------- camera ----------
    @property
    def video(self):
        return self._video

    def start_video(self):
        if self._video is not None:
            raise DeviceBusy("camera is already in use")
        cap = self._video_factory(self.camera_index)
        if cap is None or not cap.isOpened():
            if cap is not None:
                cap.release()
            raise DeviceUnavailable(f"camera {self.camera_index} could not be opened")
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        self._video = VideoStream(cap, self._video_released)
        log.info("camera %s opened (%dx%d requested)", self.camera_index, self.width, self.height)
        return self._video

    def _video_released(self, stream):
        if self._video is stream:
            self._video = None
        log.info("camera %s released", self.camera_index)

    def capture_frame(self, stream):
        try:
            frame = stream.read_frame()
        finally:
            stream.release()
        data = encode_jpeg(frame, self.jpeg_quality)
        return ImageBlobRef(data=data, mimetype="image/jpeg", source="camera",
                            filename="cattle-image.jpg")

    # ---------- microphone ----------
    @property
    def recording(self):
        return self._recording

    def start_audio(self):
        if self._recording is not None:
            raise DeviceBusy("microphone is already in use")
        handle = RecordingHandle(self.samplerate, self.channels, self._clock, self._audio_released)
        try:
            stream = self._audio_factory(samplerate=self.samplerate, channels=self.channels,
                                         dtype="int16", callback=handle.callback)
        except Exception as e:
            raise DeviceUnavailable(f"microphone could not be opened: {e}") from e
        try:
            stream.start()
        except Exception as e:
            stream.close()
            raise DeviceUnavailable(f"microphone could not be started: {e}") from e
        handle.stream = stream
        self._recording = handle
        log.info("microphone opened at %d Hz", self.samplerate)
        return handle

    def _audio_released(self, handle):
        if self._recording is handle:
            self._recording = None
        log.info("microphone released")

    def stop_audio(self, handle):
        handle.release()
        duration = handle.elapsed
        buf = io.BytesIO()
        sf.write(buf, handle.samples(), handle.samplerate, format="WAV", subtype="PCM_16")
        return AudioBlobRef(data=buf.getvalue(), mimetype="audio/wav", source="microphone",
                            filename="cattle-sound.wav", duration=duration)

    # ---------- uploads ----------
    def upload_file(self, data, mimetype, expected_prefix, filename=None):
        if not mimetype or not mimetype.startswith(expected_prefix):
            raise UnsupportedFileType(f"expected {expected_prefix}* but got {mimetype or 'unknown type'}")
        if expected_prefix.startswith("image"):
            try:
                Image.open(io.BytesIO(data)).verify()
            except (OSError, SyntaxError) as e:
                raise UnsupportedFileType(f"{filename or 'upload'} is not a readable image") from e
            return ImageBlobRef(data=data, mimetype=mimetype, source="upload",
                                filename=filename or "upload.jpg")
        if expected_prefix.startswith("audio"):
            duration = 0
            try:
                duration = int(sf.info(io.BytesIO(data)).duration)
            except RuntimeError as e:
                log.warning("could not read duration of %s: %s", filename, e)
            return AudioBlobRef(data=data, mimetype=mimetype, source="upload",
                                filename=filename or "upload.wav", duration=duration)
        raise UnsupportedFileType(f"uploads of {expected_prefix}* are not supported")

    def release_all(self):
        if self._video is not None:
            self._video.release()
        if self._recording is not None:
            self._recording.release()
