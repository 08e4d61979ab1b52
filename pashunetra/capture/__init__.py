"""Device capture, uploaded files and advisory quality analysis."""

from .blobs import AudioBlobRef, ImageBlobRef, QualityReport
from .media import MediaCaptureAdapter, RecordingHandle, VideoStream
from .quality import QualityAnalyzer, analyze_audio_quality, analyze_image_quality

__all__ = [
    "AudioBlobRef",
    "ImageBlobRef",
    "QualityReport",
    "MediaCaptureAdapter",
    "RecordingHandle",
    "VideoStream",
    "QualityAnalyzer",
    "analyze_audio_quality",
    "analyze_image_quality",
]
