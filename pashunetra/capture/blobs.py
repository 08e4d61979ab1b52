"""Handles to locally captured binaries and their advisory quality reports."""

import datetime
import itertools
from dataclasses import dataclass, field
from typing import Optional, Tuple

_ids = itertools.count(1)


def _next_id(prefix):
    return f"{prefix}-{next(_ids)}"


def _utcnow():
    return datetime.datetime.now(datetime.timezone.utc)


@dataclass(frozen=True)
class QualityReport:
    score: int
    issues: Tuple[str, ...] = ()


@dataclass(eq=False)
class BlobRef:
    data: bytes
    mimetype: str
    source: str
    filename: str
    ref_id: str = ""
    quality: Optional[QualityReport] = None
    signature: Optional[str] = None
    created_at: datetime.datetime = field(default_factory=_utcnow)

    prefix = "blob"

    def __post_init__(self):
        if not self.ref_id:
            self.ref_id = _next_id(self.prefix)

    @property
    def score(self):
        # unset until analysis resolves
        return self.quality.score if self.quality is not None else 0

    @property
    def issues(self):
        return self.quality.issues if self.quality is not None else ()

    @property
    def analyzed(self):
        return self.quality is not None

    def set_quality(self, report):
        self.quality = report

    def to_dict(self):
        return {
            "ref_id": self.ref_id,
            "mimetype": self.mimetype,
            "source": self.source,
            "filename": self.filename,
            "size": len(self.data),
            "analyzed": self.analyzed,
            "score": self.score,
            "issues": list(self.issues),
        }


@dataclass(eq=False)
class ImageBlobRef(BlobRef):
    prefix = "img"


@dataclass(eq=False)
class AudioBlobRef(BlobRef):
    duration: int = 0

    prefix = "aud"

    def to_dict(self):
        d = super().to_dict()
        d["duration"] = self.duration
        return d
