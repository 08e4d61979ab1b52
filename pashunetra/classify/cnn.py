#!/usr/bin/env python3
"""
cnn.py

Model-backed classifier: EfficientNet-B0 with a replaced classifier head, as
produced by the breed-predictor training script.

- Safe model loading: supports weights saved as state_dict OR as full model object.
- Top-3 softmax candidates enriched from the breed database.
- Crossbreed flag when top1 < 0.7 or top1-top2 < 0.15.
"""

import io
import logging

import numpy as np
import torch
import torch.nn as nn
import torchvision.models as models
import torchvision.transforms as transforms
from PIL import Image

from .. import breeds as breed_db
from .. import config
from ..errors import ClassificationError
from ..wizard import markers
from .base import (BreedCandidate, ClassificationResult, Classifier, Explanation,
                   Recommendations, certainty_for)

log = logging.getLogger(__name__)

CROSS_TOP1_MIN = 0.7
CROSS_TOP_DIFF = 0.15

transform_input = transforms.Compose([
    transforms.Resize((224, 224)),
    transforms.ToTensor(),
    transforms.Normalize([0.485, 0.456, 0.406], [0.229, 0.224, 0.225])
])


def pick_device():
    if torch.backends.mps.is_available():
        return torch.device("mps")
    if torch.cuda.is_available():
        return torch.device("cuda")
    return torch.device("cpu")


def build_model(num_classes):
    model = models.efficientnet_b0(weights=None)
    model.classifier[1] = nn.Linear(model.classifier[1].in_features, num_classes)
    return model


def load_model(weights_path, num_classes, device):
    data = torch.load(weights_path, map_location=device, weights_only=False)
    if isinstance(data, nn.Module):
        model = data
        log.info("loaded full model object from %s", weights_path)
    elif isinstance(data, dict):
        model = build_model(num_classes)
        # checkpoints saved from DataParallel carry a "module." prefix
        state = {k.replace("module.", "", 1): v for k, v in data.items()}
        model.load_state_dict(state)
        log.info("loaded state_dict from %s", weights_path)
    else:
        raise RuntimeError("Unknown weights format; please provide state_dict or full model.")
    model.to(device)
    model.eval()
    return model


def cultural_affinity(marker_ids, breed):
    """Share of the selected regional markers that point at one of the breed's
    regions; 0.5 when only non-regional markers were chosen."""
    if not marker_ids:
        return 0.0
    regions = markers.regions_of(marker_ids)
    if not regions or breed is None:
        return 0.5
    return len(regions & set(breed.regions)) / float(len(regions))


def audio_evidence(submission):
    return submission.audio.score / 100.0 if submission.audio is not None else 0.0


def biometric_evidence(submission):
    if not submission.has_complete_biometrics:
        return 0.0
    refs = submission.biometrics.parts().values()
    return float(np.mean([r.score for r in refs])) / 100.0


class CnnBreedClassifier(Classifier):
    name = "cnn"

    def __init__(self, weights=config.WEIGHTS, labels=None, device=None, model=None, top_k=3):
        self.labels = list(labels or config.CNN_BREEDS)
        self.device = device or pick_device()
        self.top_k = min(top_k, len(self.labels))
        self.model = model if model is not None else load_model(weights, len(self.labels), self.device)

    def probabilities(self, image_bytes):
        pil = Image.open(io.BytesIO(image_bytes)).convert("RGB")
        x = transform_input(pil).unsqueeze(0).to(self.device)
        with torch.no_grad():
            out = self.model(x)
            return torch.softmax(out, dim=1).cpu().numpy()[0]

    def classify(self, submission):
        if submission.image is None:
            raise ClassificationError("an image is required for CNN classification")
        probs = self.probabilities(submission.image.data)
        idxs = probs.argsort()[::-1][:self.top_k]

        audio = audio_evidence(submission)
        bio = biometric_evidence(submission)
        candidates = []
        for i in idxs:
            label = self.labels[int(i)]
            breed = breed_db.get(label)
            candidates.append(BreedCandidate(
                name=breed.name if breed else label,
                native_name=breed.native_name if breed else label,
                region=", ".join(breed.regions) if breed else "",
                confidence=float(probs[int(i)]),
                characteristics=breed.characteristics if breed else (),
                cultural_score=cultural_affinity(submission.cultural_markers, breed),
                audio_score=audio,
                biometric_score=bio,
            ))

        top1 = candidates[0]
        top2 = candidates[1].confidence if len(candidates) > 1 else 0.0
        factors = [f"Image features match {top1.name} ({top1.confidence:.0%})"]
        if top1.cultural_score >= 0.5 and submission.cultural_markers:
            factors.append(f"Cultural markers consistent with {top1.region}")
        if (top1.confidence < CROSS_TOP1_MIN) or ((top1.confidence - top2) < CROSS_TOP_DIFF):
            factors.append("Possible crossbreed: top candidates are close")

        primary = breed_db.get(top1.name)
        rec = breed_db.RECOMMENDATIONS[primary.category if primary else "dairy"]
        return ClassificationResult(
            top_breeds=tuple(candidates),
            explanation=Explanation(tuple(factors), top1.confidence, certainty_for(top1.confidence)),
            recommendations=Recommendations(*rec),
        )
