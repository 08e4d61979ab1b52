"""
config.py

Every tunable of the capture station lives here. Values can be overridden with
PASHUNETRA_* environment variables, e.g.

  PASHUNETRA_CAMERA_INDEX=1 PASHUNETRA_QUALITY_THRESHOLD=70 python app.py
"""

import os
import logging


def _env(name, default):
    return os.environ.get(f"PASHUNETRA_{name}", default)


def _env_int(name, default):
    return int(_env(name, default))


def _env_float(name, default):
    return float(_env(name, default))


# --------- PATHS ----------
BASE = _env("BASE_DIR", os.getcwd())
IDENTIFICATION_LOG = os.path.join(BASE, "identification_log.csv")
FEEDBACK_LOG = os.path.join(BASE, "feedback_log.csv")
WEIGHTS = _env("WEIGHTS", os.path.join(BASE, "best_model.pth"))

# --------- CAMERA ----------
# index 0 is the built-in camera on most hosts; point this at the rear-facing one
CAMERA_INDEX = _env_int("CAMERA_INDEX", 0)
PREFERRED_WIDTH = _env_int("PREFERRED_WIDTH", 1280)
PREFERRED_HEIGHT = _env_int("PREFERRED_HEIGHT", 720)
JPEG_QUALITY = _env_int("JPEG_QUALITY", 90)

# --------- MICROPHONE ----------
AUDIO_SAMPLE_RATE = _env_int("AUDIO_SAMPLE_RATE", 44100)
AUDIO_CHANNELS = _env_int("AUDIO_CHANNELS", 1)
AUDIO_MIN_SECONDS = 5
AUDIO_MAX_SECONDS = 10

# --------- QUALITY ----------
QUALITY_THRESHOLD = _env_int("QUALITY_THRESHOLD", 60)
QUALITY_WORKERS = _env_int("QUALITY_WORKERS", 2)
# variance of Laplacian at which a frame counts as fully sharp
SHARPNESS_REFERENCE = _env_float("SHARPNESS_REFERENCE", 150.0)
MIN_PIXELS = 640 * 480
BIOMETRIC_DUPLICATE_DISTANCE = _env_int("BIOMETRIC_DUPLICATE_DISTANCE", 5)

# --------- WIZARD ----------
AUTO_ADVANCE_DELAY = _env_float("AUTO_ADVANCE_DELAY", 0.5)
STAGE_DELAY = _env_float("STAGE_DELAY", 0.8)
STAGES = [
    ("Image Analysis", 20),
    ("Cultural Recognition", 40),
    ("Audio Processing", 60),
    ("Biometric Matching", 80),
    ("Breed Classification", 100),
]

# --------- CLASSIFIER ----------
# "placeholder" (fixed result) or "cnn" (EfficientNet-B0 weights at WEIGHTS)
CLASSIFIER = _env("CLASSIFIER", "placeholder")
CNN_BREEDS = ["Gir", "H_F", "Murrah", "jersey", "nili_ravi"]
HIGH_CERTAINTY = 0.85
MEDIUM_CERTAINTY = 0.6

# --------- COMMUNITY VALIDATION ----------
# distinct validator votes before an identification counts as settled
REQUIRED_VALIDATORS = _env_int("REQUIRED_VALIDATORS", 5)

# --------- APP ----------
DEFAULT_LOCALE = _env("DEFAULT_LOCALE", "en")
SECRET_KEY = _env("SECRET_KEY", "change-me")
LOG_LEVEL = _env("LOG_LEVEL", "INFO")


def configure_logging(level=None):
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
