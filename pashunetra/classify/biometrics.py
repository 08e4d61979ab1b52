"""
biometrics.py

Perceptual-hash signatures for the biometric close-ups (ear, horn, muzzle).
Two sub-captures whose signatures are within `threshold` Hamming distance are
treated as the same photo taken twice.
"""

import io

import imagehash
from PIL import Image

from .. import config


def signature(data, hash_size=16):
    img = Image.open(io.BytesIO(data)).convert("RGB")
    return str(imagehash.phash(img, hash_size=hash_size))


def distance(sig_a, sig_b):
    return imagehash.hex_to_hash(sig_a) - imagehash.hex_to_hash(sig_b)


def find_duplicate(sig, others, threshold=config.BIOMETRIC_DUPLICATE_DISTANCE):
    """Return the name of the first signature in `others` ({name: sig}) that is
    a near-duplicate of `sig`, or None."""
    for name, other in others.items():
        if other is not None and distance(sig, other) <= threshold:
            return name
    return None
