"""Catalog of cultural markers: human-added decorations and markings that give
regional context to an identification."""

from collections import namedtuple

Marker = namedtuple("Marker", ["id", "category", "name_key", "name", "description", "region"])

CATEGORIES = ["ornaments", "markings", "grooming", "regional"]

CATALOG = [
    Marker("bell", "ornaments", "bell", "Bell", "Traditional neck bell", None),
    Marker("necklace", "ornaments", "necklace", "Necklace", "Decorative necklace", None),
    Marker("nose_ring", "ornaments", "noseRing", "Nose Ring", "Metal nose ring", None),
    Marker("ear_tag", "ornaments", "earTag", "Ear Tag", "Identification ear tag", None),
    Marker("tilak", "markings", "tilak", "Tilak", "Religious forehead marking", None),
    Marker("paint_marks", "markings", "paintMarks", "Paint Marks", "Colored identification marks", None),
    Marker("henna", "markings", "henna", "Henna", "Henna decorations", None),
    Marker("branded", "markings", "branded", "Branded", "Owner brand mark", None),
    Marker("horn_shaped", "grooming", "hornShaped", "Horn Shaped", "Artificially shaped horns", None),
    Marker("tail_styled", "grooming", "tailStyled", "Tail Styled", "Styled tail", None),
    Marker("hair_trimmed", "grooming", "hairTrimmed", "Hair Trimmed", "Trimmed hair pattern", None),
    Marker("decorated_rope", "grooming", "decoratedRope", "Decorated Rope", "Colorful rope halter", None),
    Marker("gujarat_style", "regional", "gujaratStyle", "Gujarat Style", "Gujarat regional markers", "Gujarat"),
    Marker("rajasthan_style", "regional", "rajasthanStyle", "Rajasthan Style", "Rajasthan regional markers", "Rajasthan"),
    Marker("punjab_style", "regional", "punjabStyle", "Punjab Style", "Punjab regional markers", "Punjab"),
    Marker("tamil_style", "regional", "tamilStyle", "Tamil Style", "Tamil Nadu regional markers", "Tamil Nadu"),
]

BY_ID = {m.id: m for m in CATALOG}


def is_marker(marker_id):
    return marker_id in BY_ID


def in_catalog_order(marker_ids):
    """Selected ids as a list in catalog display order."""
    chosen = set(marker_ids)
    return [m.id for m in CATALOG if m.id in chosen]


def grouped():
    return {cat: [m for m in CATALOG if m.category == cat] for cat in CATEGORIES}


def regions_of(marker_ids):
    return {BY_ID[m].region for m in marker_ids if m in BY_ID and BY_ID[m].region}
