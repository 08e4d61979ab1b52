import pytest

from pashunetra.wizard import markers
from pashunetra.wizard.steps import CulturalStep


def test_catalog_has_four_markers_per_category():
    groups = markers.grouped()
    assert list(groups) == ["ornaments", "markings", "grooming", "regional"]
    assert all(len(v) == 4 for v in groups.values())
    assert len({m.id for m in markers.CATALOG}) == 16


def test_only_regional_markers_carry_a_region():
    assert markers.regions_of(["bell", "tilak", "punjab_style", "tamil_style"]) == {"Punjab", "Tamil Nadu"}


def test_toggle_twice_restores_selection():
    step = CulturalStep()
    step.toggle("henna")
    before = step.selected
    step.toggle("bell")
    step.toggle("bell")
    assert step.selected == before == ["henna"]


def test_selection_is_reported_in_catalog_order():
    step = CulturalStep()
    for m in ("tamil_style", "tilak", "bell"):
        step.toggle(m)
    assert step.selected == ["bell", "tilak", "tamil_style"]


def test_unknown_marker_is_rejected():
    step = CulturalStep()
    with pytest.raises(ValueError):
        step.toggle("glitter")
    assert step.selected == []
