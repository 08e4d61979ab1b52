from pashunetra import breeds


def test_lookup_by_name_id_or_label():
    assert breeds.get("gir").name == "Gir"
    assert breeds.get("4").name == "Murrah"
    assert breeds.get("H_F").name == "Holstein Friesian"
    assert breeds.get("nili_ravi").name == "Nili-Ravi"
    assert breeds.get("yak") is None


def test_search_filters():
    assert {b.name for b in breeds.search(type="buffalo")} == {"Murrah", "Nili-Ravi"}
    assert [b.name for b in breeds.search("sindh")] == ["Red Sindhi"]
    assert {b.name for b in breeds.search(category="dual-purpose")} == {"Ongole", "Tharparkar"}
    gujarat = {b.name for b in breeds.search(region="Gujarat")}
    assert {"Gir", "Red Sindhi", "Tharparkar"} <= gujarat
    assert breeds.search("gir", category="draft") == []


def test_to_dict_hides_classifier_labels():
    d = breeds.get("Holstein Friesian").to_dict()
    assert "aliases" not in d
    assert d["regions"]


def test_regions_are_sorted_and_unique():
    regions = breeds.all_regions()
    assert regions == sorted(set(regions))
