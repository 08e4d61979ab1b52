import csv
import json

from pashunetra import records
from pashunetra.capture.blobs import AudioBlobRef, ImageBlobRef
from pashunetra.classify import PlaceholderClassifier
from pashunetra.classify.base import BreedCandidate, ClassificationResult, Explanation, Recommendations
from pashunetra.session import User
from pashunetra.wizard.submission import Submission

FARMER = User("u1", "Asha", "a@b.org", "farmer", "Gujarat")


def submission(markers=None, audio=False):
    return Submission(
        image=ImageBlobRef(b"\xff\xd8", "image/jpeg", "camera", "cattle-image.jpg"),
        audio=AudioBlobRef(b"RIFF", "audio/wav", "upload", "a.wav") if audio else None,
        cultural_markers=frozenset(markers) if markers else None,
    )


def medium_result():
    b = BreedCandidate("Ongole", "", "", 0.7)
    return ClassificationResult((b,), Explanation((), 0.7, "Medium"), Recommendations("", "", ""))


def test_append_csv_writes_header_once(tmp_path):
    path = str(tmp_path / "logs" / "x.csv")
    records.append_csv(path, {"a": 1, "b": 2})
    records.append_csv(path, {"a": 3, "b": 4})
    with open(path, newline="") as f:
        rows = list(csv.reader(f))
    assert rows == [["a", "b"], ["1", "2"], ["3", "4"]]


def test_read_missing_file_is_empty(tmp_path):
    assert records.read_csv(str(tmp_path / "none.csv")) == []


def test_log_identification_row(tmp_path):
    path = str(tmp_path / "ids.csv")
    result = PlaceholderClassifier().classify(submission())
    records.log_identification(path, "s1", FARMER, submission(["tilak", "bell"], audio=True), result)
    row = records.read_csv(path)[0]
    assert row["breed"] == "Gir"
    assert row["certainty"] == "High"
    assert row["markers"] == "bell;tilak"
    assert row["audio"] == "True"
    assert row["image_source"] == "camera"
    assert [name for name, _ in json.loads(row["top3"])] == ["Gir", "Sahiwal", "Red Sindhi"]


def test_history_pending_and_analytics(tmp_path):
    path = str(tmp_path / "ids.csv")
    other = User("u2", "Ravi", "r@b.org", "flw", "")
    high = PlaceholderClassifier().classify(submission())
    records.log_identification(path, "s1", FARMER, submission(audio=True), high)
    records.log_identification(path, "s2", other, submission(), medium_result())
    records.log_identification(path, "s3", FARMER, submission(), high)

    assert [r["session_id"] for r in records.history_for(path, "u1")] == ["s1", "s3"]
    assert [r["session_id"] for r in records.pending_verifications(path)] == ["s2"]
    stats = records.analytics(path)
    assert stats["total"] == 3
    assert stats["by_breed"] == {"Gir": 2, "Ongole": 1}
    assert stats["by_certainty"] == {"High": 2, "Medium": 1}
    assert stats["by_region"] == {"Gujarat": 2, "unknown": 1}
    assert stats["with_audio"] == 1


def test_log_feedback(tmp_path):
    path = str(tmp_path / "fb.csv")
    entry = records.log_feedback(path, FARMER, {"session_id": "s1", "predicted_final": "Gir",
                                                "action": "correct", "corrected_breed": "Sahiwal"})
    assert entry["corrected_breed"] == "Sahiwal"
    assert records.read_csv(path)[0]["action"] == "correct"


def test_validations_pending_until_enough_votes(tmp_path):
    ids = str(tmp_path / "ids.csv")
    fb = str(tmp_path / "fb.csv")
    high = PlaceholderClassifier().classify(submission())
    records.log_identification(ids, "s1", FARMER, submission(["bell", "tilak"], audio=True), high)
    for uid in ("v1", "v2", "v2"):
        records.log_feedback(fb, User(uid, "", None, "flw", ""), {"session_id": "s1", "predicted_final": "Gir",
                                                                   "action": "confirm"})
    queue = records.validations(ids, fb, required=5)
    assert queue["completed"] == []
    item = queue["pending"][0]
    assert item["ai_suggestion"] == "Gir"
    assert item["validators"] == 2
    assert item["required_validators"] == 5
    assert item["markers"] == ["bell", "tilak"]
    assert item["audio"] is True


def test_validations_verified_and_corrected(tmp_path):
    ids = str(tmp_path / "ids.csv")
    fb = str(tmp_path / "fb.csv")
    high = PlaceholderClassifier().classify(submission())
    records.log_identification(ids, "s1", FARMER, submission(), high)
    records.log_identification(ids, "s2", FARMER, submission(), high)
    for i in range(3):
        voter = User(f"v{i}", "", None, "flw", "")
        records.log_feedback(fb, voter, {"session_id": "s1", "predicted_final": "Gir", "action": "confirm"})
        action = "correct" if i < 2 else "confirm"
        records.log_feedback(fb, voter, {"session_id": "s2", "predicted_final": "Gir", "action": action,
                                         "corrected_breed": "Red Sindhi" if action == "correct" else ""})
    queue = records.validations(ids, fb, required=3)
    assert queue["pending"] == []
    done = {c["session_id"]: c for c in queue["completed"]}
    assert (done["s1"]["final_breed"], done["s1"]["consensus"], done["s1"]["status"]) == ("Gir", 100, "verified")
    assert (done["s2"]["final_breed"], done["s2"]["consensus"], done["s2"]["status"]) == ("Red Sindhi", 67, "corrected")


def test_timestamps_are_utc(tmp_path):
    path = str(tmp_path / "fb.csv")
    entry = records.log_feedback(path, FARMER, {"session_id": "s1"})
    assert entry["timestamp"].endswith("+00:00")
