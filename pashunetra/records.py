"""
records.py

Append-only CSV logs of identifications and operator feedback, and the
read-side summaries the dashboard, veterinary and analytics portals show.
"""

import csv
import datetime
import json
import os
from collections import Counter

from . import config


def append_csv(path, rowdict):
    exists = os.path.isfile(path)
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "a", newline="", encoding="utf8") as f:
        w = csv.DictWriter(f, fieldnames=list(rowdict.keys()))
        if not exists:
            w.writeheader()
        w.writerow(rowdict)


def read_csv(path):
    if not os.path.isfile(path):
        return []
    with open(path, "r", encoding="utf8") as f:
        return list(csv.DictReader(f))


def log_identification(path, session_id, user, submission, result):
    top = result.primary
    append_csv(path, {
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "session_id": session_id,
        "user": user.uid if user else "",
        "region": user.region if user else "",
        "breed": top.name,
        "confidence": round(top.confidence, 4),
        "certainty": result.explanation.certainty,
        "top3": json.dumps([(b.name, round(b.confidence, 4)) for b in result.top_breeds[:3]]),
        "markers": ";".join(sorted(submission.cultural_markers or ())),
        "audio": bool(submission.audio is not None),
        "image_source": submission.image.source if submission.image else "",
    })


def log_feedback(path, user, data):
    entry = {
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "user": user.uid if user else "",
        "session_id": data.get("session_id"),
        "predicted_final": data.get("predicted_final"),
        "action": data.get("action"),
        "corrected_breed": data.get("corrected_breed") or "",
        "scores": json.dumps(data.get("scores")) if data.get("scores") else "",
    }
    append_csv(path, entry)
    return entry


def history_for(path, uid):
    return [r for r in read_csv(path) if r.get("user") == uid]


def pending_verifications(path):
    """Identifications a veterinarian should confirm: anything not High certainty."""
    return [r for r in read_csv(path) if r.get("certainty") != "High"]


def analytics(path):
    rows = read_csv(path)
    return {
        "total": len(rows),
        "by_breed": dict(Counter(r["breed"] for r in rows).most_common()),
        "by_certainty": dict(Counter(r["certainty"] for r in rows)),
        "by_region": dict(Counter(r["region"] or "unknown" for r in rows)),
        "with_audio": sum(1 for r in rows if r.get("audio") == "True"),
    }


def _vote(row):
    if row.get("action") == "correct" and row.get("corrected_breed"):
        return row["corrected_breed"]
    return row.get("predicted_final") or ""


def validations(identification_log, feedback_log, required=config.REQUIRED_VALIDATORS):
    """Community validation queue.

    Feedback rows are joined to identifications by session_id. Each signed-in
    validator counts once (their latest vote); anonymous rows count
    individually. An identification with fewer than `required` votes is
    pending; otherwise it is completed with the majority breed, the share of
    votes that agree with it (`consensus`, %) and a status of `verified` when
    that breed is the one the classifier suggested, else `corrected`.
    """
    votes = {}
    for i, row in enumerate(read_csv(feedback_log)):
        voter = row.get("user") or f"anonymous-{i}"
        votes.setdefault(row.get("session_id"), {})[voter] = _vote(row)

    pending, completed = [], []
    for row in read_csv(identification_log):
        cast = [v for v in votes.get(row["session_id"], {}).values() if v]
        entry = {
            "session_id": row["session_id"],
            "user": row["user"],
            "region": row["region"],
            "ai_suggestion": row["breed"],
            "confidence": float(row["confidence"]),
            "markers": [m for m in row["markers"].split(";") if m],
            "audio": row["audio"] == "True",
            "validators": len(cast),
            "required_validators": required,
        }
        if len(cast) < required:
            pending.append(entry)
            continue
        final, agree = Counter(cast).most_common(1)[0]
        entry.update({
            "final_breed": final,
            "consensus": int(round(100.0 * agree / len(cast))),
            "status": "verified" if final == row["breed"] else "corrected",
        })
        completed.append(entry)
    return {"pending": pending, "completed": completed}
