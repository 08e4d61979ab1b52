#!/usr/bin/env python3
"""
app.py

Local capture station. The camera and microphone are the host's own devices,
so one operator drives one wizard at a time.

- /auth/*      : register, login, logout, current user + reachable portals
- /identify/*  : the five-step wizard (camera/mic capture, uploads, markers,
                 biometrics) and the staged identification run
- /feedback    : POST JSON {session_id, predicted_final, action, ...} -> feedback_log.csv
- /validation  : community validation queue built from both CSV logs
- /database, /dashboard, /veterinary, /analytics, /settings : role-gated portals
- CORS enabled.
"""

import functools
import logging

from flask import Flask, Response, jsonify, request, session
from flask_cors import CORS

from pashunetra import breeds, config, records
from pashunetra.capture import MediaCaptureAdapter, QualityAnalyzer
from pashunetra.classify import ResultAggregator, make_classifier
from pashunetra.errors import DeviceUnavailable, PashuNetraError
from pashunetra.i18n import LANGUAGES, Translator
from pashunetra.session import InMemorySessionProvider, accessible_portals, can_access
from pashunetra.wizard import Step, WizardController
from pashunetra.wizard import markers

log = logging.getLogger("pashunetra.app")


def build_controller(classifier=None):
    analyzer = QualityAnalyzer()
    aggregator = ResultAggregator(classifier or make_classifier())
    return WizardController(MediaCaptureAdapter(), aggregator, analyzer)


def create_app(controller=None, provider=None, translator=None,
               identification_log=config.IDENTIFICATION_LOG, feedback_log=config.FEEDBACK_LOG):
    app = Flask(__name__)
    app.secret_key = config.SECRET_KEY
    CORS(app)

    ctl = controller or build_controller()
    auth = provider or InMemorySessionProvider()
    tr = translator or Translator()
    app.extensions["pashunetra"] = {"controller": ctl, "provider": auth, "translator": tr}

    # a new operator never inherits the previous operator's half-done identification
    auth.on_auth_change(lambda user: ctl.new_identification())

    def t(key):
        return tr.gettext(key, session.get("locale"))

    def fail(key, status):
        return jsonify({"error": t(key), "kind": key}), status

    def uploaded(field):
        f = request.files.get(field)
        if f is None:
            return None
        return f.read(), f.mimetype, f.filename

    def portal(name):
        def deco(fn):
            @functools.wraps(fn)
            def wrapper(*args, **kwargs):
                user = auth.current_user()
                if user is None:
                    return fail("errorLoginRequired", 401)
                if not can_access(user, name):
                    return fail("errorForbidden", 403)
                return fn(user, *args, **kwargs)
            return wrapper
        return deco

    @app.errorhandler(PashuNetraError)
    def handle_error(e):
        log.info("%s: %s", e.__class__.__name__, e)
        return jsonify({"error": t(e.key), "detail": str(e), "kind": e.__class__.__name__}), e.status

    @app.errorhandler(ValueError)
    def handle_value_error(e):
        return jsonify({"error": str(e), "kind": "ValueError"}), 400

    # ---------- auth ----------
    @app.route("/auth/register", methods=["POST"])
    def register():
        data = request.get_json(force=True)
        user = auth.register_user(data.get("name"), data.get("email"), data.get("password"),
                                  data.get("role", "farmer"), data.get("region"))
        return jsonify({"user": user.to_dict(), "portals": accessible_portals(user)}), 201

    @app.route("/auth/login", methods=["POST"])
    def login():
        data = request.get_json(force=True)
        user = auth.login(data.get("email"), data.get("password"))
        return jsonify({"user": user.to_dict(), "portals": accessible_portals(user)})

    @app.route("/auth/logout", methods=["POST"])
    def logout():
        auth.logout()
        return jsonify({"status": "logged_out"})

    @app.route("/auth/me")
    def me():
        user = auth.current_user()
        return jsonify({"user": user.to_dict() if user else None, "portals": accessible_portals(user)})

    # ---------- wizard ----------
    @app.route("/identify/state")
    @portal("identify")
    def wizard_state(user):
        return jsonify(ctl.state())

    @app.route("/identify/camera/start", methods=["POST"])
    @portal("identify")
    def camera_start(user):
        ctl.start_camera()
        return jsonify(ctl.state())

    @app.route("/identify/camera/stop", methods=["POST"])
    @portal("identify")
    def camera_stop(user):
        ctl.stop_camera()
        return jsonify(ctl.state())

    @app.route("/identify/camera/preview")
    @portal("identify")
    def camera_preview(user):
        stream = ctl.media.video
        if stream is None:
            return fail("errorDeviceUnavailable", 404)

        def frames():
            while not stream.released:
                try:
                    jpg = stream.preview_jpeg()
                except DeviceUnavailable:
                    break
                yield b"--frame\r\nContent-Type: image/jpeg\r\n\r\n" + jpg + b"\r\n"

        return Response(frames(), mimetype="multipart/x-mixed-replace; boundary=frame")

    @app.route("/identify/image/capture", methods=["POST"])
    @portal("identify")
    def image_capture(user):
        ref = ctl.active(Step.IMAGE).capture()
        return jsonify(ref.to_dict())

    @app.route("/identify/image/upload", methods=["POST"])
    @portal("identify")
    def image_upload(user):
        up = uploaded("image")
        if up is None:
            return fail("errorUnsupportedFile", 400)
        ref = ctl.active(Step.IMAGE).upload(*up)
        return jsonify(ref.to_dict())

    @app.route("/identify/image/retake", methods=["POST"])
    @portal("identify")
    def image_retake(user):
        ctl.retake_image()
        return jsonify(ctl.state())

    @app.route("/identify/image/confirm", methods=["POST"])
    @portal("identify")
    def image_confirm(user):
        data = request.get_json(silent=True) or {}
        ref = ctl.confirm_image(data.get("ref_id"))
        return jsonify({"confirmed": ref.ref_id, "advance_in": ctl.advance_delay})

    @app.route("/identify/cultural/markers")
    @portal("identify")
    def cultural_markers(user):
        out = {}
        for cat, items in markers.grouped().items():
            out[cat] = []
            for m in items:
                name = t(m.name_key)
                out[cat].append({"id": m.id, "name": m.name if name == m.name_key else name,
                                 "description": m.description})
        return jsonify(out)

    @app.route("/identify/cultural/toggle", methods=["POST"])
    @portal("identify")
    def cultural_toggle(user):
        data = request.get_json(force=True)
        selected = ctl.active(Step.CULTURAL).toggle(data.get("marker"))
        return jsonify({"selected": selected})

    @app.route("/identify/audio/start", methods=["POST"])
    @portal("identify")
    def audio_start(user):
        ctl.active(Step.AUDIO).start_recording()
        return jsonify(ctl.state()["audio"])

    @app.route("/identify/audio/stop", methods=["POST"])
    @portal("identify")
    def audio_stop(user):
        ref = ctl.active(Step.AUDIO).stop_recording()
        return jsonify(ref.to_dict())

    @app.route("/identify/audio/upload", methods=["POST"])
    @portal("identify")
    def audio_upload(user):
        up = uploaded("audio")
        if up is None:
            return fail("errorUnsupportedFile", 400)
        ref = ctl.active(Step.AUDIO).upload(*up)
        return jsonify(ref.to_dict())

    @app.route("/identify/audio/retake", methods=["POST"])
    @portal("identify")
    def audio_retake(user):
        ctl.active(Step.AUDIO).retake()
        return jsonify(ctl.state()["audio"])

    @app.route("/identify/biometric/<part>/capture", methods=["POST"])
    @portal("identify")
    def biometric_capture(user, part):
        ref = ctl.active(Step.BIOMETRIC).capture(part)
        return jsonify(ref.to_dict())

    @app.route("/identify/biometric/<part>/upload", methods=["POST"])
    @portal("identify")
    def biometric_upload(user, part):
        up = uploaded("image")
        if up is None:
            return fail("errorUnsupportedFile", 400)
        ref = ctl.active(Step.BIOMETRIC).upload(part, *up)
        return jsonify(ref.to_dict())

    @app.route("/identify/biometric/<part>/clear", methods=["POST"])
    @portal("identify")
    def biometric_clear(user, part):
        ctl.active(Step.BIOMETRIC).clear(part)
        return jsonify(ctl.state()["biometric"])

    @app.route("/identify/next", methods=["POST"])
    @portal("identify")
    def wizard_next(user):
        ctl.next()
        return jsonify(ctl.state())

    @app.route("/identify/skip", methods=["POST"])
    @portal("identify")
    def wizard_skip(user):
        ctl.skip()
        return jsonify(ctl.state())

    @app.route("/identify/back", methods=["POST"])
    @portal("identify")
    def wizard_back(user):
        ctl.back()
        return jsonify(ctl.state())

    @app.route("/identify/run", methods=["POST"])
    @portal("identify")
    def wizard_run(user):
        # blocks for the staged pipeline; /identify/state reports progress meanwhile
        sess = ctl.session
        result = ctl.identify()
        records.log_identification(identification_log, sess.session_id, user, sess.submission, result)
        return jsonify({"session_id": sess.session_id, "results": result.to_dict()})

    @app.route("/identify/new", methods=["POST"])
    @portal("identify")
    def wizard_new(user):
        ctl.new_identification()
        return jsonify(ctl.state())

    @app.route("/validation")
    @portal("validation")
    def validation(user):
        return jsonify(records.validations(identification_log, feedback_log))

    @app.route("/feedback", methods=["POST"])
    @portal("validation")
    def feedback(user):
        data = request.get_json(force=True)
        records.log_feedback(feedback_log, user, data)
        return jsonify({"status": "saved"})

    # ---------- portals ----------
    @app.route("/database")
    @portal("database")
    def database(user):
        found = breeds.search(request.args.get("q", ""), request.args.get("type", "all"),
                              request.args.get("category", "all"), request.args.get("region", "all"))
        return jsonify({"breeds": [b.to_dict() for b in found], "regions": breeds.all_regions()})

    @app.route("/dashboard")
    @portal("dashboard")
    def dashboard(user):
        return jsonify({"user": user.to_dict(), "identifications": records.history_for(identification_log, user.uid)})

    @app.route("/veterinary")
    @portal("veterinary")
    def veterinary(user):
        return jsonify({"pending": records.pending_verifications(identification_log)})

    @app.route("/analytics")
    @portal("analytics")
    def analytics(user):
        return jsonify(records.analytics(identification_log))

    @app.route("/settings", methods=["GET", "POST"])
    @portal("settings")
    def settings(user):
        if request.method == "POST":
            data = request.get_json(force=True)
            locale = data.get("locale")
            if locale:
                if not tr.supports(locale):
                    raise ValueError(f"unsupported language: {locale}")
                session["locale"] = locale
            user = auth.update_profile(display_name=data.get("display_name"), region=data.get("region"))
        return jsonify({
            "user": user.to_dict(),
            "locale": session.get("locale", tr.default_locale),
            "languages": [{"code": c, "name": n, "native": nat} for c, n, nat in LANGUAGES],
        })

    @app.route("/")
    def home():
        user = auth.current_user()
        return jsonify({"app": "PashuNetra", "user": user.to_dict() if user else None,
                        "portals": [{"id": p, "title": t(p)} for p in accessible_portals(user)]})

    return app


app = create_app()

if __name__ == "__main__":
    config.configure_logging()
    log.info("App root: %s", config.BASE)
    log.info("Classifier: %s", config.CLASSIFIER)
    app.run(host="0.0.0.0", port=5000, debug=False, threaded=True)
