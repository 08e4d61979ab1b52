#!/usr/bin/env python3
"""
cli.py
Runs the identification wizard headless from files (or the local camera/mic).

Usage:
  pashunetra-identify --img cow.jpg --markers bell gujarat_style \
      --ear ear.jpg --horn horn.jpg --muzzle muzzle.jpg
  pashunetra-identify --camera --record 6 --ear ear.jpg --horn horn.jpg --muzzle muzzle.jpg
"""

import argparse
import mimetypes
import os
import sys
import time

from tqdm import tqdm

from . import config, records
from .capture import MediaCaptureAdapter, QualityAnalyzer
from .classify import ResultAggregator, make_classifier
from .errors import PashuNetraError
from .wizard import WizardController


def read_file(path):
    mime = mimetypes.guess_type(path)[0] or "application/octet-stream"
    with open(path, "rb") as f:
        return f.read(), mime, os.path.basename(path)


def print_result(result):
    top = result.primary
    print(f"\nIdentified: {top.name} ({top.native_name}) - {top.region}")
    print(f"Confidence: {top.confidence:.0%} ({result.explanation.certainty})")
    print(f"  cultural {top.cultural_score:.0%} | audio {top.audio_score:.0%} | biometric {top.biometric_score:.0%}")
    print("\nTop matches:")
    for b in result.top_breeds:
        print(f"  {b.name}: {b.confidence:.4f}")
    print("\nWhy this breed?")
    for f in result.explanation.primary_factors:
        print(f"  - {f}")
    rec = result.recommendations
    print(f"\nBreeding:  {rec.breeding}\nNutrition: {rec.nutrition}\nHealth:    {rec.health}")


def run(args):
    media = MediaCaptureAdapter(camera_index=args.camera_index)
    analyzer = QualityAnalyzer()
    aggregator = ResultAggregator(make_classifier(args.classifier, args.weights), stage_delay=args.stage_delay)
    ctl = WizardController(media, aggregator, analyzer, schedule=lambda delay, fn: fn(),
                           quality_threshold=args.threshold)
    try:
        # step 1: image
        if args.img:
            ctl.image.upload(*read_file(args.img))
        else:
            ctl.start_camera()
            ctl.image.capture()
        ref = ctl.image.candidate
        ctl.image.pending.result()
        print(f"Image quality: {ref.score}%")
        for issue in ref.issues:
            print("  !", issue)
        ctl.confirm_image()

        # step 2: cultural markers
        for m in args.markers or []:
            ctl.cultural.toggle(m)
        ctl.next()

        # step 3: audio
        if args.audio:
            ctl.audio.upload(*read_file(args.audio))
            ctl.next()
        elif args.record:
            ctl.audio.start_recording()
            for _ in tqdm(range(args.record), desc="Recording", unit="s"):
                time.sleep(1)
            ctl.audio.stop_recording()
            ctl.next()
        else:
            ctl.skip()

        # step 4: biometrics
        for part, path in (("ear", args.ear), ("horn", args.horn), ("muzzle", args.muzzle)):
            ctl.biometric.upload(part, *read_file(path))

        with tqdm(total=100, desc="Identifying", unit="%") as bar:
            def progress(pct, stage):
                bar.set_description(stage)
                bar.update(pct - bar.n)
            result = ctl.identify(on_progress=progress)

        print_result(result)
        if args.log:
            records.log_identification(args.log, ctl.session.session_id, None, ctl.session.submission, result)
            print("\nLogged to", args.log)
        return 0
    except PashuNetraError as e:
        print(f"{e.__class__.__name__}: {e}", file=sys.stderr)
        return 2
    finally:
        ctl.close()
        analyzer.shutdown()


def main(argv=None):
    p = argparse.ArgumentParser(description="Identify a cattle breed from captured evidence.")
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("--img", help="Full-body image of the animal")
    src.add_argument("--camera", action="store_true", help="Capture the image from the local camera")
    p.add_argument("--camera-index", type=int, default=config.CAMERA_INDEX)
    p.add_argument("--markers", nargs="*", help="Cultural marker ids (e.g. bell tilak gujarat_style)")
    snd = p.add_mutually_exclusive_group()
    snd.add_argument("--audio", help="Recording of the animal's vocalisation")
    snd.add_argument("--record", type=int, help="Record this many seconds from the microphone")
    p.add_argument("--ear", required=True)
    p.add_argument("--horn", required=True)
    p.add_argument("--muzzle", required=True)
    p.add_argument("--classifier", choices=["placeholder", "cnn"], default=config.CLASSIFIER)
    p.add_argument("--weights", default=config.WEIGHTS)
    p.add_argument("--threshold", type=int, default=config.QUALITY_THRESHOLD)
    p.add_argument("--stage-delay", type=float, default=config.STAGE_DELAY)
    p.add_argument("--log", help="Append the result to this identification CSV")
    p.add_argument("--log-level", default=config.LOG_LEVEL)
    args = p.parse_args(argv)

    config.configure_logging(args.log_level)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
