"""
aggregator.py

Staged result pipeline. Each stage waits `stage_delay` seconds and then
reports its cumulative percentage, so the results view can draw a determinate
progress ring; after the last stage the classifier produces the result.
"""

import logging
import time

from .. import config
from ..errors import ClassificationError

log = logging.getLogger(__name__)


class ResultAggregator:
    def __init__(self, classifier, stages=None, stage_delay=config.STAGE_DELAY, sleep=time.sleep):
        self.classifier = classifier
        self.stages = list(stages if stages is not None else config.STAGES)
        self.stage_delay = stage_delay
        self._sleep = sleep
        pcts = [p for _, p in self.stages]
        if pcts != sorted(pcts) or any(p < 0 or p > 100 for p in pcts):
            raise ValueError("stage percentages must be ascending within 0..100")

    def run(self, submission, on_progress=None):
        for stage, pct in self.stages:
            self._sleep(self.stage_delay)
            log.debug("stage %s -> %d%%", stage, pct)
            if on_progress is not None:
                on_progress(pct, stage)

        result = self.classifier.classify(submission)
        if result is None or not result.top_breeds:
            raise ClassificationError(f"{self.classifier.name} returned no candidate breeds")
        result = result.sorted()
        log.info("classified as %s (%.2f, %s) by %s", result.primary.name,
                 result.primary.confidence, result.explanation.certainty, self.classifier.name)
        return result
