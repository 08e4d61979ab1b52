"""The five-step capture-and-identification wizard."""

from .controller import CaptureSession, Step, WizardController
from .submission import BIOMETRIC_PARTS, Biometrics, StepDataAccumulator, Submission

__all__ = [
    "BIOMETRIC_PARTS",
    "Biometrics",
    "CaptureSession",
    "Step",
    "StepDataAccumulator",
    "Submission",
    "WizardController",
]
