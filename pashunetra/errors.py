"""Errors raised by the capture station. None of them is fatal; every one is
recoverable by the operator retrying within the same step."""


class PashuNetraError(Exception):
    """Base class. `key` names the translated message shown to the operator."""

    key = "errorGeneric"
    status = 400

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__name__)


class DeviceUnavailable(PashuNetraError):
    key = "errorDeviceUnavailable"
    status = 503


class DeviceBusy(DeviceUnavailable):
    key = "errorDeviceBusy"
    status = 409


class UnsupportedFileType(PashuNetraError):
    key = "errorUnsupportedFile"
    status = 415


class LowQualityCapture(PashuNetraError):
    key = "errorLowQuality"
    status = 422


class ProviderAuthFailure(PashuNetraError):
    key = "errorAuth"
    status = 401


class InvalidTransition(PashuNetraError):
    key = "errorInvalidStep"
    status = 409


class IncompleteBiometrics(InvalidTransition):
    key = "errorIncompleteBiometrics"


class ClassificationError(PashuNetraError):
    key = "errorClassification"
    status = 500
