# domain/errors.py


class PopTrackingError(Exception):
    """Base class for errors raised by the tracking engine."""


class SourceUnavailable(PopTrackingError):
    """A remote sheet or history query could not be fetched."""


class ValidationFailed(PopTrackingError):
    """
    A report or order violates a business rule.
    `rule` identifies which one, `message` is shown to the operator as-is.
    """

    def __init__(self, rule: str, message: str):
        super().__init__(message)
        self.rule = rule
        self.message = message


class ReportDateRequired(ValidationFailed):
    def __init__(self, message: str = "⚠️ กรุณาระบุวันที่รับของก่อนครับ"):
        super().__init__("date_required", message)


class AttachmentLimitExceeded(ValidationFailed):
    def __init__(self, message: str = "แนบไฟล์ได้ไม่เกิน 3 ไฟล์"):
        super().__init__("attachment_limit", message)


class DispatchFailed(PopTrackingError):
    """The report POST failed at the transport level."""


class CorruptRecord(PopTrackingError):
    """A history record's item snapshot cannot be decoded."""


class StorageError(PopTrackingError):
    """The durable key-value store rejected a read or write."""
