"""
Error taxonomy shared by every runner in this collection.

Runners never call `fail_json` directly. They raise one of the exceptions
below, and `BaseRunner.run()` turns it into a structured Ansible failure with
a short `summary` and a `detail` string. Errors coming back from the API are
represented by `AwxApiError` and translated into this taxonomy at the command
or resolver boundary.
"""


class AwxApiError(Exception):
    """Raised by `AwxClient` for any non-successful HTTP exchange."""

    def __init__(self, status: int, url: str, message: str, body=None):
        super().__init__(message)
        self.status = status
        self.url = url
        self.message = message
        self.body = body

    @property
    def is_not_found(self) -> bool:
        return self.status == 404

    def __str__(self):
        return self.message


class ReconcileError(Exception):
    """Base class for every failure a runner reports to the user."""

    summary = "Reconciliation failed"

    def __init__(self, detail: str, summary: str | None = None):
        super().__init__(detail)
        self.detail = detail
        if summary:
            self.summary = summary

    def to_diagnostic(self) -> dict:
        return {"summary": self.summary, "detail": self.detail}


class MissingSelector(ReconcileError):
    summary = "Missing selector"


class AmbiguousResult(ReconcileError):
    summary = "More than one object matched"

    def __init__(self, detail: str, count: int):
        super().__init__(detail)
        self.count = count


class NotFound(ReconcileError):
    summary = "Object not found"


class MalformedIdentity(ReconcileError):
    summary = "Malformed identifier"


class ParentNotFound(ReconcileError):
    # Not a NotFound subclass: a missing parent is always surfaced.
    summary = "Parent object not found"


class UpstreamLookupFailed(ReconcileError):
    summary = "Lookup request failed"


class CreateFailed(ReconcileError):
    summary = "Create failed"


class UpdateFailed(ReconcileError):
    summary = "Update failed"


class DeleteFailed(ReconcileError):
    summary = "Delete failed"


class AssociateFailed(ReconcileError):
    summary = "Associate failed"


class DisassociateFailed(ReconcileError):
    summary = "Disassociate failed"


class AmbiguousAssociation(ReconcileError):
    summary = "More than one association matched"


class SpecDecodeError(ReconcileError):
    summary = "Survey spec could not be decoded"


class InvalidQuestionType(SpecDecodeError):
    summary = "Invalid survey question type"
