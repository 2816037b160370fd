"""
core/exceptions.py
──────────────────
Error taxonomy shared by every camp app.

CampError
├── ValidationError     – bad input, rejected before anything is persisted
├── ConflictError       – duplicate check-in, duplicate pending item, …
├── NotFoundError       – unknown id / unresolvable token (fails closed)
└── DependencyFailure   – notification or export collaborator failed

Each class carries a stable ``code`` used by the JSON views, so clients can
branch on it without parsing the message.
"""


class CampError(Exception):
    code = 'camp_error'
    default_message = 'Camp booking error.'

    def __init__(self, message=None, **context):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def as_dict(self):
        return {'error': self.code, 'message': self.message, **self.context}


# ── Validation ────────────────────────────────────────────────────────────────

class ValidationError(CampError):
    code = 'validation_error'
    default_message = 'The request is invalid.'


class ConsentRequiredError(ValidationError):
    code = 'consent_required'
    default_message = 'Guardian consent is required to register.'


class EmptyRegistrationError(ValidationError):
    code = 'empty_registration'
    default_message = 'A registration needs at least one child with at least one date.'


class UnknownDateError(ValidationError):
    code = 'unknown_date'
    default_message = 'The selected date is not an offered camp day.'


class InvalidSessionTypeError(ValidationError):
    code = 'invalid_session_type'
    default_message = "Session type must be 'half' or 'full'."


class DuplicateChildError(ValidationError):
    code = 'duplicate_child'
    default_message = 'Each child in a registration needs a distinct name.'


class InvalidChoiceError(ValidationError):
    code = 'invalid_choice'
    default_message = 'Unsupported value.'


class RegistrationInactiveError(ValidationError):
    code = 'registration_inactive'
    default_message = 'The registration is not active.'


# ── Conflicts ─────────────────────────────────────────────────────────────────

class ConflictError(CampError):
    code = 'conflict'
    default_message = 'The request conflicts with the current state.'


class AlreadyCheckedInError(ConflictError):
    code = 'already_checked_in'
    default_message = 'This child is already checked in today.'


class AlreadyCheckedOutError(ConflictError):
    code = 'already_checked_out'
    default_message = 'This attendance record is already checked out.'


class DuplicatePendingItemError(ConflictError):
    code = 'duplicate_pending_item'
    default_message = 'A pending billing item already exists for this child.'


class InvalidTransitionError(ConflictError):
    code = 'invalid_transition'
    default_message = 'That status change is not allowed.'


# ── Not found ─────────────────────────────────────────────────────────────────

class NotFoundError(CampError):
    code = 'not_found'
    default_message = 'Not found.'


class RegistrationNotFound(NotFoundError):
    code = 'registration_not_found'
    default_message = 'Registration not found.'


class ChildNotFound(NotFoundError):
    code = 'child_not_found'
    default_message = 'No such child on this registration.'


class AttendanceNotFound(NotFoundError):
    code = 'attendance_not_found'
    default_message = 'Attendance record not found.'


class ActionItemNotFound(NotFoundError):
    code = 'action_item_not_found'
    default_message = 'Billing action item not found.'


# ── Collaborator failures ─────────────────────────────────────────────────────

class DependencyFailure(CampError):
    code = 'dependency_failure'
    default_message = 'An external service failed.'


class NotificationError(DependencyFailure):
    code = 'notification_failed'
    default_message = 'Billing notification could not be delivered.'


class ExportRenderingError(DependencyFailure):
    code = 'export_failed'
    default_message = 'The export document could not be rendered.'
