"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class PreconditionViolation(DomainException):
    """Applicant data is outside the domain the scoring engine accepts"""

    pass


class ServiceError(DomainException):
    """Narrative provider is unreachable, rate-limited, or returned no usable text"""

    pass


class NoFieldsExtracted(DomainException):
    """Document parsing yielded none of the applicant fields"""

    pass


class SubmissionInProgressError(DomainException):
    """Another submission for the same session is still pending"""

    pass
