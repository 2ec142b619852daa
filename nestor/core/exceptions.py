"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
Every Jenkins failure surfaces as one of these; nothing is retried or
suppressed at the client layer.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    """Raised when a resource cannot be found."""

    def __init__(self, message: str = "Resource not found", code: str = "RES_NOT_FOUND") -> None:
        super().__init__(message, code=code)


class ValidationError(ApplicationError):
    """Raised when validation fails."""

    def __init__(self, message: str = "Validation failed", details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message, code="VAL_VALIDATION_ERROR")


class AuthenticationError(ApplicationError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, code="AUTH_UNAUTHORIZED")


class AuthorizationError(ApplicationError):
    """Raised when authorization fails."""

    def __init__(self, message: str = "Permission denied") -> None:
        super().__init__(message, code="AUTHZ_FORBIDDEN")


class ExternalServiceError(ApplicationError):
    """Raised when an external service call fails."""

    def __init__(
        self,
        message: str = "External service error",
        code: str = "SYS_EXTERNAL_SERVICE_ERROR",
    ) -> None:
        super().__init__(message, code=code)


# =============================================================================
# Jenkins errors
# =============================================================================


class AuthenticationFailedError(AuthenticationError):
    """Jenkins rejected the credentials (401)."""

    def __init__(self) -> None:
        super().__init__(
            "Authentication failed - incorrect username and/or password in Jenkins URL"
        )


class AuthenticationRequiredError(AuthorizationError):
    """Jenkins requires credentials that were not supplied (403)."""

    def __init__(self) -> None:
        super().__init__(
            "Jenkins requires authentication - set username and password in Jenkins URL"
        )


class JobNotFoundError(NotFoundError):
    """Raised on 404 from a job-scoped endpoint."""

    def __init__(self, job_name: str) -> None:
        self.job_name = job_name
        super().__init__(f"Job {job_name} does not exist", code="JOB_NOT_FOUND")


class ViewNotFoundError(NotFoundError):
    """Raised on 404 from a view-scoped endpoint."""

    def __init__(self, view_name: str) -> None:
        self.view_name = view_name
        super().__init__(f"View {view_name} does not exist", code="VIEW_NOT_FOUND")


class ParametersRequiredError(ValidationError):
    """Legacy Jenkins answers 405 when a parameterised job is built without parameters."""

    def __init__(self, job_name: str) -> None:
        self.job_name = job_name
        super().__init__(
            f"Job {job_name} requires build parameters",
            details={"job_name": job_name},
        )


class DiscoveryTimeoutError(NotFoundError):
    """No Jenkins instance answered the discovery broadcast in time."""

    def __init__(self, host: str) -> None:
        self.host = host
        super().__init__(
            f"Unable to find any Jenkins instance on {host}",
            code="DISCOVERY_TIMEOUT",
        )


class NotAJenkinsServerError(ExternalServiceError):
    """The server answered but does not identify itself as Jenkins."""

    def __init__(self, message: str = "Not a Jenkins server") -> None:
        super().__init__(message, code="NOT_JENKINS")


class TransportError(ExternalServiceError):
    """Network-level failure talking to Jenkins."""

    def __init__(self, message: str = "Transport error") -> None:
        super().__init__(message, code="SYS_TRANSPORT_ERROR")


class UnexpectedStatusError(ExternalServiceError):
    """Jenkins answered with a status code the operation does not handle."""

    def __init__(self, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(
            f"Unexpected status code {status_code} from Jenkins",
            code="SYS_UNEXPECTED_STATUS",
        )


class InvalidResponseError(ExternalServiceError):
    """Jenkins answered 2xx but the body or headers cannot be read (e.g. a proxy login page)."""

    def __init__(self, detail: str, body: str = "") -> None:
        self.body = body
        super().__init__(f"Invalid response from Jenkins: {detail}", code="SYS_INVALID_RESPONSE")
