"""
Error taxonomy shared by every service.

- NotFoundError: unknown subject or template key, surfaced to the caller
- LanguageModelError / RateLimitedError: completion service failures
- BackendError: relational or document source failures
- ConfigurationError: malformed reference data or settings
"""


class SubjectRouterError(Exception):
    """Base class for all errors raised by subject_router."""


class ConfigurationError(SubjectRouterError):
    pass


class NotFoundError(SubjectRouterError):
    pass


class SubjectNotFoundError(NotFoundError):
    def __init__(self, subject: str):
        super().__init__(f"Subject '{subject}' not found.")
        self.subject = subject


class TemplateNotFoundError(NotFoundError):
    def __init__(self, file_key: str, message_key: str):
        super().__init__(f"Key '{message_key}' not found in '{file_key}' templates.")
        self.file_key = file_key
        self.message_key = message_key


class LanguageModelError(SubjectRouterError):
    pass


class RateLimitedError(LanguageModelError):
    """The completion service refused the request because of rate limiting or quota."""


class BackendError(SubjectRouterError):
    pass
