class OnboardingError(Exception):
    """Base exception for the onboarding wizard.

    ``public_message`` is the only text ever returned to clients; the
    exception message itself is for logs.
    """

    public_message = "An unexpected error occurred. Please try again later."

    def __init__(self, message: str = "", public_message: str | None = None):
        super().__init__(message)
        if public_message:
            self.public_message = public_message


class SessionStoreError(OnboardingError):
    """Raised when the session store cannot serve a required read or write."""

    pass


class StoreWriteError(SessionStoreError):
    """Raised when a session write is not confirmed by the store."""

    pass


class StoreReadError(SessionStoreError):
    """Raised when the session store cannot be read."""

    pass


class ConsistencyError(OnboardingError):
    """Raised when the catalog and controller disagree (missing question, missing email)."""

    pass
