"""
Errors raised by page2vid itself.

Playwright errors are not wrapped here; they reach the CLI unchanged.
"""
from typing import Optional


class Page2VidError(RuntimeError):
    """Base class for page2vid failures."""


class AuthenticationRequiredError(Page2VidError):
    """A login page was reached but no credentials were supplied."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(
            f"Login required at {url} - pass --username and --password"
        )


class LoginFormError(Page2VidError):
    """The login page is missing a field we know how to fill."""


class CaptureError(Page2VidError):
    """The capture loop did not leave a usable frame sequence."""


class EncodingError(Page2VidError):
    """FFmpeg is missing or failed to produce the video."""

    def __init__(self, message: str, returncode: Optional[int] = None,
                 stderr: str = ""):
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)
