"""
Best-effort login handling.

Detects a login page by URL, fills the first matching username/password
fields, submits, and waits to be sent back to the target URL.
"""
import re
from typing import Optional

from playwright.async_api import Page

from config.settings import (
    LOGIN_URL_PATTERN, NAVIGATION_TIMEOUT_MS,
    USERNAME_SELECTORS, PASSWORD_SELECTORS, SUBMIT_SELECTORS
)
from .errors import AuthenticationRequiredError, LoginFormError


def is_login_page(url: str, pattern: str = LOGIN_URL_PATTERN) -> bool:
    """Check whether a URL looks like a login/sign-in page."""
    if not url:
        return False
    return re.search(pattern, url, re.IGNORECASE) is not None


async def _first_present(page: Page, selectors: list[str]) -> Optional[str]:
    for selector in selectors:
        if await page.locator(selector).count() > 0:
            return selector
    return None


async def login_if_required(page: Page, target_url: str,
                            username: Optional[str] = None,
                            password: Optional[str] = None,
                            timeout_ms: int = NAVIGATION_TIMEOUT_MS) -> bool:
    """
    Log in when the page landed on a login form.

    Args:
        page: Page already navigated towards target_url
        target_url: URL we expect to return to after logging in
        username: Login username
        password: Login password
        timeout_ms: How long to wait for the redirect back

    Returns:
        True if a login was performed, False if none was needed
    """
    if not is_login_page(page.url):
        return False

    if not username or not password:
        raise AuthenticationRequiredError(page.url)

    print(f"  Login page detected: {page.url}")

    fields = [
        ("username", USERNAME_SELECTORS, username),
        ("password", PASSWORD_SELECTORS, password),
    ]
    for label, selectors, value in fields:
        selector = await _first_present(page, selectors)
        if not selector:
            raise LoginFormError(f"No {label} field found on {page.url}")
        await page.fill(selector, value)

    submit = await _first_present(page, SUBMIT_SELECTORS)
    if not submit:
        raise LoginFormError(f"No submit button found on {page.url}")

    await page.click(submit)
    await page.wait_for_url(target_url, timeout=timeout_ms)

    print(f"  Logged in, back at {page.url}")
    return True
