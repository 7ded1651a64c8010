"""
page2vid pipeline stages.

Intentionally avoids importing submodules at package load time so that
Playwright is only required when the recorder is explicitly imported.
"""

__all__ = ["get_record_page"]


def get_record_page():
    """Return record_page lazily to avoid importing Playwright."""
    from .recorder import record_page

    return record_page
