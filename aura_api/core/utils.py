"""
Utility helpers shared across routers/services.
"""

from urllib.parse import urlencode


def absolute_url(base: str, path: str, params: dict | None = None) -> str:
    """
    Build an absolute URL on the public site from a relative path.
    """
    base_url = (base or "").rstrip("/")
    if not path:
        path = "/"
    if path.startswith("http://") or path.startswith("https://"):
        url = path
    else:
        if not path.startswith("/"):
            path = "/" + path
        url = base_url + path
    if params:
        url += ("&" if "?" in url else "?") + urlencode(params)
    return url
