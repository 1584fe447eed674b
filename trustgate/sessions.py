"""
Extraction of the session identifier from a request.

The identifier is looked up first in the session cookie, and only then in the
configured session header. This order is fixed: a header that a proxy added
or rewrote must never take the place of the session cookie.

The identifier is opaque to us. It is not decoded, and it must not be logged.
"""

from typing import Optional

from .domain import SessionExtraction

BEARER = 'Bearer '


def extract_session_id(extraction: SessionExtraction,
                       cookie_header: Optional[str],
                       header_name: Optional[str],
                       header_value: Optional[str]) -> Optional[str]:
    """
    Get the session identifier for a request, if it has one.

    Parameters
    ----------
    extraction : :class:`.SessionExtraction`
        Names of the session cookie and header.
    cookie_header : str or None
        Raw value of the ``Cookie`` request header.
    header_name : str or None
        Name of the header passed in ``header_value``. This is only considered
        if it matches :attr:`.SessionExtraction.header_name`.
    header_value : str or None
        Raw value of that header.

    Returns
    -------
    str or None
        ``None`` if neither the cookie nor the header carry a non-blank
        identifier.

    """
    session_id = _from_cookie(extraction, cookie_header)
    if session_id is None:
        session_id = _from_header(extraction, header_name, header_value)
    if session_id is None or not session_id.strip():
        return None
    return session_id


def _from_cookie(extraction: SessionExtraction,
                 cookie_header: Optional[str]) -> Optional[str]:
    if not extraction.cookie_name or not cookie_header:
        return None
    # A malformed pair only spoils itself. Values are taken as they are, with
    # at most the surrounding quotes removed.
    for pair in cookie_header.split(';'):
        name, sep, value = pair.strip().partition('=')
        if not sep or name.strip() != extraction.cookie_name:
            continue
        value = value.strip()
        if len(value) > 1 and value[0] == value[-1] == '"':
            value = value[1:-1]
        return value or None
    return None


def _from_header(extraction: SessionExtraction, header_name: Optional[str],
                 header_value: Optional[str]) -> Optional[str]:
    if not extraction.header_name or not header_name or header_value is None:
        return None
    if extraction.header_name.lower() != header_name.lower():
        return None
    if extraction.header_bearer:
        value = header_value.strip()
        if value.startswith(BEARER):
            return value[len(BEARER):]
    return header_value
