"""
Operator-facing message catalog and error localization.

Raw errors from the live source are never shown to the operator. They are
matched against an ordered table of known causes and replaced by a
human-readable message in the configured locale.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple, Union

from chatraffle.config import settings

DEFAULT_LOCALE = "tr"

# Ordered: first matching cause wins, so keep overlapping substrings sorted
# from most to least specific.
ERROR_CAUSES: List[Tuple[str, str]] = [
    ("LIVE has ended", "live_not_found"),
    ("LIVE_HAS_ENDED", "live_not_found"),
    ("Failed to retrieve room_id", "user_not_found"),
    ("19881007", "user_not_found"),
    ("user_not_found", "user_not_found"),
    ("API Error", "user_not_found"),
    ("Room not found", "live_not_found"),
    ("Connection closed", "connection_closed"),
    ("Network error", "network_error"),
    ("UserOfflineError", "live_not_found"),
    ("UserNotFoundError", "user_not_found"),
    ("TimeoutError", "network_error"),
]

MESSAGES: Dict[str, Dict[str, str]] = {
    "tr": {
        "live_not_found": "Canlı yayın bulunamadı",
        "user_not_found": "Böyle bir kullanıcı bulunamadı",
        "connection_closed": "Bağlantı kesildi",
        "network_error": "İnternet bağlantınızı kontrol edin",
        "unknown_error": "Bilinmeyen bir hata oluştu",
        "connect_success": "{username} kullanıcısının yayınına başarıyla bağlanıldı!",
        "duplicate_entry": "Bu kullanıcı zaten katılmış!",
        "no_participants": "Henüz katılımcı yok!",
        "live_dropped": "Canlı yayın bağlantısı kesildi",
        "invalid_request": "Geçersiz istek",
    },
    "en": {
        "live_not_found": "Live stream not found",
        "user_not_found": "No such user was found",
        "connection_closed": "Connection closed",
        "network_error": "Check your internet connection",
        "unknown_error": "An unknown error occurred",
        "connect_success": "Successfully connected to {username}'s live stream!",
        "duplicate_entry": "This user has already entered!",
        "no_participants": "No participants yet!",
        "live_dropped": "Live stream connection was lost",
        "invalid_request": "Invalid request",
    },
}


def _catalog(locale: Optional[str]) -> Dict[str, str]:
    return MESSAGES.get((locale or settings.locale).lower(), MESSAGES[DEFAULT_LOCALE])


def message(key: str, locale: Optional[str] = None, **fmt: object) -> str:
    """Return the operator-facing text for ``key`` in the given (or configured) locale."""
    text = _catalog(locale).get(key) or MESSAGES[DEFAULT_LOCALE][key]
    return text.format(**fmt) if fmt else text


def describe_error(raw_error: Union[str, BaseException, None]) -> Optional[str]:
    """Stringify an error for cause matching, keeping the exception class name."""
    if isinstance(raw_error, str):
        return raw_error
    if isinstance(raw_error, BaseException):
        return f"{type(raw_error).__name__}: {raw_error}"
    return None


def localize(raw_error: Union[str, BaseException, None], locale: Optional[str] = None) -> str:
    """
    Translate a raw live-source error into an operator-facing message.

    Args:
        raw_error: Error text or exception raised by the live source
        locale: Catalog to use; defaults to settings.locale

    Returns:
        The message of the first known cause contained in the error text,
        or the generic unknown-error message
    """
    text = describe_error(raw_error)
    if text is not None:
        for cause, key in ERROR_CAUSES:
            if cause in text:
                return message(key, locale)
    return message("unknown_error", locale)
