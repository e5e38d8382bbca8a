# src/hcloud_client/utils/sanitizer.py
"""
Маскирование чувствительных данных в логах.

API токен уходит в заголовке Authorization и не должен попадать в логи
ни как значение поля, ни внутри строки (например, в тексте исключения).
"""

import re
from typing import Any, Dict, Mapping

MASK = "***REDACTED***"

# Чувствительные поля (case-insensitive, точное совпадение)
SENSITIVE_KEYS = frozenset({
    'token', 'api_token', 'access_token', 'bearer_token',
    'authorization', 'proxy-authorization', 'auth',
    'password', 'passwd', 'secret', 'api_key', 'apikey',
    'cookie', 'set-cookie',
    'root_password', 'user_data', 'private_key',
})

SENSITIVE_PATTERNS = [
    (re.compile(r'(Bearer\s+)([A-Za-z0-9\-._~+/]+=*)', re.IGNORECASE), r'\1' + MASK),
    (re.compile(r'((?:api[_-]?)?token[\s:=]+)([^\s&,;]+)', re.IGNORECASE), r'\1' + MASK),
    (re.compile(r'(password[\s:=]+)([^\s&,;]+)', re.IGNORECASE), r'\1' + MASK),
]


def mask_sensitive_data(data: Any, mask: str = MASK) -> Any:
    """
    Рекурсивно маскирует чувствительные данные в словарях, списках, строках.

    Returns:
        Копия данных с замаскированными полями

    Examples:
        >>> mask_sensitive_data({"Authorization": "Bearer abc", "page": 2})
        {'Authorization': '***REDACTED***', 'page': 2}
        >>> mask_sensitive_data("401 for Bearer abc")
        '401 for Bearer ***REDACTED***'
    """
    if data is None or isinstance(data, (bool, int, float)):
        return data

    if isinstance(data, str):
        return _mask_string(data, mask)

    if isinstance(data, Mapping):
        return _mask_dict(data, mask)

    if isinstance(data, (list, tuple)):
        return type(data)(mask_sensitive_data(item, mask) for item in data)

    return data


def mask_headers(headers: Mapping[str, str], mask: str = MASK) -> Dict[str, str]:
    """Маскирует чувствительные заголовки."""
    return {
        key: mask if key.lower() in SENSITIVE_KEYS else value
        for key, value in headers.items()
    }


def _mask_dict(data: Mapping[Any, Any], mask: str) -> Dict[Any, Any]:
    result = {}
    for key, value in data.items():
        if str(key).lower() in SENSITIVE_KEYS:
            result[key] = mask
        else:
            result[key] = mask_sensitive_data(value, mask)
    return result


def _mask_string(text: str, mask: str) -> str:
    for pattern, replacement in SENSITIVE_PATTERNS:
        if mask != MASK:
            replacement = replacement.replace(MASK, mask)
        text = pattern.sub(replacement, text)
    return text
