"""
Иерархия исключений Hetzner Cloud клиента.

Классификация:
- TransportError - сетевые ошибки, движок их НЕ ретраит
- HTTPError / APIError - ответы 4xx/5xx; ретраится только rate_limit_exceeded
- MetaDecodeError, DecodeError - невалидный ответ
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BASE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class HCloudException(Exception):
    """Базовое исключение клиента."""

    retryable: bool = False
    fatal: bool = False

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ТРАНСПОРТ (одна попытка, без retry)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TransportError(HCloudException):
    """
    Ошибка транспорта: соединение, таймаут, отмена.

    Всегда возвращается вызывающему коду сразу, без повторов.
    """
    fatal = True

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        full_message = f"{message}"
        if url:
            full_message += f" (url: {url})"
        super().__init__(full_message)


class TimeoutError(TransportError):
    """Таймаут запроса."""
    pass


class ConnectionError(TransportError):
    """
    Ошибка подключения.

    Примеры:
    - Connection refused
    - Connection reset
    - DNS resolution failed
    """
    pass


class RequestCancelledError(TransportError):
    """RequestContext был отменён до или во время запроса."""
    pass


class DeadlineExceededError(RequestCancelledError):
    """Истёк deadline RequestContext."""
    pass

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ПОСТРОЕНИЕ ЗАПРОСА И ДЕКОДИРОВАНИЕ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class RequestBuildError(HCloudException):
    """Не удалось построить запрос (битый URL, несериализуемое тело)."""
    fatal = True


class MetaDecodeError(HCloudException):
    """
    Ответ заявлен как JSON, но meta данные не парсятся.

    Args:
        message: Причина
        response: Response (метаданные rate limit уже заполнены)
    """
    fatal = True

    def __init__(self, message: str, response=None):
        self.response = response
        super().__init__(f"hcloud: error reading response meta data: {message}")


class DecodeError(HCloudException):
    """
    Успешный ответ не удалось декодировать в целевой тип.

    Response сохраняется, чтобы можно было посмотреть метаданные.
    """

    def __init__(self, message: str, response=None):
        self.response = response
        super().__init__(message)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# HTTP / API ОШИБКИ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class HTTPError(HCloudException):
    """
    Ответ 4xx/5xx без структурированной ошибки в теле.

    Args:
        status_code: HTTP статус
        response: Response
        message: Сообщение (по умолчанию содержит статус код)
    """
    fatal = True

    def __init__(self, status_code: int, response=None, message: str = ""):
        self.status_code = status_code
        self.response = response
        super().__init__(message or f"hcloud: server responded with status code {status_code}")


class ErrorCode(str, Enum):
    """Известные коды ошибок API. Неизвестные коды приходят как обычные строки."""
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    INVALID_INPUT = "invalid_input"
    JSON_ERROR = "json_error"
    LOCKED = "locked"
    NOT_FOUND = "not_found"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    RESOURCE_LIMIT_EXCEEDED = "resource_limit_exceeded"
    RESOURCE_UNAVAILABLE = "resource_unavailable"
    SERVICE_ERROR = "service_error"
    UNIQUENESS_ERROR = "uniqueness_error"
    PROTECTED = "protected"
    MAINTENANCE = "maintenance"
    CONFLICT = "conflict"
    UNSUPPORTED_ERROR = "unsupported_error"
    TOKEN_READONLY = "token_readonly"
    UNAVAILABLE = "unavailable"
    SERVER_NOT_STOPPED = "server_not_stopped"
    ACTION_FAILED = "action_failed"


class ErrorDetails:
    """Базовый класс для details, тип определяется кодом ошибки."""


@dataclass(frozen=True)
class InvalidInputField:
    """Поле с ошибками валидации."""
    name: str
    messages: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class InvalidInputDetails(ErrorDetails):
    """Details для кода invalid_input."""
    fields: List[InvalidInputField] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'InvalidInputDetails':
        fields = []
        for item in data.get("fields") or []:
            if not isinstance(item, Mapping):
                continue
            fields.append(InvalidInputField(
                name=str(item.get("name", "")),
                messages=[str(m) for m in item.get("messages") or []],
            ))
        return cls(fields=fields)


# Парсеры details по коду ошибки
ERROR_DETAILS_PARSERS: Dict[str, Callable[[Mapping[str, Any]], ErrorDetails]] = {
    ErrorCode.INVALID_INPUT.value: InvalidInputDetails.from_dict,
}


class APIError(HTTPError):
    """
    Структурированная ошибка API.

    Args:
        code: Код ошибки (см. ErrorCode, список не исчерпывающий)
        message: Сообщение от API
        details: Типизированные details или None
        status_code: HTTP статус
        response: Response

    Examples:
        >>> err = APIError("not_found", "no such resource", status_code=404)
        >>> err.code == ErrorCode.NOT_FOUND
        True
        >>> str(err)
        'no such resource (not_found)'
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[ErrorDetails] = None,
        status_code: int = 0,
        response=None
    ):
        self.code = code
        self.details = details
        super().__init__(status_code, response, f"{message} ({code})")
        self.message = message

    @property
    def retryable(self) -> bool:
        """Повторять только при исчерпании rate limit."""
        return self.code == ErrorCode.RATE_LIMIT_EXCEEDED

    @property
    def fatal(self) -> bool:
        return not self.retryable

    @classmethod
    def from_schema(cls, schema: Mapping[str, Any], status_code: int = 0, response=None) -> 'APIError':
        """
        Построить APIError из тела ``{"code", "message", "details"}``.

        Details разбираются только для известных кодов, иначе None.
        """
        code = str(schema.get("code") or "")
        details = None
        raw_details = schema.get("details")
        parser = ERROR_DETAILS_PARSERS.get(code)
        if parser is not None and isinstance(raw_details, Mapping):
            details = parser(raw_details)

        return cls(
            code=code,
            message=str(schema.get("message") or ""),
            details=details,
            status_code=status_code,
            response=response,
        )

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# СПЕЦИАЛЬНЫЕ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TooManyRetriesError(HCloudException):
    """
    Исчерпан лимит повторов при rate limit (только если задан max_retries).

    Args:
        max_retries: Лимит повторов
        last_error: Последняя ошибка
        url: URL
    """
    fatal = True

    def __init__(
        self,
        max_retries: int,
        last_error: Optional[Exception] = None,
        url: Optional[str] = None
    ):
        self.max_retries = max_retries
        self.last_error = last_error
        self.url = url

        msg = f"Max retries ({max_retries}) exceeded"
        if url:
            msg += f" for {url}"
        if last_error:
            msg += f". Last error: {str(last_error)}"

        super().__init__(msg)
