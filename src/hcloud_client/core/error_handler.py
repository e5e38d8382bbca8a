# src/hcloud_client/core/error_handler.py

import json
from typing import Optional

from requests.exceptions import (
    ConnectionError as RequestsConnectionError,
)
from requests.exceptions import (
    RequestException,
    Timeout,
)

from .exceptions import (
    APIError,
    ConnectionError,
    HCloudException,
    HTTPError,
    TimeoutError,
    TransportError,
)
from .response import Response, is_json_content_type


class ErrorHandler:
    """Классификация ошибок: тело ответа API и исключения транспорта"""

    @staticmethod
    def error_from_response(response: Response) -> Optional[APIError]:
        """
        Разобрать тело ответа в структурированную ошибку.

        Возвращает None, если тело не JSON, не парсится, не имеет формы
        ``{"error": {...}}``, code или message не строки, либо оба пустые. Ошибка
        декодирования здесь ожидаема (страница прокси и т.п.) и не пробрасывается.
        """
        if not is_json_content_type(response.headers):
            return None

        try:
            body = json.loads(response.content)
        except ValueError:
            return None

        if not isinstance(body, dict):
            return None
        error = body.get("error")
        if not isinstance(error, dict):
            return None

        code = error.get("code")
        message = error.get("message")
        if not isinstance(code, (str, type(None))) or not isinstance(message, (str, type(None))):
            return None

        if not code and not message:
            return None

        return APIError.from_schema(error, status_code=response.status_code, response=response)

    @staticmethod
    def error_for_status(response: Response) -> HTTPError:
        """Структурированная ошибка, либо общий HTTPError со статус кодом."""
        error = ErrorHandler.error_from_response(response)
        if error is None:
            return HTTPError(response.status_code, response)
        return error

    @staticmethod
    def handle_transport_exception(error: Exception, url: str) -> HCloudException:
        """Преобразует исключения requests/httpx в наши TransportError"""

        if isinstance(error, Timeout):
            return TimeoutError(f"Request timeout: {error}", url)

        elif isinstance(error, RequestsConnectionError):
            return ConnectionError(f"Connection error: {error}", url)

        elif isinstance(error, RequestException):
            return TransportError(f"Request failed: {error}", url)

        # httpx опционален
        try:
            import httpx
        except ImportError:
            httpx = None

        if httpx is not None:
            if isinstance(error, httpx.TimeoutException):
                return TimeoutError(f"Request timeout: {error}", url)
            elif isinstance(error, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError)):
                return ConnectionError(f"Connection error: {error}", url)
            elif isinstance(error, httpx.TooManyRedirects):
                return TransportError(f"Too many redirects: {error}", url)
            elif isinstance(error, httpx.RequestError):
                return TransportError(f"Request failed: {error}", url)

        return TransportError(f"Unexpected error: {error}", url)

    @staticmethod
    def is_rate_limited(error: Exception) -> bool:
        """Проверяет, является ли ошибка исчерпанием rate limit"""
        return isinstance(error, APIError) and error.retryable
