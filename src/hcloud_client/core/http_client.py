# src/hcloud_client/core/http_client.py
import shutil
import io
import time
from dataclasses import replace
from typing import Any, BinaryIO, Callable, List, Optional, Tuple, TYPE_CHECKING
from urllib.parse import urlparse

import requests
from requests.exceptions import RequestException

from .config import ClientConfig, ListOpts
from .context import RequestContext
from .error_handler import ErrorHandler
from .exceptions import (
    DecodeError,
    DeadlineExceededError,
    MetaDecodeError,
    RequestBuildError,
    RequestCancelledError,
    TooManyRetriesError,
)
from .logging.filters import set_correlation_id, reset_correlation_id
from .pagination import PageFetcher, all_pages
from .request import Request, build_headers, encode_body
from .response import Response
from .retry_engine import RetryEngine, raise_if_done
from .transport import SessionTransport, default_session_factory

# Delayed import to avoid circular dependency
if TYPE_CHECKING:
    from .logging import HCloudLogger


def with_query(path: str, opts: ListOpts) -> str:
    """Append list options to a path, omitting unset values."""
    query = opts.to_query()
    if not query:
        return path
    separator = "&" if "?" in path else "?"
    return f"{path}{separator}{query}"


class HCloudClient:
    """
    Клиент Hetzner Cloud API.

    Строит запросы, выполняет их с повтором при rate limit, разбирает
    метаданные ответа и ошибки API, обходит постраничные коллекции.

    Features:
        - Immutable конфигурация для потокобезопасности
        - Thread-safe: каждый поток получает собственную сессию
        - Повтор только при ошибке rate_limit_exceeded, с BackoffFunc
        - Отмена и deadline через RequestContext

    Example:
        >>> with HCloudClient(token="secret") as client:
        ...     request = client.new_request("GET", "/servers")
        ...     response, body = client.fetch_decoded(request)
        ...     print(response.meta.ratelimit.remaining, len(body["servers"]))
    """

    def __init__(
        self,
        token: Optional[str] = None,
        endpoint: Optional[str] = None,
        config: Optional[ClientConfig] = None,
        transport: Optional[SessionTransport] = None,
        **kwargs
    ):
        """
        Initialize client.

        Args:
            token: API токен (переопределяет config.token)
            endpoint: Базовый URL (переопределяет config.endpoint)
            config: ClientConfig instance
            transport: SessionTransport (по умолчанию создаётся клиентом)
            **kwargs: Параметры для ClientConfig.create, если config не указан
        """
        if config is None:
            config = ClientConfig.create(endpoint=endpoint, token=token or "", **kwargs)
        else:
            if kwargs:
                raise TypeError(
                    f"Unexpected arguments with config: {', '.join(sorted(kwargs))}"
                )
            if token is not None:
                config = config.with_token(token)
            if endpoint is not None:
                config = config.with_endpoint(endpoint)

        object.__setattr__(self, '_config', config)
        object.__setattr__(self, '_owns_transport', transport is None)
        object.__setattr__(
            self,
            '_transport',
            transport or SessionTransport(default_session_factory(config.pool))
        )

        # Initialize logger if logging config provided
        logger_instance: Optional['HCloudLogger'] = None
        if config.logging:
            from .logging import HCloudLogger
            netloc = urlparse(config.endpoint).netloc or "unknown"
            logger_instance = HCloudLogger(config=config.logging, name=f"hcloud_client.{netloc}")

        object.__setattr__(self, '_logger', logger_instance)
        object.__setattr__(self, '_initialized', True)

    def __setattr__(self, name, value):
        """Запретить изменение после init (immutability)."""
        if hasattr(self, '_initialized'):
            raise RuntimeError(
                f"Cannot modify '{name}' - HCloudClient is immutable. "
                f"Create new instance instead."
            )
        object.__setattr__(self, name, value)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self):
        """
        Закрывает логгер и (если клиент создал его сам) транспорт.
        """
        if self._logger is not None:
            self._logger.close()

        if self._owns_transport:
            self._transport.close()

    # ==================== Построение запроса ====================

    def new_request(
        self,
        method: str,
        path: str,
        body: Any = None,
        ctx: Optional[RequestContext] = None
    ) -> Request:
        """
        Создать запрос к API. Сетевых операций нет.

        Args:
            method: HTTP метод
            path: Путь относительно endpoint (например "/servers?page=2")
            body: Тело (bytes, str, бинарный поток или dict/list для JSON)
            ctx: RequestContext (по умолчанию новый, без deadline)

        Returns:
            Request с заголовками User-Agent, Authorization и
            Content-Type (только при наличии тела)

        Raises:
            RequestBuildError: Невалидный URL или тело
        """
        url = self._config.endpoint + path
        data = encode_body(body)
        headers = build_headers(self._config.user_agent, self._config.token, body is not None)

        try:
            prepared = requests.Request(
                method=method.upper(),
                url=url,
                headers=headers,
                data=data,
            ).prepare()
        except (RequestException, ValueError) as e:
            raise RequestBuildError(f"Invalid request URL {url!r}: {e}") from e

        return Request(
            method=method.upper(),
            url=url,
            headers=headers,
            body=data,
            context=ctx or RequestContext(),
            prepared=prepared,
        )

    # ==================== Выполнение ====================

    def _send(self, request: Request) -> Response:
        """
        Одна попытка: отправить запрос и буферизовать тело.

        Ошибки транспорта не ретраятся.
        """
        ctx = request.context
        raise_if_done(ctx, request.url)

        timeout = self._config.timeout.as_tuple()
        remaining = ctx.remaining()
        if remaining is not None:
            if remaining <= 0:
                raise DeadlineExceededError("Request deadline exceeded", request.url)
            timeout = (min(timeout[0], remaining), min(timeout[1], remaining))

        try:
            raw = self._transport.send(request.prepared, timeout=timeout)
        except RequestException as e:
            if ctx.expired:
                raise DeadlineExceededError("Request deadline exceeded", request.url) from e
            raise ErrorHandler.handle_transport_exception(e, request.url) from e

        if ctx.cancelled:
            raise RequestCancelledError("Request cancelled", request.url)

        return Response(raw, raw.content)

    def do(self, request: Request) -> Response:
        """
        Выполнить запрос с повтором при rate limit.

        Args:
            request: Request из new_request (при повторе отправляется как есть)

        Returns:
            Response с заполненными meta данными

        Raises:
            TransportError: Ошибка соединения/таймаут/отмена (без повтора)
            MetaDecodeError: JSON ответ с битыми meta данными (без повтора)
            APIError: Структурированная ошибка API (кроме rate limit)
            HTTPError: 4xx/5xx без структурированной ошибки
            TooManyRetriesError: Исчерпан config.max_retries
        """
        ctx = request.context
        engine = RetryEngine(self._config.backoff, self._config.max_retries)
        token = set_correlation_id(ctx.request_id)
        start_time = time.monotonic()

        try:
            if self._logger:
                self._logger.debug("Request started", method=request.method, url=request.url)

            while True:
                response = self._send(request)

                try:
                    response.read_meta()
                except MetaDecodeError as e:
                    if self._logger:
                        self._logger.error(
                            "Request failed",
                            method=request.method,
                            url=request.url,
                            status_code=response.status_code,
                            error=str(e),
                            error_type=type(e).__name__,
                        )
                    raise

                if response.is_error:
                    error = ErrorHandler.error_for_status(response)

                    if engine.should_retry(error):
                        if engine.exhausted:
                            raise TooManyRetriesError(
                                max_retries=engine.max_retries,
                                last_error=error,
                                url=request.url
                            ) from error

                        if self._logger:
                            self._logger.warning(
                                "Rate limit exceeded (will retry)",
                                method=request.method,
                                url=request.url,
                                retries=engine.attempt,
                                wait_time_s=round(engine.get_wait_time(), 3),
                                ratelimit_reset=str(response.meta.ratelimit.reset),
                            )

                        engine.wait(ctx, request.url)
                        engine.increment()
                        continue

                    if self._logger:
                        self._logger.error(
                            "Request failed",
                            method=request.method,
                            url=request.url,
                            status_code=response.status_code,
                            error=str(error),
                            error_code=getattr(error, 'code', None),
                        )
                    raise error

                if self._logger:
                    self._logger.info(
                        "Request completed",
                        method=request.method,
                        url=request.url,
                        status_code=response.status_code,
                        duration_ms=round((time.monotonic() - start_time) * 1000, 2),
                        retries=engine.attempt,
                        ratelimit_remaining=response.meta.ratelimit.remaining,
                    )
                return response
        finally:
            reset_correlation_id(token)

    def fetch_raw(self, request: Request, sink: BinaryIO) -> Response:
        """
        Выполнить запрос и записать тело ответа в бинарный sink.

        Example:
            >>> with open("metrics.json", "wb") as f:
            ...     client.fetch_raw(client.new_request("GET", "/servers/1/metrics"), f)
        """
        response = self.do(request)
        shutil.copyfileobj(io.BytesIO(response.content), sink)
        return response

    def fetch_decoded(
        self,
        request: Request,
        decoder: Optional[Callable[[Any], Any]] = None
    ) -> Tuple[Response, Any]:
        """
        Выполнить запрос и декодировать JSON тело.

        Args:
            request: Request
            decoder: Функция, применяемая к распарсенному JSON (например,
                конструктор модели)

        Returns:
            (Response, декодированное значение)

        Raises:
            DecodeError: Тело не декодируется; e.response доступен
        """
        response = self.do(request)
        return response, decode_body(response, decoder)

    # ==================== Пагинация ====================

    def all(self, fetch: PageFetcher) -> Response:
        """
        Обойти все страницы, начиная с 1, по meta.pagination.next_page.

        Returns:
            Response последней страницы
        """
        return all_pages(fetch)

    def collect_all(
        self,
        path: str,
        key: str,
        opts: Optional[ListOpts] = None,
        ctx: Optional[RequestContext] = None
    ) -> List[Any]:
        """
        Собрать элементы коллекции со всех страниц.

        Args:
            path: Путь коллекции, например "/servers"
            key: Ключ списка в теле ответа, например "servers"
            opts: ListOpts (page подставляется драйвером пагинации)
            ctx: RequestContext на весь обход (deadline общий для всех страниц)

        Example:
            >>> servers = client.collect_all("/servers", "servers",
            ...                              ListOpts(per_page=50, label_selector="env=prod"))
        """
        opts = opts or ListOpts()
        ctx = ctx or RequestContext()
        items: List[Any] = []

        def fetch(page: int) -> Response:
            request = self.new_request("GET", with_query(path, replace(opts, page=page)), ctx=ctx)
            response, page_items = self.fetch_decoded(request, decoder=items_decoder(key))
            items.extend(page_items)
            return response

        self.all(fetch)
        return items

    # ==================== Свойства ====================

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def endpoint(self) -> str:
        """Endpoint (read-only)."""
        return self._config.endpoint

    @property
    def user_agent(self) -> str:
        return self._config.user_agent

    @property
    def poll_interval(self) -> float:
        """Интервал опроса action'ов (сек) для вызывающего кода."""
        return self._config.poll_interval


def decode_body(response: Response, decoder: Optional[Callable[[Any], Any]] = None) -> Any:
    """Decode the buffered JSON body, keeping the response on failure."""
    try:
        value = response.json()
        if decoder is not None:
            value = decoder(value)
    except (ValueError, TypeError, KeyError) as e:
        raise DecodeError(f"hcloud: error decoding response body: {e}", response=response) from e
    return value


def items_decoder(key: str) -> Callable[[Any], List[Any]]:
    """Decoder extracting the list under ``key`` (null means empty)."""

    def decode(body: Any) -> List[Any]:
        if not isinstance(body, dict):
            raise TypeError(f"expected JSON object, got {type(body).__name__}")
        items = body[key]
        if items is None:
            return []
        if not isinstance(items, list):
            raise TypeError(f"'{key}' is not a list")
        return items

    return decode
