# src/hcloud_client/async_client.py
"""
Асинхронный клиент Hetzner Cloud API на базе httpx.

Та же логика, что и у HCloudClient (классификация ошибок, meta данные,
повтор при rate limit), но ожидание backoff - точка приостановки
asyncio, а не блокировка потока.
"""

import asyncio
import io
import shutil
import time
from dataclasses import replace
from typing import Any, Awaitable, BinaryIO, Callable, List, Optional, Tuple

try:
    import httpx
except ImportError:
    raise ImportError(
        "httpx is required for AsyncHCloudClient. "
        "Install with: pip install hcloud-client-core[async]"
    )

from .core.config import ClientConfig, ListOpts
from .core.context import RequestContext
from .core.error_handler import ErrorHandler
from .core.exceptions import (
    MetaDecodeError,
    RequestBuildError,
    RequestCancelledError,
    TooManyRetriesError,
)
from .core.http_client import decode_body, items_decoder, with_query
from .core.logging.filters import set_correlation_id, reset_correlation_id
from .core.pagination import async_all_pages
from .core.request import Request, build_headers, encode_body
from .core.response import Response
from .core.retry_engine import RetryEngine, raise_if_done


class AsyncHCloudClient:
    """
    Асинхронный клиент Hetzner Cloud API.

    Example:
        >>> async with AsyncHCloudClient(token="secret") as client:
        ...     request = client.new_request("GET", "/servers")
        ...     response, body = await client.fetch_decoded(request)

    Каждый вызов стоит запускать в своей задаче: ожидание backoff одного
    вызова не блокирует остальные.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        endpoint: Optional[str] = None,
        *,
        config: Optional[ClientConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        **kwargs: Any,
    ):
        """
        Args:
            token: API токен (переопределяет config.token)
            endpoint: Базовый URL (переопределяет config.endpoint)
            config: ClientConfig
            http_client: Готовый httpx.AsyncClient (не закрывается клиентом)
            **kwargs: Параметры ClientConfig.create, если config не указан
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

        self._config = config
        self._client: Optional[httpx.AsyncClient] = http_client
        self._owns_client = http_client is None

        self._logger = None
        if config.logging:
            from .core.logging import HCloudLogger
            netloc = httpx.URL(config.endpoint).host or "unknown"
            self._logger = HCloudLogger(config=config.logging, name=f"hcloud_client.{netloc}")

    def _get_client(self) -> httpx.AsyncClient:
        """Получить или создать httpx клиент."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(
                    connect=self._config.timeout.connect,
                    read=self._config.timeout.read,
                    write=self._config.timeout.read,
                    pool=self._config.timeout.connect,
                ),
                limits=httpx.Limits(
                    max_connections=self._config.pool.pool_maxsize,
                    max_keepalive_connections=self._config.pool.pool_connections,
                ),
                follow_redirects=True,
            )
        return self._client

    async def __aenter__(self) -> "AsyncHCloudClient":
        self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Закрыть клиент и освободить ресурсы."""
        if self._logger is not None:
            self._logger.close()
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    # ==================== Построение запроса ====================

    def new_request(
        self,
        method: str,
        path: str,
        body: Any = None,
        ctx: Optional[RequestContext] = None,
    ) -> Request:
        """
        Создать запрос к API (см. HCloudClient.new_request).

        Raises:
            RequestBuildError: Невалидный URL или тело
        """
        url = self._config.endpoint + path
        data = encode_body(body)
        headers = build_headers(self._config.user_agent, self._config.token, body is not None)

        try:
            prepared = httpx.Request(method.upper(), url, headers=headers, content=data)
        except (httpx.InvalidURL, ValueError, TypeError) as e:
            raise RequestBuildError(f"Invalid request URL {url!r}: {e}") from e

        if prepared.url.scheme not in ("http", "https") or not prepared.url.host:
            raise RequestBuildError(f"Invalid request URL {url!r}: missing scheme or host")

        return Request(
            method=method.upper(),
            url=url,
            headers=headers,
            body=data,
            context=ctx or RequestContext(),
            prepared=prepared,
        )

    # ==================== Выполнение ====================

    async def _send(self, request: Request) -> Response:
        """
        Одна попытка. Отправка идёт в отдельной задаче, чтобы отмена
        контекста или deadline прерывали её, не дожидаясь ответа.
        """
        ctx = request.context
        raise_if_done(ctx, request.url)

        client = self._get_client()
        task = asyncio.ensure_future(client.send(request.prepared))

        try:
            while True:
                done, _ = await asyncio.wait({task}, timeout=ctx.poll_interval())
                if done:
                    break
                if ctx.done:
                    task.cancel()
                    raise_if_done(ctx, request.url)
            raw = task.result()
        except httpx.RequestError as e:
            raise ErrorHandler.handle_transport_exception(e, request.url) from e
        finally:
            if not task.done():
                task.cancel()

        if ctx.cancelled:
            raise RequestCancelledError("Request cancelled", request.url)

        return Response(raw, raw.content)

    async def do(self, request: Request) -> Response:
        """
        Выполнить запрос с повтором при rate limit (см. HCloudClient.do).

        Raises:
            TransportError, MetaDecodeError, APIError, HTTPError,
            TooManyRetriesError
        """
        ctx = request.context
        engine = RetryEngine(self._config.backoff, self._config.max_retries)
        token = set_correlation_id(ctx.request_id)
        start_time = time.monotonic()

        try:
            if self._logger:
                self._logger.debug("Request started", method=request.method, url=request.url)

            while True:
                response = await self._send(request)

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
                                url=request.url,
                            ) from error

                        if self._logger:
                            self._logger.warning(
                                "Rate limit exceeded (will retry)",
                                method=request.method,
                                url=request.url,
                                retries=engine.attempt,
                                wait_time_s=round(engine.get_wait_time(), 3),
                            )

                        await engine.async_wait(ctx, request.url)
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
                    )
                return response
        finally:
            reset_correlation_id(token)

    async def fetch_raw(self, request: Request, sink: BinaryIO) -> Response:
        """Выполнить запрос и записать тело ответа в бинарный sink."""
        response = await self.do(request)
        shutil.copyfileobj(io.BytesIO(response.content), sink)
        return response

    async def fetch_decoded(
        self,
        request: Request,
        decoder: Optional[Callable[[Any], Any]] = None,
    ) -> Tuple[Response, Any]:
        """Выполнить запрос и декодировать JSON тело."""
        response = await self.do(request)
        return response, decode_body(response, decoder)

    # ==================== Пагинация ====================

    async def all(self, fetch: Callable[[int], Awaitable[Response]]) -> Response:
        """Обойти все страницы по meta.pagination.next_page."""
        return await async_all_pages(fetch)

    async def collect_all(
        self,
        path: str,
        key: str,
        opts: Optional[ListOpts] = None,
        ctx: Optional[RequestContext] = None,
    ) -> List[Any]:
        """Собрать элементы коллекции со всех страниц."""
        opts = opts or ListOpts()
        ctx = ctx or RequestContext()
        items: List[Any] = []

        async def fetch(page: int) -> Response:
            request = self.new_request("GET", with_query(path, replace(opts, page=page)), ctx=ctx)
            response, page_items = await self.fetch_decoded(request, decoder=items_decoder(key))
            items.extend(page_items)
            return response

        await self.all(fetch)
        return items

    # ==================== Свойства ====================

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def endpoint(self) -> str:
        return self._config.endpoint

    @property
    def user_agent(self) -> str:
        return self._config.user_agent

    @property
    def poll_interval(self) -> float:
        return self._config.poll_interval
