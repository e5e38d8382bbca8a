"""
Система конфигурации для Hetzner Cloud клиента.

Все конфиги immutable (frozen dataclasses) для потокобезопасности.
"""

from dataclasses import dataclass, field, replace
from importlib.metadata import version, PackageNotFoundError
from typing import Dict, Optional, Tuple, Union, TYPE_CHECKING
from urllib.parse import urlencode

from .backoff import BackoffFunc, exponential_backoff

if TYPE_CHECKING:
    from .logging import LoggingConfig

# Version info - read from package metadata (single source of truth in pyproject.toml)
try:
    LIBRARY_VERSION = version("hcloud-client-core")
except PackageNotFoundError:
    # Package is not installed (development mode)
    LIBRARY_VERSION = "0.0.0-dev"

# Base URL of the API
DEFAULT_ENDPOINT = "https://api.hetzner.cloud/v1"

# Library part of the User-Agent header sent with each request
LIBRARY_NAME = "hcloud-go"
USER_AGENT = f"{LIBRARY_NAME}/{LIBRARY_VERSION}"

DEFAULT_POLL_INTERVAL = 0.5


def build_user_agent(application_name: str = "", application_version: str = "") -> str:
    """
    Собрать User-Agent из имени/версии приложения и версии библиотеки.

    Examples:
        >>> build_user_agent("foo", "1.0")     # 'foo/1.0 hcloud-go/<ver>'
        >>> build_user_agent("foo")            # 'foo hcloud-go/<ver>'
        >>> build_user_agent()                 # 'hcloud-go/<ver>'
    """
    if application_name and application_version:
        return f"{application_name}/{application_version} {USER_AGENT}"
    if application_name:
        return f"{application_name} {USER_AGENT}"
    return USER_AGENT

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TIMEOUT CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class TimeoutConfig:
    """
    Конфигурация таймаутов транспорта.

    Args:
        connect: Таймаут подключения (сек)
        read: Таймаут чтения данных (сек)

    Examples:
        >>> TimeoutConfig(connect=5, read=30)
    """
    connect: float = 5
    read: float = 30

    def __post_init__(self):
        """Валидация."""
        if self.connect <= 0:
            raise ValueError("connect timeout must be positive")
        if self.read <= 0:
            raise ValueError("read timeout must be positive")

    def as_tuple(self) -> Tuple[float, float]:
        """Вернуть как (connect, read) для requests."""
        return (self.connect, self.read)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# CONNECTION POOL CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class ConnectionPoolConfig:
    """
    Конфигурация connection pool.

    Args:
        pool_connections: Количество connection pools для кеширования
        pool_maxsize: Максимум соединений в пуле
    """
    pool_connections: int = 10
    pool_maxsize: int = 10

    def __post_init__(self):
        """Валидация."""
        if self.pool_connections <= 0:
            raise ValueError("pool_connections must be positive")
        if self.pool_maxsize <= 0:
            raise ValueError("pool_maxsize must be positive")

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# LIST OPTIONS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class ListOpts:
    """
    Параметры для list запросов.

    Нулевые/пустые значения не сериализуются.

    Args:
        page: Страница (начиная с 1, 0 = не задано)
        per_page: Элементов на странице (0 = значение по умолчанию)
        label_selector: Label selector для фильтрации

    Examples:
        >>> ListOpts(page=2).to_query()
        'page=2'
        >>> ListOpts().to_query()
        ''
    """
    page: int = 0
    per_page: int = 0
    label_selector: str = ""

    def values(self) -> Dict[str, str]:
        """Query параметры (только заданные)."""
        vals: Dict[str, str] = {}
        if self.page > 0:
            vals["page"] = str(self.page)
        if self.per_page > 0:
            vals["per_page"] = str(self.per_page)
        if self.label_selector:
            vals["label_selector"] = self.label_selector
        return vals

    def to_query(self) -> str:
        """Закодированная query строка."""
        return urlencode(self.values())

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# MAIN CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def _default_backoff() -> BackoffFunc:
    return exponential_backoff(2, 0.5)


@dataclass(frozen=True)
class ClientConfig:
    """
    Главная конфигурация HCloudClient.

    Immutable после создания. user_agent вычисляется из application_name и
    application_version и доступен только для чтения.

    Args:
        endpoint: Базовый URL API (trailing slashes обрезаются)
        token: API токен (пустой токен тоже отправляется)
        poll_interval: Интервал опроса action'ов (сек), движок его не использует
        backoff: BackoffFunc для повторов при rate limit
        application_name: Имя приложения для User-Agent
        application_version: Версия приложения для User-Agent
        timeout: Конфигурация таймаутов
        pool: Конфигурация connection pool
        max_retries: Максимум повторов при rate limit (None = без ограничения)
        logging: Конфигурация логирования (None = без логирования)

    Examples:
        >>> config = ClientConfig(token="secret")
        >>> config = ClientConfig.create(token="secret", max_retries=5)
        >>> config = config.with_application("my-app", "1.0")
    """
    endpoint: str = DEFAULT_ENDPOINT
    token: str = ""
    poll_interval: float = DEFAULT_POLL_INTERVAL
    backoff: BackoffFunc = field(default_factory=_default_backoff)
    application_name: str = ""
    application_version: str = ""

    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    pool: ConnectionPoolConfig = field(default_factory=ConnectionPoolConfig)
    max_retries: Optional[int] = None
    logging: Optional['LoggingConfig'] = None

    user_agent: str = field(init=False, default=USER_AGENT)

    def __post_init__(self):
        """Normalize endpoint, validate and derive user agent."""
        if self.endpoint:
            normalized = self.endpoint.rstrip('/')
            if normalized != self.endpoint:
                object.__setattr__(self, 'endpoint', normalized)

        if self.poll_interval < 0:
            raise ValueError("poll_interval must be non-negative")
        if self.max_retries is not None and self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if not callable(self.backoff):
            raise ValueError("backoff must be callable")

        object.__setattr__(
            self,
            'user_agent',
            build_user_agent(self.application_name, self.application_version)
        )

    @classmethod
    def create(
        cls,
        endpoint: Optional[str] = None,
        token: str = "",
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        backoff: Optional[BackoffFunc] = None,
        application_name: str = "",
        application_version: str = "",
        timeout: Union[float, Tuple[float, float], TimeoutConfig] = 30,
        max_retries: Optional[int] = None,
        logging: Optional['LoggingConfig'] = None,
        **kwargs
    ) -> 'ClientConfig':
        """
        Удобный конструктор конфигурации.

        Args:
            endpoint: Базовый URL (None = DEFAULT_ENDPOINT)
            token: API токен
            poll_interval: Интервал опроса (сек)
            backoff: BackoffFunc (None = exponential_backoff(2, 0.5))
            application_name: Имя приложения
            application_version: Версия приложения
            timeout: Таймаут (число, (connect, read) или TimeoutConfig)
            max_retries: Лимит повторов при rate limit
            logging: Конфигурация логирования

        Examples:
            >>> config = ClientConfig.create(token="secret", timeout=60)
            >>> config = ClientConfig.create(token="secret", timeout=(5, 60))
        """
        return cls(
            endpoint=endpoint or DEFAULT_ENDPOINT,
            token=token,
            poll_interval=poll_interval,
            backoff=backoff or _default_backoff(),
            application_name=application_name,
            application_version=application_version,
            timeout=_timeout_config(timeout),
            max_retries=max_retries,
            logging=logging,
            **kwargs
        )

    def with_endpoint(self, endpoint: str) -> 'ClientConfig':
        """Новый конфиг с другим endpoint."""
        return replace(self, endpoint=endpoint)

    def with_token(self, token: str) -> 'ClientConfig':
        """Новый конфиг с другим токеном."""
        return replace(self, token=token)

    def with_poll_interval(self, poll_interval: float) -> 'ClientConfig':
        """Новый конфиг с другим интервалом опроса."""
        return replace(self, poll_interval=poll_interval)

    def with_backoff(self, backoff: BackoffFunc) -> 'ClientConfig':
        """Новый конфиг с другой BackoffFunc."""
        return replace(self, backoff=backoff)

    def with_application(self, name: str, version: str = "") -> 'ClientConfig':
        """
        Новый конфиг с именем и версией приложения.

        Версия может быть пустой. Имя приложения желательно задавать всегда.
        """
        return replace(self, application_name=name, application_version=version)

    def with_max_retries(self, max_retries: Optional[int]) -> 'ClientConfig':
        """Новый конфиг с лимитом повторов при rate limit."""
        return replace(self, max_retries=max_retries)

    def with_timeout(self, timeout: Union[float, Tuple[float, float], TimeoutConfig]) -> 'ClientConfig':
        """Новый конфиг с другим таймаутом."""
        return replace(self, timeout=_timeout_config(timeout))


def _timeout_config(timeout: Union[float, Tuple[float, float], TimeoutConfig]) -> TimeoutConfig:
    if isinstance(timeout, TimeoutConfig):
        return timeout
    if isinstance(timeout, tuple):
        return TimeoutConfig(connect=timeout[0], read=timeout[1])
    return TimeoutConfig(connect=5, read=timeout)
