import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from supabase import AsyncClient, acreate_client

from vaultshare.config import Settings
from vaultshare.core.errors import (
    ConfigurationError, RetryExhaustedError, is_backend_reported, to_backend_error,
)
from vaultshare.core.retry import with_retry

logger = logging.getLogger(__name__)

PLACEHOLDER_URL = "https://placeholder.supabase.co"
PLACEHOLDER_KEY = "placeholder.anon.key"

HEALTH_PROBE_RETRIES = 2


@dataclass(frozen=True)
class ConnectionConfig:
    url: str
    anon_key: str
    placeholder: bool = False


def resolve_connection_config(settings: Settings, strict: bool = True) -> ConnectionConfig:
    """Resolve backend credentials; strict mode refuses to start without them."""
    missing = []
    if not settings.supabase_url:
        missing.append("SUPABASE_URL")
    if not settings.supabase_anon_key:
        missing.append("SUPABASE_ANON_KEY")

    if not missing:
        return ConnectionConfig(url=settings.supabase_url, anon_key=settings.supabase_anon_key)
    if strict:
        raise ConfigurationError(f"Missing environment variable: {missing[0]}")

    logger.warning(
        "Supabase environment variables not set (%s); using placeholder values",
        ", ".join(missing),
    )
    return ConnectionConfig(url=PLACEHOLDER_URL, anon_key=PLACEHOLDER_KEY, placeholder=True)


class BackendConnector:
    """Owns the connection configuration and the single async client for the process.

    Construct once at startup and hand the same instance to every repository.
    """

    def __init__(self, settings: Settings, strict: Optional[bool] = None):
        self.settings = settings
        self.strict = settings.strict_config if strict is None else strict
        self.config = resolve_connection_config(settings, self.strict)
        self._client: Optional[AsyncClient] = None
        self._probe_task: Optional[asyncio.Task] = None

    @property
    def photos_bucket(self) -> str:
        return self.settings.photos_bucket

    async def connect(self) -> AsyncClient:
        if self._client is None:
            self._client = await acreate_client(self.config.url, self.config.anon_key)
        return self._client

    @property
    def client(self) -> AsyncClient:
        if self._client is None:
            raise RuntimeError("BackendConnector.connect() must be awaited before use")
        return self._client

    def use_client(self, client: AsyncClient) -> None:
        """Attach an already-built client (tests, scripts sharing a client)."""
        self._client = client

    def table(self, name: str):
        return self.client.table(name)

    def bucket(self):
        return self.client.storage.from_(self.photos_bucket)

    async def check_health(self) -> bool:
        """Existence probe against profiles; a missing relation still proves connectivity."""

        async def probe():
            try:
                await self.table("profiles").select("id").limit(1).execute()
            except Exception as e:
                if is_backend_reported(e) and to_backend_error(e).is_missing_relation:
                    logger.info("profiles relation missing; backend reachable")
                    return
                raise

        try:
            await with_retry(probe, max_retries=HEALTH_PROBE_RETRIES, label="backend health check")
        except RetryExhaustedError as e:
            logger.error(f"Backend unreachable: {e}")
            return False
        except Exception as e:
            logger.error(f"Backend health check failed: {e}")
            return False
        logger.info("Backend connection healthy")
        return True

    async def _delayed_probe(self, delay: float) -> bool:
        await asyncio.sleep(delay)
        return await self.check_health()

    def schedule_health_probe(self, delay: Optional[float] = None) -> asyncio.Task:
        """Start the best-effort startup probe in the background and return its task."""
        if delay is None:
            delay = self.settings.health_probe_delay
        self._probe_task = asyncio.create_task(self._delayed_probe(delay))
        return self._probe_task

    async def close(self) -> None:
        if self._probe_task is not None and not self._probe_task.done():
            self._probe_task.cancel()
        self._probe_task = None
        self._client = None
