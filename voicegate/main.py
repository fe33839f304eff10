"""
Main FastAPI application.

Following Sandi Metz:
- Single Responsibility: Application setup and configuration
- Small methods: Each lifecycle stage isolated
- Clear naming: Descriptive function names
"""

import asyncio
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware

from voicegate import __version__
from voicegate.agent.base import ConversationAgent
from voicegate.agent.openai_agent import OpenAIConversationAgent
from voicegate.api.middleware import (
    InMemoryRateLimiter,
    RateLimitConfig,
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    default_logging_config,
)
from voicegate.api.routes import cache, chat, health, metrics, sessions, voice
from voicegate.cache.cache_service import CacheService
from voicegate.config import AppConfig, config
from voicegate.monitoring.request_metrics import RequestMetrics
from voicegate.pool.connection_pool import ConnectionPool, PoolConfig
from voicegate.pool.speech_handle import (
    SpeechHandle,
    SpeechHandleFactory,
    close_speech_handle,
)
from voicegate.scheduling.memory_monitor import MemoryMonitor
from voicegate.scheduling.periodic import PeriodicTask
from voicegate.services.chat_service import ChatService
from voicegate.services.voice_service import VoiceService
from voicegate.session.base import SessionStore
from voicegate.session.memory_store import InMemorySessionStore
from voicegate.session.redis_store import RedisSessionStore, create_redis_pool
from voicegate.speech.base import SpeechProvider
from voicegate.speech.openai_speech import OpenAISpeechService
from voicegate.utils.logger import get_logger, setup_logging

setup_logging(config.log_level)
logger = get_logger(__name__)


class ApplicationState:
    """
    Manages application-wide state.

    Single Responsibility: Lifecycle management of shared resources.
    Components already set before ``startup`` are kept as given.
    """

    def __init__(self, settings: AppConfig = config) -> None:
        self.settings = settings
        self.cache: Optional[CacheService] = None
        self.pool: Optional[ConnectionPool[SpeechHandle]] = None
        self.speech: Optional[SpeechProvider] = None
        self.agent: Optional[ConversationAgent] = None
        self.sessions: Optional[SessionStore] = None
        self.metrics = RequestMetrics()
        self.rate_limiter = InMemoryRateLimiter(
            RateLimitConfig(
                requests_per_minute=settings.rate_limit_per_minute,
                enabled=settings.rate_limit_enabled,
            )
        )
        self.chat_service: Optional[ChatService] = None
        self.voice_service: Optional[VoiceService] = None
        self.memory_monitor: Optional[MemoryMonitor] = None
        self.tasks: List[PeriodicTask] = []
        self.started_at = time.time()

    async def startup(self) -> None:
        """Initialize application resources."""
        logger.info("Starting VoiceGate", env=self.settings.app_env)
        try:
            self._build_components()
            await self._build_sessions()
            self._build_services()
            self._start_tasks()
            logger.info("VoiceGate started successfully")
        except Exception as e:
            logger.error("Failed to initialize VoiceGate", error=str(e))
            raise

    async def shutdown(self) -> None:
        """Cleanup application resources."""
        logger.info("Shutting down VoiceGate")
        for task in self.tasks:
            await task.stop()
        self.tasks = []

        try:
            if self.pool:
                self.pool.close_all()
            if self.sessions:
                await self.sessions.close()
            if self.agent:
                await self.agent.close()
            logger.info("VoiceGate shut down successfully")
        except Exception as e:
            logger.error("Error during shutdown", error=str(e))

    def _build_components(self) -> None:
        s = self.settings
        if self.cache is None:
            self.cache = CacheService.from_config(s)
        if self.pool is None:
            self.pool = ConnectionPool(
                factory=SpeechHandleFactory(s),
                close_fn=close_speech_handle,
                config=PoolConfig(
                    pool_size=s.speech_pool_size,
                    stale_after_seconds=s.speech_pool_stale_seconds,
                ),
                name="speech",
            )
        self.pool.initialize()
        if self.speech is None:
            self.speech = OpenAISpeechService(
                pool=self.pool,
                transcription_model=s.transcription_model,
                tts_model=s.tts_model,
                voice_map=s.voice_map,
                min_audio_bytes=s.min_audio_bytes,
            )
        if self.agent is None:
            self.agent = OpenAIConversationAgent(
                api_key=s.openai_api_key,
                model=s.agent_model,
                max_tokens=s.agent_max_tokens,
                temperature=s.agent_temperature,
                history_limit=s.agent_history_limit,
                max_threads=s.session_max_count,
                thread_ttl_seconds=s.session_ttl_seconds,
                timeout_seconds=s.provider_timeout_seconds,
                base_url=s.openai_base_url,
            )

    async def _build_sessions(self) -> None:
        if self.sessions is not None:
            return

        s = self.settings
        memory_store = InMemorySessionStore(
            thread_factory=self.agent.create_thread,
            ttl_seconds=s.session_ttl_seconds,
            max_sessions=s.session_max_count,
            history_limit=s.session_history_limit,
        )
        if s.session_backend != "redis":
            self.sessions = memory_store
            return

        store = RedisSessionStore(
            pool=await create_redis_pool(s),
            thread_factory=self.agent.create_thread,
            fallback=memory_store,
            ttl_seconds=s.session_ttl_seconds,
            local_cache_seconds=s.session_local_cache_seconds,
            lock_ttl_seconds=s.session_lock_ttl_seconds,
            history_limit=s.session_history_limit,
        )
        await store.start_listener()
        self.sessions = store
        logger.info("Redis session store initialized", url=s.redis_url)

    def _build_services(self) -> None:
        if self.chat_service is None:
            self.chat_service = ChatService(
                cache=self.cache,
                agent=self.agent,
                sessions=self.sessions,
                metrics=self.metrics,
            )
        if self.voice_service is None:
            self.voice_service = VoiceService(
                cache=self.cache,
                speech=self.speech,
                chat=self.chat_service,
                sessions=self.sessions,
                metrics=self.metrics,
            )

    async def _maintain_pool(self) -> int:
        """Refresh stale speech handles off the event loop."""
        return await asyncio.to_thread(self.pool.perform_maintenance)

    def _start_tasks(self) -> None:
        s = self.settings
        self.memory_monitor = MemoryMonitor(
            threshold_mb=s.memory_threshold_mb,
            on_pressure=[self.cache.prune, self.sessions.cleanup_expired],
        )
        self.tasks = [
            PeriodicTask(
                "cache-expiry",
                s.cache_cleanup_interval_seconds,
                self.cache.clear_expired,
            ),
            PeriodicTask(
                "pool-maintenance",
                s.pool_maintenance_interval_seconds,
                self._maintain_pool,
            ),
            PeriodicTask(
                "session-cleanup",
                s.session_cleanup_interval_seconds,
                self.sessions.cleanup_expired,
            ),
            PeriodicTask(
                "rate-limit-cleanup",
                s.cache_cleanup_interval_seconds,
                self.rate_limiter.cleanup,
            ),
            PeriodicTask(
                "memory-monitor",
                s.memory_check_interval_seconds,
                self.memory_monitor.check,
            ),
        ]
        for task in self.tasks:
            task.start()


def create_application(
    settings: AppConfig = config, state: Optional[ApplicationState] = None
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Application configuration
        state: Prebuilt application state (built from settings when None)

    Returns:
        Configured FastAPI application instance.
    """
    app_state = state or ApplicationState(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler."""
        await app_state.startup()
        app.state.app_state = app_state

        yield

        await app_state.shutdown()

    app = FastAPI(
        title=settings.app_name,
        description="Bilingual (English/Nepali) voice assistant API",
        version=__version__,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    # Add middleware (order matters - first added is last executed)

    app.add_middleware(GZipMiddleware, minimum_size=500)

    app.add_middleware(
        RequestLoggingMiddleware,
        config=default_logging_config,
    )

    app.add_middleware(
        RateLimitMiddleware,
        rate_limiter=app_state.rate_limiter,
        config=RateLimitConfig(
            requests_per_minute=settings.rate_limit_per_minute,
            enabled=settings.rate_limit_enabled,
        ),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[
            "X-Request-ID",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
        ],
    )

    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(chat.router, prefix="/api", tags=["chat"])
    app.include_router(voice.router, prefix="/api", tags=["voice"])
    app.include_router(sessions.router, prefix="/api", tags=["sessions"])
    app.include_router(metrics.router, prefix="/api", tags=["metrics"])
    app.include_router(cache.router, prefix="/api", tags=["cache"])

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "voicegate.main:app",
        host=config.api_host,
        port=config.api_port,
        reload=config.is_development,
    )
