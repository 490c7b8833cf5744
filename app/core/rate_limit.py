"""Admission control for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Design goals:
- Minimal coupling: routes declare ``Depends(require_admission("api"))`` only.
- Swap-friendly: the counting store sits behind ``AbstractRateLimiter``.
- Owned instances: controllers are built once per process, held by the
  application container and started/stopped by the app lifespan.

Three controllers are configured:
- ``api``: general quota per client IP (100 / 15 min by default)
- ``strict``: sensitive operations per client IP (10 / 1 min)
- ``bot``: per client IP + user-agent (50 / 1 min)
"""

from __future__ import annotations

import hashlib
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

from fastapi import Request

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from app.core.config import RateLimitSettings
from app.core.errors import RateLimitedAppError

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"

KeyFn = Callable[[Request], str]


def client_ip(request: Request) -> str:
    """Derive the caller address from proxy headers.

    Checks ``X-Forwarded-For`` (first hop), ``X-Real-IP`` and
    ``CF-Connecting-IP`` in that order and falls back to ``"unknown"``.
    """

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop

    for header in ("x-real-ip", "cf-connecting-ip"):
        value = request.headers.get(header)
        if value:
            return value.strip()

    return UNKNOWN_CLIENT


def client_ip_and_user_agent(request: Request) -> str:
    user_agent = request.headers.get("user-agent") or UNKNOWN_CLIENT
    return f"{client_ip(request)}:{user_agent}"


def _hash_limiter_key(key: str) -> str:
    """Hash the rate limit key for logging without exposing client addresses."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


class AdmissionController:
    """Admit or reject requests against one limiter.

    ``admit`` raises :class:`RateLimitedAppError` once a client exceeds its
    quota; translating that into a 429 response is the exception handler's job.
    """

    def __init__(
        self,
        name: str,
        limiter: AbstractRateLimiter,
        *,
        key_fn: KeyFn = client_ip,
        enabled: bool = True,
    ) -> None:
        self.name = name
        self.limiter = limiter
        self.key_fn = key_fn
        self.enabled = enabled

    def admit(self, request: Request) -> RateLimitResult | None:
        """Count the request and raise when it is over quota.

        Returns:
            The limiter result, or None when admission control is disabled.

        Raises:
            RateLimitedAppError: When the client exceeded its quota.
        """
        if not self.enabled:
            return None
        return self.admit_key(self.key_fn(request))

    def admit_key(self, key: str) -> RateLimitResult:
        result = self.limiter.consume(key)
        if result.allowed:
            logger.debug(
                "rate_limit.allowed",
                extra={
                    "limiter": self.name,
                    "key_hash": _hash_limiter_key(key),
                    "limit": result.limit,
                    "remaining": result.remaining,
                },
            )
            return result

        retry_after = result.retry_after_seconds or 0
        logger.warning(
            "rate_limit.exceeded",
            extra={
                "limiter": self.name,
                "key_hash": _hash_limiter_key(key),
                "limit": result.limit,
                "count": result.count,
                "retry_after_s": retry_after,
            },
        )
        raise RateLimitedAppError(
            code="rate_limit_exceeded",
            message=f"Rate limit exceeded. Try again in {retry_after} seconds.",
            details={"retry_after": retry_after, "limit": result.limit},
            retry_after_seconds=retry_after,
            limit=result.limit,
            reset_at=result.reset_at,
        )

    async def start(self) -> None:
        await self.limiter.start()

    async def stop(self) -> None:
        await self.limiter.stop()


@dataclass
class AdmissionControllers:
    """The process-wide set of admission controllers."""

    api: AdmissionController
    strict: AdmissionController
    bot: AdmissionController

    def get(self, name: str) -> AdmissionController:
        controller = getattr(self, name, None)
        if not isinstance(controller, AdmissionController):
            raise KeyError(f"Unknown admission controller: {name!r}")
        return controller

    def all(self) -> list[AdmissionController]:
        return [self.api, self.strict, self.bot]

    async def start(self) -> None:
        for controller in self.all():
            await controller.start()

    async def stop(self) -> None:
        for controller in self.all():
            await controller.stop()


def build_admission_controllers(
    cfg: RateLimitSettings,
    *,
    sweep_interval_seconds: float = 60.0,
    clock: Callable[[], float] = time.time,
) -> AdmissionControllers:
    """Build the api/strict/bot controllers from settings."""

    def _limiter(name: str, limit: int, window: float) -> InMemoryFixedWindowRateLimiter:
        return InMemoryFixedWindowRateLimiter(
            limit=limit,
            window_seconds=window,
            clock=clock,
            sweep_interval_seconds=sweep_interval_seconds,
            name=name,
        )

    return AdmissionControllers(
        api=AdmissionController(
            "api",
            _limiter("api", cfg.api_requests, cfg.api_window_seconds),
            enabled=cfg.enabled,
        ),
        strict=AdmissionController(
            "strict",
            _limiter("strict", cfg.strict_requests, cfg.strict_window_seconds),
            enabled=cfg.enabled,
        ),
        bot=AdmissionController(
            "bot",
            _limiter("bot", cfg.bot_requests, cfg.bot_window_seconds),
            key_fn=client_ip_and_user_agent,
            enabled=cfg.enabled,
        ),
    )


def require_admission(*names: str) -> Callable[[Request], Awaitable[None]]:
    """Build a FastAPI dependency that runs the named controllers in order.

    Usage:
        @router.post("/products", dependencies=[Depends(require_admission("strict"))])
    """

    async def enforce_admission(request: Request) -> None:
        controllers: AdmissionControllers = request.app.state.container.admission
        for name in names:
            controllers.get(name).admit(request)

    return enforce_admission
