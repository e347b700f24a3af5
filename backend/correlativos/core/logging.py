"""Loguru setup and the per-request context stamped on every log line."""

from __future__ import annotations

import logging
from contextvars import ContextVar
from sys import stdout
from typing import Any

from loguru import logger

from correlativos.core.config import settings

request_id_ctx_var: ContextVar[str] = ContextVar("request_id", default="-")
user_id_ctx_var: ContextVar[str] = ContextVar("user_id", default="-")
activity_type_ctx_var: ContextVar[str] = ContextVar("activity_type_id", default="-")

_CONTEXT_FIELDS = {
    "request_id": request_id_ctx_var,
    "user_id": user_id_ctx_var,
    "activity_type_id": activity_type_ctx_var,
}

# Driver loggers that would otherwise flood INFO with per-statement chatter.
_QUIET_LOGGERS = ("aiosqlite", "aiomysql", "sqlalchemy.engine")


def bind_allocation_context(*, user_id: int | None, activity_type_id: int | None) -> None:
    """Attribute the remaining log lines of this request to a user and activity type."""

    if user_id is not None:
        user_id_ctx_var.set(str(user_id))
    if activity_type_id is not None:
        activity_type_ctx_var.set(str(activity_type_id))


def _patch_record(record: dict[str, Any]) -> None:
    # Values bound explicitly with logger.bind() win over the request context.
    extra = record["extra"]
    for field, var in _CONTEXT_FIELDS.items():
        extra.setdefault(field, var.get())


def setup_logging() -> None:
    """Route stdlib logging through the root handler and emit Loguru records as JSON."""

    level = "DEBUG" if settings.DEBUG else "INFO"
    logging.basicConfig(level=getattr(logging, level))
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logger.remove()
    logger.configure(patcher=_patch_record)
    logger.add(
        stdout,
        level=level,
        enqueue=True,
        backtrace=settings.DEBUG,
        diagnose=False,
        serialize=True,
    )
