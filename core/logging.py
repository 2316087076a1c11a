# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Core - Structured logging with context
# PURPOSE: Model/direction-aware logging for planner, installer and checks
# CREATED: 19 OCT 2026
# ============================================================================
"""
Structured Logging

Log lines carry the tracked model and migration direction currently being
worked on. Output is human-readable by default and JSON with
LOG_FORMAT=json.

Usage:
    from core.logging import get_logger, log_context

    logger = get_logger(__name__, ComponentType.PLANNER)

    with log_context(model_id="orders", direction="up"):
        logger.info("Planning audit objects")
"""

import json
import logging
import os
import sys
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union
from enum import Enum


class ComponentType(str, Enum):
    PLANNER = "planner"
    INSPECTOR = "inspector"
    INSTALLER = "installer"
    HEALTH = "health"
    REPOSITORY = "repository"
    CLI = "cli"


@dataclass(frozen=True)
class LogContext:
    """Fields attached to every record logged inside a log_context block."""
    model_id: Optional[str] = None
    direction: Optional[str] = None
    object_name: Optional[str] = None
    operation: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def merged(self, **kwargs) -> "LogContext":
        extra = {**self.extra, **kwargs.pop("extra", {})}
        unknown = set(kwargs) - {f.name for f in fields(self)}
        for key in unknown:
            extra[key] = kwargs.pop(key)
        return replace(self, extra=extra, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "extra" and getattr(self, f.name) is not None
        }
        data.update(self.extra)
        return data


_local = threading.local()


def _stack() -> List[LogContext]:
    if not hasattr(_local, "stack"):
        _local.stack = []
    return _local.stack


def get_current_context() -> LogContext:
    stack = _stack()
    return stack[-1] if stack else LogContext()


@contextmanager
def log_context(**kwargs):
    """
    Nest logging context; inner values override outer ones.

    Unknown keys land in LogContext.extra.
    """
    context = get_current_context().merged(**kwargs)
    stack = _stack()
    stack.append(context)
    try:
        yield context
    finally:
        stack.pop()


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def __init__(self, include_context: bool = True):
        super().__init__()
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.include_context:
            context = get_current_context().to_dict()
            if context:
                entry["context"] = context
        component = getattr(record, "component", None)
        if component:
            entry["component"] = component
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        entry["source"] = f"{record.filename}:{record.lineno}"
        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    """`<utc time> <LEVEL> <logger> [model=..., direction=...]: <message>`"""

    LABELS = (("model_id", "model"), ("direction", "direction"), ("object_name", "object"))

    def format(self, record: logging.LogRecord) -> str:
        context = get_current_context()
        tags = [
            f"{label}={getattr(context, attr)}"
            for attr, label in self.LABELS
            if getattr(context, attr)
        ]
        prefix = " ".join((
            datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
            record.levelname.ljust(8),
            record.name,
        ))
        if tags:
            prefix += f" [{', '.join(tags)}]"

        line = f"{prefix}: {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class ContextLogger(logging.LoggerAdapter):
    """Stamps the component name on every record."""

    def process(self, msg, kwargs):
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("component", self.extra.get("component"))
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str, component: Optional[ComponentType] = None) -> ContextLogger:
    return ContextLogger(
        logging.getLogger(name),
        {"component": component.value if component else None},
    )


def configure_logging(level: Union[str, int] = "INFO", json_output: bool = False) -> None:
    """Replace root handlers with a single stdout handler."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    use_json = json_output or os.getenv("LOG_FORMAT", "").lower() == "json"
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter() if use_json else HumanFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)


__all__ = [
    "ComponentType",
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
]
