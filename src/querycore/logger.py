"""Logging for querycore components.

Every component logs under the ``querycore`` namespace so applications can
tune the library with a single ``logging.getLogger("querycore")`` call.
"""

import logging
from typing import Any, Optional

from querycore.settings import settings as api_settings

NAMESPACE = "querycore"

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

_configured = False


def level_for(name: Optional[str]) -> int:
    """Map a LOG_LEVEL name to a logging level; empty or unknown names mean INFO."""
    return _LEVELS.get((name or "").upper(), logging.INFO)


def qualified_name(name: Optional[str]) -> str:
    """Place `name` under the querycore namespace.

    Component names such as ``"FilterCompiler"`` become ``"querycore.FilterCompiler"``;
    names already inside the namespace are kept.
    """
    if not name or name == NAMESPACE:
        return NAMESPACE
    if name.startswith(NAMESPACE + "."):
        return name
    return f"{NAMESPACE}.{name}"


def setup_global_logging(level: str = "INFO") -> None:
    """Configure logging once: root format plus the querycore namespace level.

    Args:
        level: Log level name (e.g., "DEBUG", "INFO")
    """
    global _configured
    if _configured:
        return
    lvl = level_for(level)
    logging.basicConfig(
        level=lvl,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # Applies even when the host application configured the root logger first
    logging.getLogger(NAMESPACE).setLevel(lvl)
    _configured = True


def get_logger(name: Optional[str] = None) -> "Logger":
    """Return a querycore logger for a component or module name."""
    return Logger(name)


class Logger:
    """Component logger under the querycore namespace.

    - `message` logs routine progress (dispatched groups) at the configured LOG_LEVEL
    - `defect` logs input that a lenient code path accepted although it is invalid,
      with its context rendered as ``key=value`` pairs like `QueryCoreError` details
    """

    def __init__(self, name: Optional[str] = None) -> None:
        if not _configured:
            setup_global_logging(api_settings.LOG_LEVEL)
        self._logger = logging.getLogger(qualified_name(name))

    @property
    def name(self) -> str:
        return self._logger.name

    def debug(self, msg: str, *args, **kwargs) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs) -> None:
        self._logger.error(msg, *args, **kwargs)

    def critical(self, msg: str, *args, **kwargs) -> None:
        self._logger.critical(msg, *args, **kwargs)

    def message(self, msg: str, *args, **kwargs) -> None:
        self._logger.log(level_for(api_settings.LOG_LEVEL), msg, *args, **kwargs)

    def defect(self, msg: str, **context: Any) -> None:
        if context:
            details = ", ".join(f"{k}={v!r}" for k, v in context.items())
            self._logger.error("%s (%s)", msg, details)
        else:
            self._logger.error("%s", msg)
