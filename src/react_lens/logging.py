"""Structured logging built on Loguru.

Importing this module removes Loguru's default stdout handler: the MCP
server speaks JSON-RPC over stdout, so log output must only reach stderr
and the log file.

Example:
    >>> configure_logging(log_name="serve")
    >>> async with LogSpan(span="inspect.snapshot", verbose=False) as span:
    ...     snapshot = await session.take_snapshot()
    ...     span.add("nodeCount", snapshot.node_count)
"""

from __future__ import annotations

import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

if TYPE_CHECKING:
    from types import TracebackType

logger.remove()


def configure_logging(
    log_name: str = "react-lens",
    level: str | None = None,
    log_dir: Path | str | None = None,
) -> None:
    """Configure Loguru sinks for the process.

    Args:
        log_name: Base name of the log file (``{log_dir}/{log_name}.log``)
        level: Minimum level; defaults to ``log_level`` from config
        log_dir: Directory for the log file; defaults to ``log_dir`` from config
    """
    from react_lens.config import get_config

    config = get_config()
    level = level or config.log_level
    directory = Path(log_dir) if log_dir is not None else config.get_log_dir_path()

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<dim>{time:HH:mm:ss}</dim> <level>{level: <7}</level> {message}",
    )
    try:
        directory.mkdir(parents=True, exist_ok=True)
        logger.add(
            directory / f"{log_name}.log",
            level=level,
            rotation="5 MB",
            retention=3,
            serialize=True,
            enqueue=True,
        )
    except OSError as e:
        logger.warning(f"File logging disabled, cannot use {directory}: {e}")


class LogSpan:
    """A timed logging span with structured attributes.

    Usable as a sync or async context manager. On exit a single record is
    logged with the span name, elapsed time and every attribute added.
    Exceptions are recorded on the span and re-raised.
    """

    def __init__(self, span: str, level: str = "INFO", **attrs: Any) -> None:
        self.span = span
        self.level = level
        self.attrs: dict[str, Any] = dict(attrs)
        self.start_time = time.perf_counter()
        self.error: str | None = None

    def add(self, key: str | None = None, value: Any = None, **attrs: Any) -> LogSpan:
        """Add attributes to the span.

        Supports both ``span.add("count", 3)`` and ``span.add(count=3)``.
        """
        if key is not None:
            self.attrs[key] = value
        self.attrs.update(attrs)
        return self

    @property
    def elapsed_ms(self) -> float:
        return round((time.perf_counter() - self.start_time) * 1000, 2)

    def _emit(self) -> None:
        record = {"span": self.span, "elapsedMs": self.elapsed_ms, **self.attrs}
        if self.error:
            record["error"] = self.error
            logger.bind(**record).error(f"{self.span} failed: {self.error}")
            return
        details = " ".join(f"{k}={v}" for k, v in self.attrs.items())
        logger.bind(**record).log(
            self.level, f"{self.span} ({self.elapsed_ms}ms) {details}".rstrip()
        )

    def __enter__(self) -> LogSpan:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc is not None:
            self.error = f"{type(exc).__name__}: {exc}"
        self._emit()

    async def __aenter__(self) -> LogSpan:
        return self.__enter__()

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.__exit__(exc_type, exc, tb)
