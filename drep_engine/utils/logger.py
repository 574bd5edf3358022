"""
Logging infrastructure for the scoring engine.

Provides:
- Structured key=value logging with millisecond timestamps
- Console output
- Warning/error tracking for batch summaries
"""

import logging
import sys
from contextlib import contextmanager
from datetime import datetime
from typing import Optional

from dotenv import load_dotenv

from drep_engine.config import get_log_level

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(filename)s:%(lineno)d | %(message)s"
PHASE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | {phase} | %(filename)s:%(lineno)d | %(message)s"


class MillisecondsFormatter(logging.Formatter):
    """Formatter that includes milliseconds and aligns log levels."""

    def formatTime(self, record, datefmt=None):  # noqa: N802 - must match parent class method name
        ct = datetime.fromtimestamp(record.created)
        if datefmt and "%f" in datefmt:
            s = ct.strftime(datefmt.replace(",%f", ""))
            return s + f",{int(record.msecs):03d}"
        elif datefmt:
            return ct.strftime(datefmt)
        else:
            return ct.strftime("%Y-%m-%d %H:%M:%S") + f",{int(record.msecs):03d}"


def _format_kwargs(message: str, kwargs: dict) -> str:
    if not kwargs:
        return message
    formatted_data = " ".join(f"{k}={v}" for k, v in kwargs.items())
    return f"{message} [{formatted_data}]"


class EngineLogger:
    """
    Logger for scoring passes with structured output and error tracking.
    """

    def __init__(
        self,
        name: str = "drep_engine",
        log_level: Optional[str] = None,
        phase: Optional[str] = None,
    ):
        """
        Initialize the engine logger.

        Args:
            name: Logger name
            log_level: Logging level (defaults to DREP_ENGINE_LOG_LEVEL or INFO)
            phase: Optional scoring phase label (e.g., "scorecards", "redelegation")
        """
        log_level = (log_level or get_log_level()).upper()
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, log_level))
        self.phase = phase

        # Prevent propagation to root logger to avoid duplicate logs
        self.logger.propagate = False
        if self.logger.handlers:
            self.logger.handlers.clear()

        fmt_str = PHASE_LOG_FORMAT.format(phase=phase) if phase else LOG_FORMAT
        formatter = MillisecondsFormatter(fmt_str, datefmt="%Y-%m-%d %H:%M:%S,%f")

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(getattr(logging, log_level))
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        self.errors = []
        self.warnings = []

    def debug(self, message: str, **kwargs):
        self.logger.debug(_format_kwargs(message, kwargs), stacklevel=2)

    def info(self, message: str, **kwargs):
        self.logger.info(_format_kwargs(message, kwargs), stacklevel=2)

    def warning(self, message: str, **kwargs):
        """Log warning message and track for reporting."""
        message = _format_kwargs(message, kwargs)
        self.logger.warning(message, stacklevel=2)
        self.warnings.append(
            {
                "message": message,
                "timestamp": datetime.now().isoformat(),
                "data": kwargs,
            }
        )

    def error(self, message: str, exception: Optional[Exception] = None, **kwargs):
        """Log error message and track for reporting."""
        if exception:
            message = f"{message} | Exception: {str(exception)}"
        message = _format_kwargs(message, kwargs)

        self.logger.error(message, exc_info=exception is not None, stacklevel=2)
        self.errors.append(
            {
                "message": message,
                "exception": str(exception) if exception else None,
                "timestamp": datetime.now().isoformat(),
                "data": kwargs,
            }
        )

    def log_batch_start(self, num_dreps: int):
        self.info("=" * 60)
        self.info(f"Scoring pass started - {num_dreps} DReps", num_dreps=num_dreps)
        self.info("=" * 60)

    def log_batch_complete(self, succeeded: int, failed: int, duration_seconds: float):
        self.info("=" * 60)
        self.info(
            "Scoring pass completed",
            succeeded=succeeded,
            failed=failed,
            total=succeeded + failed,
            duration_seconds=round(duration_seconds, 2),
        )
        self.info("=" * 60)

    @contextmanager
    def time_drep(self, drep_id: str, operation: str):
        """
        Context manager to time and log a per-DRep operation.

        Usage:
            with logger.time_drep("drep1abc", "scorecard"):
                ...
        """
        start_time = datetime.now()
        self.debug(f"Starting {operation}", drep_id=drep_id)
        try:
            yield
            duration = (datetime.now() - start_time).total_seconds()
            self.debug(f"Completed {operation}", drep_id=drep_id, duration_seconds=round(duration, 4))
        except Exception as e:
            duration = (datetime.now() - start_time).total_seconds()
            self.error(
                f"Failed {operation}",
                exception=e,
                drep_id=drep_id,
                duration_seconds=round(duration, 4),
            )
            raise

    def get_error_summary(self) -> dict:
        """Get summary of errors and warnings for reporting."""
        return {
            "total_errors": len(self.errors),
            "total_warnings": len(self.warnings),
            "errors": self.errors,
            "warnings": self.warnings,
        }

    def clear_tracking(self):
        """Clear tracked errors and warnings (useful between scoring passes)."""
        self.errors = []
        self.warnings = []


# ============================================================================
# Global Logger Instance
# ============================================================================

_default_logger: Optional[EngineLogger] = None


def get_logger(
    name: str = "drep_engine",
    log_level: Optional[str] = None,
    phase: Optional[str] = None,
) -> EngineLogger:
    """Get or create the default engine logger."""
    global _default_logger

    if _default_logger is None:
        _default_logger = EngineLogger(
            name=name,
            log_level=log_level,
            phase=phase,
        )

    return _default_logger


# ============================================================================
# Context Manager for Scoring Passes
# ============================================================================


class BatchRunContext:
    """
    Context manager for scoring passes with automatic start/finish logging.

    Usage:
        with BatchRunContext(logger, num_dreps=10) as ctx:
            ...
            ctx.increment_success()  # or ctx.increment_failure()
    """

    def __init__(self, logger: EngineLogger, num_dreps: int):
        self.logger = logger
        self.num_dreps = num_dreps
        self.start_time = None
        self.succeeded = 0
        self.failed = 0

    def __enter__(self):
        self.start_time = datetime.now()
        self.logger.log_batch_start(self.num_dreps)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = (datetime.now() - self.start_time).total_seconds()
        self.logger.log_batch_complete(
            succeeded=self.succeeded,
            failed=self.failed,
            duration_seconds=duration,
        )
        return False

    def increment_success(self):
        self.succeeded += 1

    def increment_failure(self):
        self.failed += 1


# ============================================================================
# Global Logging Configuration
# ============================================================================


def configure_global_logging(log_level: Optional[str] = None, phase: Optional[str] = None):
    """
    Configure root logging with the engine's unified format.

    Call once at collaborator start-up. Loads a local .env first so
    DREP_ENGINE_LOG_LEVEL can be set there.
    """
    load_dotenv()
    log_level = (log_level or get_log_level()).upper()

    fmt_str = PHASE_LOG_FORMAT.format(phase=phase) if phase else LOG_FORMAT
    formatter = MillisecondsFormatter(fmt_str, datefmt="%Y-%m-%d %H:%M:%S,%f")

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level))
    root_logger.handlers.clear()

    root_handler = logging.StreamHandler(sys.stdout)
    root_handler.setLevel(getattr(logging, log_level))
    root_handler.setFormatter(formatter)
    root_logger.addHandler(root_handler)
