# quantcore/config/logging_config.py
"""
Centralized logging configuration for quantcore
Uses loguru for logging with rotation, formatting, and filtering

The library only emits records; the host application decides where they go by
calling one of the setup functions below.
"""

import json
import sys
from datetime import datetime
from functools import wraps
from pathlib import Path

from loguru import logger

from quantcore.config.settings import Settings, get_settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"


def _json_sink(path: Path, rotation: str, retention: str, level: str):
    def formatter(record):
        record["extra"]["serialized"] = json.dumps(
            {
                "timestamp": record["time"].isoformat(),
                "level": record["level"].name,
                "module": record["name"],
                "function": record["function"],
                "line": record["line"],
                "message": record["message"],
                "exception": str(record["exception"]) if record["exception"] else None,
            }
        )
        return "{extra[serialized]}\n"

    return logger.add(
        path,
        format=formatter,
        level=level,
        rotation=rotation,
        retention=retention,
        enqueue=True,
    )


def setup_logging(
    log_level: str | None = None,
    log_file: Path | str | None = None,
    rotation: str | None = None,
    retention: str | None = None,
    json_logs: bool | None = None,
    settings: Settings | None = None,
):
    """
    Configure logging for the application

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file for a rotating file sink
        rotation: When to rotate logs (size or time based)
        retention: How long to keep logs
        json_logs: Whether to write the file sink as JSON lines
        settings: Settings used for any argument left as None
    """
    settings = settings or get_settings()

    log_level = log_level or settings.LOG_LEVEL
    log_file = log_file or settings.LOG_FILE_PATH
    rotation = rotation or settings.LOG_ROTATION
    retention = retention or settings.LOG_RETENTION
    if json_logs is None:
        json_logs = settings.LOG_FORMAT == "json"

    logger.remove()

    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=log_level,
        colorize=True,
        backtrace=True,
        diagnose=settings.DEBUG,
    )

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)

        if json_logs:
            _json_sink(path, rotation, retention, log_level)
        else:
            logger.add(
                path,
                format=FILE_FORMAT,
                level=log_level,
                rotation=rotation,
                retention=retention,
                enqueue=True,
            )

    logger.info(f"Logging configured: level={log_level}, file={log_file or 'none'}")


def setup_production_logging(log_file: Path | str = "logs/quantcore.log"):
    """
    Production logging: JSON file sink, INFO level
    """
    setup_logging(
        log_level="INFO",
        log_file=log_file,
        rotation="50 MB",
        retention="14 days",
        json_logs=True,
    )


def setup_development_logging():
    """
    Development logging: verbose console output only
    """
    setup_logging(log_level="DEBUG", json_logs=False)


def get_logger(name: str | None = None):
    """
    Get a logger instance

    Args:
        name: Name for the logger (usually __name__)

    Returns:
        Logger instance
    """
    if name:
        return logger.bind(name=name)
    return logger


class timed_operation:
    """
    Context manager for timing operations

    Usage:
        with timed_operation("Monte Carlo simulation"):
            simulator.simulate(...)
    """

    def __init__(self, operation_name: str, log_level: str = "DEBUG"):
        self.operation_name = operation_name
        self.log_level = log_level
        self.start_time = None
        self.duration: float | None = None

    def __enter__(self):
        self.start_time = datetime.now()
        logger.log(self.log_level, f"Starting: {self.operation_name}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = (datetime.now() - self.start_time).total_seconds()

        if exc_type is None:
            logger.log(
                self.log_level, f"Completed: {self.operation_name} (took {self.duration:.2f}s)"
            )
        else:
            logger.error(f"Failed: {self.operation_name} after {self.duration:.2f}s - {exc_val}")


def log_exceptions(reraise: bool = True):
    """
    Decorator to log exceptions

    Usage:
        @log_exceptions()
        def my_function():
            raise ValueError("Error")
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.exception(f"Exception in {func.__name__}: {e}")
                if reraise:
                    raise
                return None

        return wrapper

    return decorator


def log_backtest_run(strategy_name: str, start_date: str, end_date: str, metrics: dict):
    """
    Log backtest run with metrics

    Args:
        strategy_name: Name of strategy
        start_date: First bar date
        end_date: Last bar date
        metrics: Performance metrics
    """
    logger.bind(
        type="backtest",
        strategy=strategy_name,
        start_date=start_date,
        end_date=end_date,
        **metrics,
    ).info(
        f"Backtest completed: {strategy_name} | "
        f"Return: {metrics.get('total_return', 0):.2%} | "
        f"Sharpe: {metrics.get('sharpe_ratio', 0):.2f}"
    )


def log_simulation_run(method: str, num_simulations: int, horizon_days: int, summary: dict):
    """
    Log Monte Carlo run summary

    Args:
        method: Simulation method name
        num_simulations: Number of paths
        horizon_days: Horizon in trading days
        summary: Aggregate statistics
    """
    logger.bind(
        type="simulation",
        method=method,
        num_simulations=num_simulations,
        horizon_days=horizon_days,
        **summary,
    ).info(
        f"Simulation completed: {method} | paths={num_simulations} | "
        f"horizon={horizon_days}d | "
        f"P(loss)={summary.get('probability_of_loss', 0):.2%}"
    )


__all__ = [
    "logger",
    "get_logger",
    "setup_logging",
    "setup_production_logging",
    "setup_development_logging",
    "timed_operation",
    "log_exceptions",
    "log_backtest_run",
    "log_simulation_run",
]
