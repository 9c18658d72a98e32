import asyncio
import datetime as dt
import functools
import inspect
import json
import logging
import os
from logging.handlers import TimedRotatingFileHandler
from typing import Any, Callable

from jsonschema import validate, Draft202012Validator
from jsonschema.exceptions import ValidationError

# ---------- Errors ----------

class ConfigError(ValueError):
    """Malformed merge parameters. Raised before any child filter runs."""

# ---------- Config validation ----------

def load_file(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()

@functools.lru_cache(maxsize=None)
def load_schema(name: str) -> dict:
    here = os.path.dirname(os.path.abspath(__file__))
    schema_path = os.path.join(here, "schemas", name)
    return json.loads(load_file(schema_path))

def validate_params(params: Any, schema_name: str = "params.schema.json"):
    schema = load_schema(schema_name)
    try:
        validate(instance=params, schema=schema, cls=Draft202012Validator)
    except ValidationError as e:
        raise ConfigError(f"Config validation error: {e.message} at {list(e.path)}") from e

# ---------- Async helpers ----------

async def call_maybe_async(fn: Callable[..., Any], *args, **kwargs) -> Any:
    """Call ``fn`` and await the result when it is awaitable.

    Plain functions run in the default executor so that several of them
    can make progress at the same time.
    """
    if inspect.iscoroutinefunction(fn):
        return await fn(*args, **kwargs)
    loop = asyncio.get_running_loop()
    result = await loop.run_in_executor(None, functools.partial(fn, *args, **kwargs))
    if inspect.isawaitable(result):
        return await result
    return result

# ---------- Logging ----------

_LOGGER_INITIALIZED = False
_FILE_LOG_DIR = None

class JsonFormatter(logging.Formatter):
    def format(self, record):
        payload = {
            "ts": dt.datetime.fromtimestamp(record.created, dt.timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)

def _formatter(json_mode: bool) -> logging.Formatter:
    if json_mode:
        return JsonFormatter()
    return logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")

def _build_logger():
    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    level = os.getenv("LOG_LEVEL", "INFO").upper()
    json_mode = os.getenv("LOG_JSON", "false").lower() == "true"

    logger = logging.getLogger("filtermerge")
    logger.setLevel(getattr(logging, level, logging.INFO))

    fmt = _formatter(json_mode)

    ch = logging.StreamHandler()
    ch.setLevel(logger.level)
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    _LOGGER_INITIALIZED = True

    # file logging only when LOG_DIR is set
    log_dir = os.getenv("LOG_DIR", "")
    if log_dir:
        enable_file_log(log_dir)

def enable_file_log(log_dir: str):
    """Add a daily rotating file handler under ``log_dir`` (at most once per process)."""
    global _FILE_LOG_DIR
    _build_logger()
    if not log_dir or _FILE_LOG_DIR is not None:
        return
    logger = logging.getLogger("filtermerge")
    os.makedirs(log_dir, exist_ok=True)
    fh = TimedRotatingFileHandler(os.path.join(log_dir, "filtermerge.log"), when="D", backupCount=7, encoding="utf-8")
    fh.setLevel(logger.level)
    fh.setFormatter(_formatter(os.getenv("LOG_JSON", "false").lower() == "true"))
    logger.addHandler(fh)
    _FILE_LOG_DIR = log_dir

def get_logger(name: str = None) -> logging.Logger:
    _build_logger()
    return logging.getLogger(name if name else __name__)
