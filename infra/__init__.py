from .paths import PROJECT_ROOT, STORAGE_DIR, LOG_DIR, TRACE_DIR, ENV_FILE
from .logger import configure_logging, get_logger
from .config import EngineConfig
from .trace import DecisionSink, NullSink, MemorySink, JsonlSink, LoggingSink, TurnRecord

__all__ = [
    "PROJECT_ROOT",
    "STORAGE_DIR",
    "LOG_DIR",
    "TRACE_DIR",
    "ENV_FILE",
    "configure_logging",
    "get_logger",
    "EngineConfig",
    "DecisionSink",
    "NullSink",
    "MemorySink",
    "JsonlSink",
    "LoggingSink",
    "TurnRecord",
]
