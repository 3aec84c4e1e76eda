"""
Project-wide logger.

Console lines are coloured per log type (LLM traffic, segment progress,
failures, token warnings) and every entry can also be handed, as a plain
dict, to a storage callback.
"""
import os
import sys
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any, Callable


class LogLevel(Enum):
    """Severity, ordered by value"""
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50


class LogType(Enum):
    """Category of a log entry; selects the console layout"""
    GENERAL = "general"
    LLM_REQUEST = "llm_request"
    LLM_RESPONSE = "llm_response"
    TOKEN_USAGE = "token_usage"
    PROGRESS = "progress"
    CHUNK_INFO = "chunk_info"
    PROCESSING_START = "processing_start"
    PROCESSING_END = "processing_end"
    ERROR_DETAIL = "error_detail"


class Colors:
    """Terminal escape codes (empty when NO_COLOR is set or stdout is not a TTY)"""
    _PLAIN = os.environ.get('NO_COLOR') is not None or not sys.stdout.isatty()

    YELLOW = '' if _PLAIN else '\033[93m'       # run start, warnings
    WHITE = '' if _PLAIN else '\033[97m'        # regular lines
    GRAY = '' if _PLAIN else '\033[90m'         # details
    ORANGE = '' if _PLAIN else '\033[38;5;214m' # prompts
    GREEN = '' if _PLAIN else '\033[92m'        # model replies
    RED = '' if _PLAIN else '\033[91m'          # failures
    ENDC = '' if _PLAIN else '\033[0m'

    @classmethod
    def disable(cls):
        for name in ('YELLOW', 'WHITE', 'GRAY', 'ORANGE', 'GREEN', 'RED', 'ENDC'):
            setattr(cls, name, '')


# Level names accepted by plain (log_type, message) callbacks
_CALLBACK_LEVELS = {level.name.lower(): level for level in LogLevel}

PROGRESS_BAR_WIDTH = 30


def _paint(color: str, text: str) -> str:
    return f"{color}{text}{Colors.ENDC}"


class UnifiedLogger:
    """
    Logger shared by the segmenter, the processor and the orchestrator.

    Args:
        name: Logger identifier
        console_output: Print formatted lines to stdout
        enable_colors: Use ANSI colours on the console
        min_level: Entries below this level are dropped entirely
        storage_callback: Receives every kept entry as a dict
            (timestamp, level, type, message, data)
    """

    def __init__(self,
                 name: str = "vocabflow",
                 console_output: bool = True,
                 enable_colors: bool = True,
                 min_level: LogLevel = LogLevel.INFO,
                 storage_callback: Optional[Callable] = None):
        self.name = name
        self.console_output = console_output
        self.enable_colors = enable_colors
        self.min_level = min_level
        self.storage_callback = storage_callback

        # Progress bookkeeping for the current orchestration run
        self.run_state = {
            'total_segments': 0,
            'completed_segments': 0,
            'start_time': None,
            'in_progress': False
        }

        self._formatters = {
            LogType.LLM_REQUEST: self._format_llm_request,
            LogType.LLM_RESPONSE: self._format_llm_response,
            LogType.PROGRESS: self._format_progress,
            LogType.PROCESSING_START: self._format_run_start,
            LogType.PROCESSING_END: self._format_run_end,
            LogType.ERROR_DETAIL: self._format_error_detail,
            LogType.TOKEN_USAGE: self._format_token_usage,
        }

        if not enable_colors:
            Colors.disable()

    @staticmethod
    def _clock() -> str:
        return datetime.now().strftime("%H:%M:%S")

    def _format_line(self, level: LogLevel, message: str, log_type: LogType,
                     data: Dict[str, Any]) -> str:
        formatter = self._formatters.get(log_type)
        if formatter:
            return formatter(message, data)

        color = {
            LogLevel.DEBUG: Colors.GRAY,
            LogLevel.WARNING: Colors.YELLOW,
            LogLevel.ERROR: Colors.RED,
            LogLevel.CRITICAL: Colors.RED,
        }.get(level, Colors.WHITE)

        parts = [f"[{self._clock()}]"]
        if level != LogLevel.INFO:
            parts.append(f"[{level.name}]")
        if log_type == LogType.CHUNK_INFO and 'segment_id' in data:
            parts.append(f"[{data['segment_id']}]")
        parts.append(message)
        return _paint(color, " ".join(parts))

    def _format_llm_request(self, message: str, data: Dict[str, Any]) -> str:
        lines = [_paint(Colors.YELLOW, f"[{self._clock()}] LLM REQUEST ({data.get('model', '?')})")]
        if data.get('system_prompt'):
            lines.append(_paint(Colors.GRAY, "system:"))
            lines.append(_paint(Colors.ORANGE, data['system_prompt']))
        if data.get('user_prompt'):
            lines.append(_paint(Colors.GRAY, "user:"))
            lines.append(_paint(Colors.ORANGE, data['user_prompt']))
        return '\n'.join(lines)

    def _format_llm_response(self, message: str, data: Dict[str, Any]) -> str:
        header = f"[{self._clock()}] LLM REPLY"
        if 'execution_time' in data:
            header += f" after {data['execution_time']:.2f}s"
        lines = [_paint(Colors.GREEN, header)]
        # Reply bodies only at DEBUG, they can be long
        if self.min_level == LogLevel.DEBUG and data.get('response'):
            lines.append(_paint(Colors.GREEN, data['response']))
        return '\n'.join(lines)

    def _format_progress(self, message: str, data: Dict[str, Any]) -> str:
        done = data.get('current', self.run_state['completed_segments'])
        total = data.get('total', self.run_state['total_segments'])
        ratio = min(done / total, 1.0) if total else 0.0
        filled = int(PROGRESS_BAR_WIDTH * ratio)
        bar = '█' * filled + '░' * (PROGRESS_BAR_WIDTH - filled)
        return _paint(Colors.WHITE, f"[{bar}] {done}/{total} segments ({ratio:.0%})")

    def _track_run(self, log_type: LogType, data: Dict[str, Any]) -> None:
        if log_type == LogType.PROCESSING_START:
            self.run_state.update({
                'total_segments': data.get('total_segments', 0),
                'completed_segments': 0,
                'start_time': datetime.now(),
                'in_progress': True
            })
        elif log_type == LogType.CHUNK_INFO and data.get('completed'):
            self.run_state['completed_segments'] += 1
        elif log_type == LogType.PROCESSING_END:
            self.run_state['in_progress'] = False

    def _format_run_start(self, message: str, data: Dict[str, Any]) -> str:
        details = []
        for key, label in (('document_type', 'type'), ('original_length', 'chars'),
                           ('total_segments', 'segments'), ('max_concurrent', 'concurrency')):
            if key in data:
                details.append(f"{label}={data[key]}")

        lines = [_paint(Colors.YELLOW, f"[{self._clock()}] {message}")]
        if details:
            lines.append(_paint(Colors.GRAY, "  " + ", ".join(details)))
        return '\n'.join(lines)

    def _format_run_end(self, message: str, data: Dict[str, Any]) -> str:
        summary = [f"{data.get('succeeded', 0)} succeeded"]
        if data.get('failed'):
            summary.append(f"{data['failed']} failed")
        if 'unique_words' in data:
            summary.append(f"{data['unique_words']} unique words")

        started = self.run_state['start_time']
        if started:
            summary.append(f"in {(datetime.now() - started).total_seconds():.1f}s")

        color = Colors.YELLOW if data.get('failed') else Colors.WHITE
        return _paint(color, f"[{self._clock()}] {message}: " + ", ".join(summary))

    def _format_error_detail(self, message: str, data: Dict[str, Any]) -> str:
        context = [f"{key}={data[key]}" for key in ('segment_id', 'stage', 'code') if key in data]
        line = f"[{self._clock()}] ERROR: {message}"
        if context:
            line += f" ({', '.join(context)})"
        return _paint(Colors.RED, line)

    def _format_token_usage(self, message: str, data: Dict[str, Any]) -> str:
        estimated = data.get('estimated_tokens', 0)
        threshold = data.get('threshold', 0)
        color = Colors.YELLOW if threshold and estimated > threshold else Colors.GRAY
        return _paint(color, f"[TOKENS] {message} (estimated={estimated}, threshold={threshold})")

    def log(self, level: LogLevel, message: str,
            log_type: LogType = LogType.GENERAL,
            data: Optional[Dict[str, Any]] = None):
        """
        Record one entry.

        Args:
            level: Severity
            message: Human-readable text
            log_type: Category, selects console formatting
            data: Structured details (segment_id, code, token counts...)
        """
        if level.value < self.min_level.value:
            return

        data = data or {}
        # Run state is kept even when nothing is printed
        self._track_run(log_type, data)

        if self.console_output:
            line = self._format_line(level, message, log_type, data)
            try:
                print(line, flush=True)
            except UnicodeEncodeError:
                # Narrow console codecs cannot print the bar or CJK output
                print(line.encode('ascii', 'replace').decode('ascii'), flush=True)

        if self.storage_callback:
            self.storage_callback({
                'timestamp': datetime.now().isoformat(),
                'level': level.name,
                'type': log_type.value,
                'message': message,
                'data': data
            })

    def debug(self, message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
        self.log(LogLevel.DEBUG, message, log_type, data)

    def info(self, message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
        self.log(LogLevel.INFO, message, log_type, data)

    def warning(self, message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
        self.log(LogLevel.WARNING, message, log_type, data)

    def error(self, message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
        self.log(LogLevel.ERROR, message, log_type, data)

    def critical(self, message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
        self.log(LogLevel.CRITICAL, message, log_type, data)

    def create_log_callback(self, prefix: str = "") -> Callable[[str, str], None]:
        """
        Adapt this logger to the ``log_callback(log_type, message)`` signature
        accepted by with_retry and the LLM providers.

        Unknown level names are logged at INFO.
        """
        def log_callback(log_type: str, message: str):
            level = _CALLBACK_LEVELS.get(log_type.lower(), LogLevel.INFO)
            self.log(level, f"{prefix}{message}")

        return log_callback


_global_logger = None


def get_logger(name: str = "vocabflow", **kwargs) -> UnifiedLogger:
    """
    Return the process-wide logger, creating it on first use.

    The first call decides the configuration; later calls may only swap the
    storage callback.
    """
    global _global_logger
    if _global_logger is None:
        if 'min_level' not in kwargs:
            # Deferred: config imports this package's exceptions at load time
            from vocabflow.config import DEBUG_MODE
            kwargs['min_level'] = LogLevel.DEBUG if DEBUG_MODE else LogLevel.INFO
        _global_logger = UnifiedLogger(name, **kwargs)
    elif 'storage_callback' in kwargs:
        _global_logger.storage_callback = kwargs['storage_callback']
    return _global_logger
