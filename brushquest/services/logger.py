"""
BrushQuest Logging System

Clean terminal output for generation jobs + structured JSONL logs for debugging.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Any, Dict
import json


class BrushQuestLogger:
    """
    Two-mode logging system:
    - Terminal: Clean, timestamped key events only
    - Debug files: JSONL records of storage and provider calls
    """

    def __init__(self, debug_mode: bool = False, settings=None):
        self.debug_mode = debug_mode
        self.settings = settings
        self.file_logger = logging.getLogger("brushquest.events")

        if settings and (settings.debug_storage or settings.debug_api_calls):
            self.debug_log_dir = Path(settings.debug_log_dir)
            self.debug_log_dir.mkdir(parents=True, exist_ok=True)

            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            if settings.debug_storage:
                self.storage_log = self.debug_log_dir / f"storage_{timestamp}.jsonl"
            if settings.debug_api_calls:
                self.api_calls_log = self.debug_log_dir / f"api_calls_{timestamp}.jsonl"

    def _timestamp(self) -> str:
        return datetime.now().strftime("%H:%M:%S")

    def _terminal_log(self, emoji: str, message: str, color: str = ""):
        """Print clean log to terminal"""
        colors = {
            "green": "\033[92m",
            "blue": "\033[94m",
            "yellow": "\033[93m",
            "red": "\033[91m",
            "cyan": "\033[96m",
            "reset": "\033[0m"
        }

        color_code = colors.get(color, "")
        reset = colors["reset"] if color_code else ""

        print(f"{color_code}[{self._timestamp()}] {emoji} {message}{reset}")

    def _debug_log(self, level: str, component: str, message: str, data: Optional[dict] = None):
        """Forward a detailed record to the standard logging tree"""
        log_msg = f"{component} | {message}"
        if data:
            log_msg += f" | Data: {data}"

        log_func = getattr(self.file_logger, level.lower(), self.file_logger.info)
        log_func(log_msg)

    # ===== Terminal Output Methods =====

    def job_received(self, job_type: str, target_id: str, details: str = ""):
        """Log when a generation job is received"""
        msg = f"Job received: {job_type} ({target_id[:8]})"
        if details:
            msg += f" - {details}"
        self._terminal_log("📨", msg, "cyan")
        self._debug_log("info", "JOB", f"Received {job_type}", {
            "target_id": target_id,
            "details": details
        })

    def job_completed(self, job_type: str, target_id: str, duration: Optional[float] = None):
        """Log when a generation job completes"""
        msg = f"Job completed: {job_type} ({target_id[:8]})"
        if duration:
            msg += f" in {duration:.1f}s"
        self._terminal_log("✅", msg, "green")
        self._debug_log("info", "JOB", f"Completed {job_type}", {
            "target_id": target_id,
            "duration": duration
        })

    def job_failed(self, job_type: str, target_id: str, error: str):
        """Log when a generation job fails"""
        msg = f"Job failed: {job_type} ({target_id[:8]}) - {error}"
        self._terminal_log("❌", msg, "red")
        self._debug_log("error", "JOB", f"Failed {job_type}", {
            "target_id": target_id,
            "error": error
        })

    def generation_step(self, step: str, story_id: str, detail: str = ""):
        """Log progress through the story pipeline"""
        msg = f"{step} (Story: {story_id[:8]})"
        if detail:
            msg += f" - {detail}"
        self._terminal_log("⚙️", msg)
        self._debug_log("info", "PIPELINE", step, {
            "story_id": story_id,
            "detail": detail
        })

    def error(self, component: str, message: str, error: Exception = None):
        msg = f"Error in {component}: {message}"
        if error:
            msg += f" ({type(error).__name__})"
        self._terminal_log("⚠️", msg, "red")
        self._debug_log("error", component, message, {
            "error_type": type(error).__name__ if error else None,
            "error_message": str(error) if error else None
        })

    def info(self, message: str):
        self._terminal_log("ℹ️", message)
        self._debug_log("info", "SYSTEM", message)

    def warning(self, message: str):
        self._terminal_log("⚠️", message, "yellow")
        self._debug_log("warning", "SYSTEM", message)

    def debug(self, component: str, message: str, data: Optional[dict] = None):
        """Log debug information (file only)"""
        if self.debug_mode:
            self._debug_log("debug", component, message, data)

    # ===== Debug Logging Methods =====

    def _write_json_log(self, log_file: Path, data: Dict[str, Any]):
        """Write structured JSON log entry"""
        try:
            with open(log_file, 'a') as f:
                json.dump(data, f)
                f.write('\n')
        except OSError as e:
            self.error("LOGGER", f"Failed to write JSON log: {e}")

    def _truncate_data(self, data: Any, max_length: int = 500) -> str:
        data_str = str(data)
        if len(data_str) > max_length:
            return data_str[:max_length] + f"... ({len(data_str)} chars total)"
        return data_str

    def storage_operation(self, operation: str, path: str, data_summary: str,
                          size_bytes: int = 0, duration: Optional[float] = None):
        """Log database or blob operations"""
        if not self.settings or not self.settings.debug_storage:
            return

        duration_str = f" in {duration*1000:.0f}ms" if duration else ""
        msg = f"Storage {operation.upper()} → {path} ({size_bytes} bytes){duration_str}"
        self._terminal_log("💾", msg, "yellow")

        log_data = {
            "timestamp": datetime.now().isoformat(),
            "type": "storage_operation",
            "operation": operation,
            "path": path,
            "data_summary": self._truncate_data(data_summary),
            "size_bytes": size_bytes,
            "duration_seconds": duration
        }
        if hasattr(self, 'storage_log'):
            self._write_json_log(self.storage_log, log_data)

    def api_call(self, provider: str, model: str, prompt_chars: int = 0,
                 latency: Optional[float] = None, status: str = "success"):
        """Log a generative provider call (Gemini, ElevenLabs)"""
        if not self.settings or not self.settings.debug_api_calls:
            return

        latency_str = f" in {latency:.1f}s" if latency else ""
        msg = f"API {provider}/{model}: {prompt_chars} prompt chars{latency_str}"
        emoji = "🤖" if status == "success" else "⚠️"
        color = "green" if status == "success" else "yellow"
        self._terminal_log(emoji, msg, color)

        log_data = {
            "timestamp": datetime.now().isoformat(),
            "type": "api_call",
            "provider": provider,
            "model": model,
            "prompt_chars": prompt_chars,
            "latency_seconds": latency,
            "status": status
        }
        if hasattr(self, 'api_calls_log'):
            self._write_json_log(self.api_calls_log, log_data)


def init_logger(debug_mode: bool = False, settings=None) -> BrushQuestLogger:
    """Create the application logger with specific debug mode and settings"""
    return BrushQuestLogger(debug_mode=debug_mode, settings=settings)
