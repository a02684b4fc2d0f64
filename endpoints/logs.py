import logging
import logging.handlers
import json
import os
from typing import Optional, Dict, Any
from fastapi import Request
from config import settings
import uuid
import traceback

class Logger:
    def __init__(self, log_file: Optional[str] = None, max_log_days: int = 7):
        """
        Initialize the logger with JSON formatting, optional daily file rotation and dynamic log level.
        """
        self.logger = logging.getLogger("CoursePlatformLogger")
        self.logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
        self.logger.propagate = False

        # Remove existing handlers to avoid duplication
        self.logger.handlers.clear()

        formatter = logging.Formatter(
            json.dumps({
                "timestamp": "%(asctime)s",
                "level": "%(levelname)s",
                "action": "%(message)s",
                "email": "%(email)s",
                "correlation_id": "%(correlation_id)s",
                "context": "%(context)s"
            }, ensure_ascii=False)
        )

        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        self.logger.addHandler(stream_handler)

        if log_file:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            file_handler = logging.handlers.TimedRotatingFileHandler(
                filename=log_file,
                when="midnight",
                interval=1,
                backupCount=max_log_days,
                encoding="utf-8"
            )
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    def log_action(
        self,
        action: str,
        level: str = "INFO",
        email: Optional[str] = None,
        correlation_id: str = "",
        context: Optional[Dict[str, Any]] = None
    ):
        """
        Log an action with context and correlation ID.
        """
        context_str = json.dumps(context or {}, ensure_ascii=False, default=str)
        self.logger.log(
            level=getattr(logging, level.upper(), logging.INFO),
            msg=action,
            extra={
                "email": email or "anonymous",
                "correlation_id": correlation_id,
                "context": context_str
            }
        )

    async def log_request(
        self,
        request: Request,
        action: str,
        email: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        correlation_id = str(uuid.uuid4())
        context = context or {}
        context.update({
            "method": request.method,
            "url": str(request.url),
            "client_ip": request.client.host if request.client else "unknown"
        })
        self.log_action(action, "INFO", email, correlation_id, context)
        return correlation_id

    def log_error(
        self,
        action: str,
        error: Exception,
        email: Optional[str] = None,
        correlation_id: str = "",
        context: Optional[Dict[str, Any]] = None
    ):
        """
        Log an error with stack trace and correlation ID.
        """
        context = context or {}
        context["error"] = str(error)
        context["stack_trace"] = "".join(traceback.format_tb(error.__traceback__)) if error.__traceback__ else "N/A"
        self.log_action(action, "ERROR", email, correlation_id, context)

# Singleton logger instance
logger_instance = Logger(settings.LOG_FILE)

# Convenience functions for use in other modules
def log_action(action: str, email: Optional[str] = None, correlation_id: str = "", context: Optional[Dict[str, Any]] = None, level: str = "INFO"):
    logger_instance.log_action(action, level, email, correlation_id, context)

async def log_request(request: Request, action: str, email: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
    return await logger_instance.log_request(request, action, email, context)

def log_error(action: str, error: Exception, email: Optional[str] = None, correlation_id: str = "", context: Optional[Dict[str, Any]] = None):
    logger_instance.log_error(action, error, email, correlation_id, context)
