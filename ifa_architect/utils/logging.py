import logging
import json
import os
from logging.handlers import TimedRotatingFileHandler
from datetime import datetime, timezone

from ifa_architect.config import LOG_DIR, LOG_LEVEL


class JSONFormatter(logging.Formatter):
    def format(self, record):
        log_record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "name": record.name,
            "level": record.levelname,
            "message": record.getMessage(),
            "module": record.module,
            "funcName": record.funcName,
            "lineNo": record.lineno
        }
        if hasattr(record, "session_id"):
            log_record["session_id"] = record.session_id
        if hasattr(record, "action"):
            log_record["action"] = record.action
        if getattr(record, "proposal", None):
            log_record["proposal"] = record.proposal

        return json.dumps(log_record, ensure_ascii=False)


def setup_logger(name="ifa_architect", log_file=None, level=None):
    log_file = log_file or os.path.join(LOG_DIR, "ifa_architect.log")
    os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(level or getattr(logging, LOG_LEVEL, logging.INFO))

    # Avoid duplicate handlers
    if not logger.handlers:
        # File Handler (Daily Rotation)
        file_handler = TimedRotatingFileHandler(log_file, when="midnight", interval=1, backupCount=30, encoding="utf-8")
        file_handler.setFormatter(JSONFormatter())

        # Console Handler
        console_handler = logging.StreamHandler()
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - [%(levelname)s] - %(message)s')
        console_handler.setFormatter(console_formatter)

        logger.addHandler(file_handler)
        logger.addHandler(console_handler)

    return logger


audit_logger = setup_logger("ifa_audit", os.path.join(LOG_DIR, "audit.log"))


def log_audit_action(session_id, action, details, **proposal):
    """
    Audit trail of pipeline and session activity. Keyword arguments describe
    the proposal at that point (slide_count, used_fallback, ...) and land in
    the "proposal" object of the JSON entry.
    """
    audit_logger.info(details, extra={"session_id": session_id, "action": action, "proposal": proposal})
