import json
import logging
import os
from logging.handlers import RotatingFileHandler

from config import Config

# Create logs directory if it doesn't exist
LOG_DIR = Config.LOG_DIR
if not os.path.exists(LOG_DIR):
    try:
        os.makedirs(LOG_DIR)
    except OSError:
        LOG_DIR = '.'  # Fall back to current directory

# Log format with file/line so storage failures can be traced to the call site
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# JSON structured formatter for production use
class JsonFormatter(logging.Formatter):
    """Outputs log records as single-line JSON objects."""

    def format(self, record):
        log_entry = {
            "timestamp": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "filename": record.filename,
            "lineno": record.lineno,
        }
        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def _rotating_handler(filename, level, max_mb, backups):
    """Rotating file handler under LOG_DIR, or None if the file can't be opened."""
    try:
        handler = RotatingFileHandler(
            os.path.join(LOG_DIR, filename),
            maxBytes=max_mb * 1024 * 1024,
            backupCount=backups
        )
    except OSError:
        return None
    handler.setLevel(level)
    return handler


# Pick the formatter once; LOG_FORMAT=json switches every handler
if Config.LOG_FORMAT.lower() == 'json':
    formatter = JsonFormatter()
else:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

# Console handler (always enabled)
console_handler = logging.StreamHandler()
console_handler.setLevel(logging.INFO)

# Full debug log: every add/update/import with ids and counts (5MB max, keep 5 backups)
file_handler = _rotating_handler('fleet.log', logging.DEBUG, 5, 5)

# Error-only file: failed writes and rejected imports (2MB max, keep 3 backups)
error_handler = _rotating_handler('errors.log', logging.ERROR, 2, 3)

handlers = [h for h in (console_handler, file_handler, error_handler) if h is not None]
for handler in handlers:
    handler.setFormatter(formatter)

# Configure root logger
root_logger = logging.getLogger()
root_logger.setLevel(logging.DEBUG)
for handler in handlers:
    root_logger.addHandler(handler)

# Create app logger
logger = logging.getLogger('fleetcalc')
logger.setLevel(logging.DEBUG)

# Reduce noise from the dev server's per-request lines
logging.getLogger('werkzeug').setLevel(logging.WARNING)

# Log startup
logger.info(f"Fleet calculator logging initialized (dir={LOG_DIR}, format={Config.LOG_FORMAT})")
