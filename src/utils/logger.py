"""
Centralized Logging and Security Filtering
==========================================

This module provides the logging infrastructure for the Quantum Asset
Toolbox. It centralizes all diagnostic output while ensuring that upload
tokens, signed download URLs and other credentials never reach the log
files.

Key Features:
-------------
- Sensitive Data Masking: Automatic redaction of tokens, signatures and
  passwords, both in free text (including URL query strings) and in
  dictionaries via recursive key filtering.
- Transfer Instrumentation: Helpers for logging HTTP requests/responses
  with timing and status tracking.
- Contextual Logging: Formatting includes timestamps, module origin and
  line numbers.

Dependencies:
-------------
- logging: Standard library for output routing.
- re: Used for pattern-based masking of sensitive strings.

Author: Quantum Asset Toolbox Project
"""

import logging
import sys
import re
import json
from pathlib import Path
from typing import Any, Dict, Optional


# Log directory configuration
# Project root is 3 levels up from this file: utils -> src -> project root
PROJECT_ROOT = Path(__file__).parent.parent.parent
LOG_DIR = PROJECT_ROOT / "logs"
LOG_FILE_NAME = "quantum_toolbox.log"

# Sensitive field patterns to mask
SENSITIVE_FIELDS = {
    'password', 'passwd', 'pwd', 'secret', 'token', 'api_key',
    'apikey', 'auth', 'authorization', 'credentials', 'signature', 'sig'
}

# Regex patterns for sensitive data in strings
SENSITIVE_PATTERNS = [
    (re.compile(r'(Bearer\s+[a-zA-Z0-9\-._~+/]+=*)'), 'Bearer ***'),
    # Query parameters carrying credentials, e.g. signed download links
    (re.compile(r'([?&](?:token|key|api_key|apikey|signature|sig|password|auth)=)[^&#\s]+', re.IGNORECASE),
     r'\1***'),
    (re.compile(r'([a-zA-Z0-9]{32,})'), lambda m: f"***{m.group(1)[-4:]}"),
]


class SensitiveDataFilter(logging.Filter):
    """
    Filtering hook to intercept and redact sensitive information.

    Attached to both the file and console handlers, so credentials are
    replaced with masks before a record is persisted or displayed.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = mask_string(record.msg)

        if record.args:
            if isinstance(record.args, dict):
                record.args = mask_sensitive_data(record.args)
            elif isinstance(record.args, tuple):
                record.args = tuple(
                    mask_sensitive_data(arg) if isinstance(arg, (dict, str)) else arg
                    for arg in record.args
                )

        return True


def mask_string(text: str) -> str:
    """Apply the regex patterns to mask sensitive data in a string."""
    for pattern, replacement in SENSITIVE_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def mask_sensitive_data(data: Any, mask_value: str = "***") -> Any:
    """
    Recursively redact sensitive fields from complex data structures.

    Dictionaries are scrubbed by key name (e.g. 'token', 'password'), strings
    by pattern. Token-like values keep their last four characters so two
    different credentials can still be told apart in a log.

    Args:
        data: The input data structure (dict, list, str, etc.) to be scrubbed.
        mask_value: The string used to replace sensitive content.

    Returns:
        A copy of the input data with sensitive values masked.
    """
    if isinstance(data, dict):
        masked = {}
        for key, value in data.items():
            key_lower = str(key).lower()

            if any(sensitive in key_lower for sensitive in SENSITIVE_FIELDS):
                if 'key' in key_lower or 'token' in key_lower:
                    if isinstance(value, str) and len(value) > 4:
                        masked[key] = f"{mask_value}{value[-4:]}"
                    else:
                        masked[key] = mask_value
                else:
                    masked[key] = mask_value
            else:
                masked[key] = mask_sensitive_data(value, mask_value)
        return masked

    elif isinstance(data, (list, tuple)):
        return type(data)(mask_sensitive_data(item, mask_value) for item in data)

    elif isinstance(data, str):
        return mask_string(data)

    return data


def setup_logging(
    log_level: int = logging.DEBUG,
    console_level: int = logging.INFO,
    log_format: Optional[str] = None,
    log_dir: Optional[Path] = None
) -> Path:
    """
    Initialize the application-wide logging configuration.

    Configs include:
    - Root Logger: Set to DEBUG to capture all events.
    - File Handler: Persists detailed logs to 'logs/quantum_toolbox.log'.
    - Console Handler: Displays human-readable INFO logs on stderr.

    Args:
        log_level: Granularity for the persistent log file.
        console_level: Granularity for the terminal output.
        log_format: Optional custom formatting string.
        log_dir: Directory for the log file (defaults to <project>/logs).

    Returns:
        Path: The path to the log file.
    """
    log_dir = Path(log_dir) if log_dir is not None else LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    if log_format is None:
        log_format = (
            '%(asctime)s - %(name)s - %(levelname)s - '
            '[%(filename)s:%(lineno)d] - %(message)s'
        )

    formatter = logging.Formatter(log_format, datefmt='%Y-%m-%d %H:%M:%S')

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Handlers do the filtering

    # Remove existing handlers to avoid duplicates on re-initialization
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    # Overwrite on each run, matching the single-file log policy
    file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    file_handler.addFilter(SensitiveDataFilter())
    root_logger.addHandler(file_handler)

    # stderr keeps stdout free for command output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(SensitiveDataFilter())
    root_logger.addHandler(console_handler)

    logging.info("=" * 80)
    logging.info(f"Quantum Asset Toolbox started - Log file: {log_file}")
    logging.info("=" * 80)

    return log_file


def shutdown_logging():
    """Flush and close all root handlers. Call before process exit."""
    logging.info("Shutting down logging system...")
    logging.shutdown()


def log_config(config_name: str, config_data: Dict[str, Any], logger: Optional[logging.Logger] = None):
    """
    Log configuration settings with automatic sensitive data masking.

    Args:
        config_name: Name of the configuration being logged
        config_data: Dictionary of configuration settings
        logger: Optional logger instance
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    masked_config = mask_sensitive_data(config_data)

    logger.info(f"Configuration: {config_name}")
    logger.debug(f"{config_name} details: {json.dumps(masked_config, indent=2, default=str)}")


def log_api_request(
    logger: logging.Logger,
    method: str,
    endpoint: str,
    headers: Optional[Dict] = None,
    params: Optional[Dict] = None
):
    """
    Log an outgoing HTTP request with masked sensitive data.

    Args:
        logger: Logger instance to use
        method: HTTP method (GET, POST, etc.)
        endpoint: Request URL
        headers: Request headers
        params: Query parameters
    """
    logger.info(f"API Request: {method} {mask_string(endpoint)}")

    if headers:
        logger.debug(f"Request headers: {mask_sensitive_data(headers)}")

    if params:
        logger.debug(f"Request params: {mask_sensitive_data(params)}")


def log_api_response(
    logger: logging.Logger,
    status_code: int,
    content_length: Optional[int] = None,
    elapsed_time: Optional[float] = None
):
    """
    Log an HTTP response with timing information.

    Args:
        logger: Logger instance to use
        status_code: HTTP status code
        content_length: Number of body bytes received
        elapsed_time: Request duration in seconds
    """
    timing_info = f" ({elapsed_time:.3f}s)" if elapsed_time is not None else ""
    logger.info(f"API Response: {status_code}{timing_info}")

    if content_length is not None:
        logger.debug(f"Response body: {content_length} bytes")

