"""Logging utilities for the notification handlers.

Provides logging mixins and helper functions for configuring structured
JSON logging with AWS Lambda Powertools.
"""

import logging
from typing import Any, Dict, Optional, Union

from aibs_informatics_core.utils.logging import get_all_handlers
from aws_lambda_powertools.logging import Logger

from site_notifications.common.base import HandlerMixins

SERVICE_NAME = "site-notifications"

REQUEST_ID_KEY = "request_id"
LOG_CONTEXT_KEY = "context"


class LoggingMixins(HandlerMixins):
    """Mixin class providing structured logging capabilities.

    Every line is emitted as JSON by the Powertools Logger, which adds the
    service name, level and an ISO timestamp. Handlers bind the request id
    and their context tag with `bind_request`, so each line can be traced
    back to a single invocation.

    Attributes:
        log: Alias for the logger property.
        logger: The AWS Lambda Powertools Logger instance.
    """

    @property
    def log(self) -> Logger:
        return self.logger

    @log.setter
    def log(self, value: Logger):
        self.logger = value

    @property
    def logger(self) -> Logger:
        """Get the Logger instance, creating one if needed."""
        try:
            return self._logger
        except AttributeError:
            self.logger = self.get_logger(self.service_name())
        return self.logger

    @logger.setter
    def logger(self, value: Logger):
        self._logger = value

    @classmethod
    def get_logger(cls, service: Optional[str] = None, add_to_root: bool = False) -> Logger:
        """Create a new Logger instance.

        Args:
            service (Optional[str]): The service name for the logger. If None, uses default.
            add_to_root (bool): Whether to add the logger handler to the root logger.

        Returns:
            A configured Logger instance.
        """
        return get_service_logger(service=service, add_to_root=add_to_root)

    def add_logger_to_root(self):
        """Add this handler's logger to the root logger.

        Log lines from the datastore and email clients are then captured
        with the same structured format.
        """
        add_handler_to_logger(self.logger, None)


def get_service_logger(
    service: Optional[str] = None, child: bool = False, add_to_root: bool = False
) -> Logger:
    """Create a service logger with optional root logger integration.

    Args:
        service (Optional[str]): The service name for the logger. If None, uses default.
        child (bool): Whether to create a child logger.
        add_to_root (bool): Whether to add the logger handler to the root logger.

    Returns:
        A configured Logger instance for the service.
    """
    service_logger = Logger(service=service or SERVICE_NAME, child=child)
    if add_to_root:
        add_handler_to_logger(service_logger)
    return service_logger


def bind_request(service_logger: Logger, request_id: str, context_tag: str) -> None:
    """Attach the correlation id and context tag to every subsequent log line.

    Args:
        service_logger (Logger): The logger of the current invocation.
        request_id (str): The per-request correlation id.
        context_tag (str): Short tag naming the handler, e.g. `CONTACT_REPLY`.
    """
    service_logger.set_correlation_id(request_id)
    service_logger.append_keys(**{REQUEST_ID_KEY: request_id, LOG_CONTEXT_KEY: context_tag})


def error_fields(error: Optional[BaseException]) -> Dict[str, Any]:
    """Structured fields describing an underlying error."""
    if error is None:
        return {}
    return {"error_type": type(error).__name__, "error_message": str(error)}


def add_handler_to_logger(
    source_logger: Logger, target_logger: Union[str, logging.Logger, None] = None
):
    """Add a source logger's handler to a target logger.

    Copies the handler from the source logger to the target logger,
    ensuring consistent log formatting across loggers.

    Args:
        source_logger (Logger): The Logger whose handler will be copied.
        target_logger (Union[str, logging.Logger, None]): The target logger to receive the
            handler. Can be a logger name string, a Logger instance, or None
            for the root logger.
    """
    handler = source_logger.registered_handler

    if target_logger is None or isinstance(target_logger, str):
        target_logger = logging.getLogger(target_logger)
        log_level = min(source_logger.log_level, target_logger.getEffectiveLevel())
        target_logger.setLevel(log_level)
    target_logger_handlers = get_all_handlers(target_logger)

    if handler not in target_logger_handlers:
        target_logger.addHandler(handler)
