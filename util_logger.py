# ============================================================================
# CLAUDE CONTEXT - LOGGING
# ============================================================================
# STATUS: Shared - used by socrata_features and services
# PURPOSE: JSON-only structured logging for the Socrata feature provider
# EXPORTS: ComponentType, LogLevel, LogContext, LoggerFactory, JSONFormatter, log_exceptions
# INTERFACES: Dataclass models, enums, factory, JSON formatter, exception decorator
# DEPENDENCIES: enum, dataclasses, typing, datetime, logging, json, traceback (stdlib only!)
# SOURCE: Provider layers define component types
# SCOPE: Foundation and factory layers for all structured logging in the provider
# PATTERNS: JSON-only output, Exception decorator pattern
# ENTRY_POINTS: LoggerFactory.create_logger(), @log_exceptions decorator
# ============================================================================

"""
Unified Logger System - Schemas and Factory

Structured JSON logging for the Socrata feature provider. Every record is
emitted as one JSON object on stdout with a ``customDimensions`` block that
carries the component and the request correlation fields (request id,
dataset id, Socrata host).

Design Principles:
- Strong typing with dataclasses (stdlib only)
- Enum safety for categories
- Component-specific loggers
- Clean factory pattern
"""

from enum import Enum
from typing import Optional, Dict, Any
from datetime import datetime, timezone
from dataclasses import dataclass
import logging
import os
import sys
import json
import traceback
from functools import wraps


# ============================================================================
# COMPONENT TYPES
# ============================================================================

class ComponentType(Enum):
    """
    Component types aligned with the provider layers.
    """
    SERVICE = "service"        # Orchestration (fetch-and-merge pipeline)
    ADAPTER = "adapter"        # Upstream lookups (metadata, extent)


# ============================================================================
# LOG LEVELS
# ============================================================================

class LogLevel(Enum):
    """
    Standard Python log levels as enum for type safety.
    """
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_python_level(self) -> int:
        """Convert to Python logging level constant."""
        return getattr(logging, self.value)

    @classmethod
    def from_string(cls, level: str) -> 'LogLevel':
        """Create from string, case-insensitive."""
        return cls[level.upper()]


# ============================================================================
# LOG CONTEXT - Request correlation
# ============================================================================

@dataclass
class LogContext:
    """
    Context for log correlation across one provider request.
    """
    request_id: Optional[str] = None  # Correlation id for a single get_data call
    dataset_id: Optional[str] = None  # Dataset id as requested by the caller
    host: Optional[str] = None        # Socrata domain serving the request
    layer: Optional[str] = None       # FeatureServer layer index

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            k: v for k, v in {
                'request_id': self.request_id,
                'dataset_id': self.dataset_id,
                'host': self.host,
                'layer': self.layer
            }.items() if v is not None
        }


# ============================================================================
# COMPONENT CONFIGURATION
# ============================================================================

@dataclass
class ComponentConfig:
    """
    Configuration for component-specific logging.
    """
    component_type: ComponentType
    log_level: LogLevel = LogLevel.INFO


# ============================================================================
# JSON FORMATTER
# ============================================================================

class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as a single JSON line.

        Args:
            record: Python LogRecord to format

        Returns:
            JSON string with structured log data
        """
        log_obj = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name,
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if hasattr(record, 'custom_dimensions'):
            log_obj['customDimensions'] = record.custom_dimensions

        if record.exc_info:
            log_obj['exception'] = {
                'type': record.exc_info[0].__name__ if record.exc_info[0] else None,
                'message': str(record.exc_info[1]) if record.exc_info[1] else None,
                'traceback': self.formatException(record.exc_info)
            }

        return json.dumps(log_obj, default=str)


# ============================================================================
# LOGGER FACTORY
# ============================================================================

class LoggerFactory:
    """
    Factory for creating component-specific loggers.

    Example:
        logger = LoggerFactory.create_logger(
            ComponentType.SERVICE,
            "SocrataFeatureService",
            LogContext(dataset_id="tmnf-yvry", host="data.sfgov.org")
        )
        logger.info("Fetching features")
    """

    # DEBUG_LOGGING=true raises every component to DEBUG
    default_level = LogLevel.DEBUG if os.getenv('DEBUG_LOGGING', '').lower() == 'true' else LogLevel.INFO

    DEFAULT_CONFIGS = {
        ComponentType.SERVICE: ComponentConfig(ComponentType.SERVICE, default_level),
        ComponentType.ADAPTER: ComponentConfig(ComponentType.ADAPTER, default_level)
    }

    @classmethod
    def create_logger(
        cls,
        component_type: ComponentType,
        name: str,
        context: Optional[LogContext] = None,
        config: Optional[ComponentConfig] = None
    ) -> logging.LoggerAdapter:
        """
        Create a logger for a specific component.

        The returned adapter injects the component and the request context
        as ``custom_dimensions`` on every record.

        Args:
            component_type: Type of component
            name: Component name (e.g., "SocrataFeatureService")
            context: Optional log context for correlation
            config: Optional custom configuration

        Returns:
            LoggerAdapter over the hierarchical component logger
        """
        if config is None:
            config = cls.DEFAULT_CONFIGS.get(
                component_type,
                ComponentConfig(component_type=component_type)
            )

        logger = logging.getLogger(f"{component_type.value}.{name}")

        if isinstance(config.log_level, str):
            log_level = LogLevel.from_string(config.log_level).to_python_level()
        else:
            log_level = config.log_level.to_python_level()
        logger.setLevel(log_level)

        # Loggers are shared per name; attach the JSON handler once
        if not any(getattr(h, '_socrata_json', False) for h in logger.handlers):
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(JSONFormatter())
            handler._socrata_json = True
            logger.addHandler(handler)

        logger.propagate = True

        dimensions = context.to_dict() if context else {}
        dimensions['component_type'] = component_type.value
        dimensions['component_name'] = name

        return _ContextAdapter(logger, dimensions)


class _ContextAdapter(logging.LoggerAdapter):
    """Merge the bound context into ``extra['custom_dimensions']``."""

    def process(self, msg, kwargs):
        extra = kwargs.get('extra') or {}
        custom_dims = dict(self.extra)
        if 'custom_dimensions' in extra:
            custom_dims.update(extra['custom_dimensions'])
        extra['custom_dimensions'] = custom_dims
        kwargs['extra'] = extra
        return msg, kwargs


# ============================================================================
# EXCEPTION DECORATOR
# ============================================================================

def log_exceptions(component_type: Optional[ComponentType] = None,
                   component_name: Optional[str] = None,
                   logger: Optional[logging.Logger] = None):
    """
    Decorator to log exceptions with full context, then re-raise.

    Args:
        component_type: Optional component type for creating logger
        component_name: Optional component name for creating logger
        logger: Optional existing logger to use

    Example:
        @log_exceptions(ComponentType.ADAPTER, "SocrataClient")
        def _get(self, url):
            ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if logger:
                log = logger
            elif component_type and component_name:
                log = LoggerFactory.create_logger(component_type, component_name)
            else:
                log = LoggerFactory.create_logger(
                    ComponentType.SERVICE,
                    func.__module__ or "unknown"
                )

            try:
                return func(*args, **kwargs)
            except Exception as e:
                log.error(
                    f"Exception in {func.__name__}",
                    exc_info=True,
                    extra={
                        'custom_dimensions': {
                            'function_name': func.__name__,
                            'function_module': func.__module__,
                            'exception_type': type(e).__name__,
                            'exception_message': str(e),
                            'function_args': str(args)[:500],
                            'function_kwargs': str(kwargs)[:500],
                            'traceback': traceback.format_exc()
                        }
                    }
                )
                raise
        return wrapper
    return decorator
