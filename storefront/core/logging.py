"""Logging configuration and utilities."""
import logging
import sys
from typing import Any, Dict

import structlog
from structlog.stdlib import LoggerFactory

from ..config import settings


def configure_logging():
    """Configure structured logging."""

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Configure standard logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.monitoring.log_level.upper()),
    )

    # Set third-party log levels
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


class RequestLogger:
    """Request logging utility."""

    @staticmethod
    def log_request(
        method: str,
        path: str,
        request_id: str = None,
        extra_data: Dict[str, Any] = None
    ):
        """Log incoming request."""
        logger = structlog.get_logger("api.request")
        logger.info(
            "Request started",
            method=method,
            path=path,
            request_id=request_id,
            **(extra_data or {})
        )

    @staticmethod
    def log_response(
        method: str,
        path: str,
        status_code: int,
        response_time_ms: float,
        user_id: str = None,
        request_id: str = None
    ):
        """Log response."""
        logger = structlog.get_logger("api.response")
        logger.info(
            "Request completed",
            method=method,
            path=path,
            status_code=status_code,
            response_time_ms=response_time_ms,
            user_id=user_id,
            request_id=request_id
        )

    @staticmethod
    def log_unhandled_error(method: str, path: str, request_id: str = None):
        """Log an unexpected exception with its traceback (server side only)."""
        logger = structlog.get_logger("api.error")
        logger.error(
            "Unhandled exception",
            method=method,
            path=path,
            request_id=request_id,
            exc_info=True
        )


class BusinessLogger:
    """Business event logging utility."""

    @staticmethod
    def log_user_created(user_id: str, role: str):
        logger = structlog.get_logger("business.user")
        logger.info("User created", event_type="user_created", user_id=user_id, role=role)

    @staticmethod
    def log_user_deleted(user_id: str, deleted_by: str):
        logger = structlog.get_logger("business.user")
        logger.info(
            "User deleted",
            event_type="user_deleted",
            user_id=user_id,
            deleted_by=deleted_by
        )

    @staticmethod
    def log_product_changed(product_id: str, action: str, user_id: str = None):
        """Log product create/update/delete and review changes."""
        logger = structlog.get_logger("business.product")
        logger.info(
            "Product changed",
            event_type="product_changed",
            product_id=product_id,
            action=action,
            user_id=user_id
        )

    @staticmethod
    def log_order_placed(order_id: str, user_id: str, total_price: float, items_count: int):
        logger = structlog.get_logger("business.order")
        logger.info(
            "Order placed",
            event_type="order_placed",
            order_id=order_id,
            user_id=user_id,
            total_price=total_price,
            items_count=items_count
        )

    @staticmethod
    def log_order_price_mismatch(user_id: str, client_total: float, computed_total: float):
        logger = structlog.get_logger("business.order")
        logger.warning(
            "Order total mismatch",
            event_type="order_price_mismatch",
            user_id=user_id,
            client_total=client_total,
            computed_total=computed_total
        )

    @staticmethod
    def log_email_event(kind: str, recipient: str, sent: bool, error_message: str = None):
        """Log an outbound email attempt."""
        logger = structlog.get_logger("business.email")
        log = logger.info if sent else logger.warning
        log(
            "Email dispatch",
            event_type="email_dispatch",
            kind=kind,
            recipient=recipient,
            sent=sent,
            error_message=error_message
        )


class SecurityLogger:
    """Security event logging utility.

    Never pass passwords, hashes, session tokens or reset secrets here.
    """

    @staticmethod
    def log_login_attempt(
        email: str,
        success: bool,
        ip_address: str = None,
        failure_reason: str = None
    ):
        """Log login attempt."""
        logger = structlog.get_logger("security.auth")
        logger.info(
            "Login attempt",
            event_type="login_attempt",
            email=email,
            success=success,
            ip_address=ip_address,
            failure_reason=failure_reason
        )

    @staticmethod
    def log_unauthorized_access(
        path: str,
        method: str,
        ip_address: str = None,
        reason: str = None
    ):
        """Log rejected session credential (missing, expired, malformed, dangling)."""
        logger = structlog.get_logger("security.access")
        logger.warning(
            "Unauthorized access attempt",
            event_type="unauthorized_access",
            path=path,
            method=method,
            ip_address=ip_address,
            reason=reason
        )

    @staticmethod
    def log_access_denied(path: str, user_id: str, role: str, required_roles: list[str]):
        logger = structlog.get_logger("security.access")
        logger.warning(
            "Access denied",
            event_type="access_denied",
            path=path,
            user_id=user_id,
            role=role,
            required_roles=required_roles
        )

    @staticmethod
    def log_password_reset_requested(email: str, user_found: bool):
        logger = structlog.get_logger("security.password")
        logger.info(
            "Password reset requested",
            event_type="password_reset_requested",
            email=email,
            user_found=user_found
        )

    @staticmethod
    def log_password_changed(user_id: str, via: str):
        """Log a committed password change (``via`` is "reset" or "update")."""
        logger = structlog.get_logger("security.password")
        logger.info(
            "Password changed",
            event_type="password_changed",
            user_id=user_id,
            via=via
        )
