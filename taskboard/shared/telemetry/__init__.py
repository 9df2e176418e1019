"""Logging setup and request-scoped log context."""

from taskboard.shared.telemetry.logging import request_id_var, setup_logging

__all__ = ["request_id_var", "setup_logging"]
