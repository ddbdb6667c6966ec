"""
Structured operation logging for compliance setup, RASCI adoption and evidence discovery.
"""

import logging
import os
from typing import Any, Dict, List


class StructuredLogger:
    """Structured logger for store mutations, discovery runs and setup progress."""

    def __init__(self, name: str = "corecomply"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None, level: int = logging.INFO):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {sanitize_details(details)}"

        self.logger.log(level, message)

    # Evidence discovery
    def log_discovery_run(self, adapters_run: int, artifacts_added: int, failed: List[str] = None, status: str = "success"):
        """Log a completed evidence discovery run."""
        details = {
            "adapters_run": adapters_run,
            "artifacts_added": artifacts_added,
        }
        if failed:
            details["failed_adapters"] = failed
            status = "partial"

        self.log_operation("discovery.run", status, details)

    def log_adapter_failure(self, adapter_name: str, source: str, error: BaseException):
        """Log an integration adapter that raised or timed out."""
        details = {
            "adapter": adapter_name,
            "source": source,
            "error_type": type(error).__name__,
            "error": str(error)[:100],
        }
        self.log_operation("discovery.adapter", "failed", details, level=logging.ERROR)

    def log_artifact_added(self, artifact_id: str, source: str, confidence: float = None, matches: int = 0):
        """Log an artifact appended to the evidence store."""
        details = {"artifact_id": artifact_id, "source": source, "matches": matches}
        if confidence is not None:
            details["confidence"] = confidence

        self.log_operation("evidence.added", "success", details, level=logging.DEBUG)

    def log_evidence_review(self, artifact_id: str, action: str, found: bool = True):
        """Log a reviewer action on an artifact."""
        status = "success" if found else "not_found"
        self.log_operation(f"evidence.{action}", status, {"artifact_id": artifact_id})

    # Responsibility assignment
    def log_rasci_adoption(self, assigned_roles: int, domains: int, assignments: int):
        """Log a RASCI adoption from the key personnel directory."""
        details = {
            "assigned_roles": assigned_roles,
            "domains": domains,
            "assignments": assignments,
        }
        self.log_operation("rasci.adopted", "success", details)

    def log_key_personnel_change(self, action: str, role_keys: List[str], user_id: str = None):
        """Log an assignment, unassignment or hand-over in the role directory."""
        details = {"role_keys": role_keys}
        if user_id is not None:
            details["user_id"] = user_id

        self.log_operation(f"people.{action}", "success", details)

    # Setup wizard
    def log_setup_completion(self, completion: int, complete_steps: List[str]):
        """Log a recalculated setup completion percentage."""
        details = {"completion": completion, "complete_steps": complete_steps}
        self.log_operation("setup.completion", "calculated", details, level=logging.DEBUG)

    # Persistence
    def log_store_persisted(self, store_name: str, size_bytes: int):
        """Log a store snapshot write."""
        self.log_operation("store.persisted", "success", {"store": store_name, "bytes": size_bytes}, level=logging.DEBUG)

    def log_store_rehydrated(self, store_name: str, found: bool):
        """Log a store rehydration attempt."""
        status = "restored" if found else "defaults"
        self.log_operation("store.rehydrated", status, {"store": store_name})

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


# Global logger instance
logger = StructuredLogger()


def sanitize_details(details: Dict[str, Any], max_length: int = 100) -> Dict[str, Any]:
    """Truncate long string values before they reach a log line."""
    sanitized = {}
    for k, v in details.items():
        if isinstance(v, str) and len(v) > max_length:
            sanitized[k] = v[:max_length - 3] + "..."
        elif isinstance(v, dict):
            sanitized[k] = sanitize_details(v, max_length)
        else:
            sanitized[k] = v
    return sanitized
