# src/conversion_pipeline/core/error_handling.py

import logging

from .exceptions import DecodeFailedError, EncodeUnsupportedError
from .models import FailureKind


def classify_failure(exc: BaseException) -> FailureKind:
    """
    Map an exception raised by a convert function to a failure kind.

    Codec availability is kept apart from malformed input because the
    remediation differs: another environment versus another file.
    """
    if isinstance(exc, EncodeUnsupportedError):
        return FailureKind.ENCODE_UNSUPPORTED
    if isinstance(exc, DecodeFailedError):
        return FailureKind.DECODE_FAILED
    return FailureKind.CONVERSION_FAILED


class BatchOperationContextManager:
    """
    Context manager for batch operations to collect and summarize errors.
    """
    def __init__(self, operation_name="Batch Operation"):
        self.operation_name = operation_name
        self.errors = []
        self.logger = logging.getLogger(self.__class__.__module__ + '.' + self.__class__.__name__)

    def __enter__(self):
        self.logger.info(f"Starting {self.operation_name}.")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.errors:
            self.logger.warning(
                f"{self.operation_name} completed with {len(self.errors)} error(s)."
            )
            for i, error_detail in enumerate(self.errors):
                item_identifier = error_detail.get('item', 'Unknown item')
                error_message = error_detail.get('error', 'Unknown error')
                self.logger.error(
                    f"  Error {i+1}/{len(self.errors)} for item '{item_identifier}': {error_message}"
                )
        elif exc_type:
            self.logger.error(
                f"{self.operation_name} failed due to an unhandled exception: {exc_val}",
                exc_info=(exc_type, exc_val, exc_tb)
            )
        else:
            self.logger.info(f"{self.operation_name} completed successfully.")

        # Exceptions that reach __exit__ are never suppressed.
        return False

    def add_error(self, error_message: str, item_identifier: str = "Unknown item"):
        """
        Record a failed item within the 'with' block.

        Args:
            error_message (str): The failure reason.
            item_identifier (str): A string identifying the item (file name or id).
        """
        self.errors.append({"item": item_identifier, "error": str(error_message)})
        self.logger.debug(f"Error added for item '{item_identifier}' in {self.operation_name}: {error_message}")
