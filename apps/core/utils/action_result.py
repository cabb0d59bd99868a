import functools
import logging
from dataclasses import dataclass
from typing import Any, Optional

from apps.core.exceptions import ErrorKind, MarketplaceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionResult:
    """Success payload or typed error returned by every public operation."""

    success: bool
    data: Any = None
    error: Optional[ErrorKind] = None
    message: str = ""

    @classmethod
    def ok(cls, data=None, message=""):
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, error: ErrorKind, message: str):
        return cls(success=False, error=error, message=message)

    def unwrap(self):
        """Return the payload, raising the matching error when the action failed."""
        if not self.success:
            raise MarketplaceError.for_kind(self.error, self.message)
        return self.data


def service_action(func):
    """
    Run a domain operation and convert expected business errors into a failed
    ``ActionResult``. Anything else is a bug or a storage failure and
    propagates to the caller.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            data = func(*args, **kwargs)
        except MarketplaceError as e:
            logger.warning(f"{func.__name__} refused [{e.kind}]: {e.message}")
            return ActionResult.fail(e.kind, e.message)
        except Exception as e:
            logger.exception(f"Unexpected error in {func.__name__}: {str(e)}")
            raise
        return ActionResult.ok(data)

    return wrapper
