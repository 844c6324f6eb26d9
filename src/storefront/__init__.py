from .server import StorefrontServer
from .store import DuplicateReviewError, OrderStore

__all__ = ["StorefrontServer", "OrderStore", "DuplicateReviewError"]
