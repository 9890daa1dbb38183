"""
VideoUp Common Core Package.
"""

from .config_enums import CatalogBackend, Environment
from .error_enums import CatalogErrorCode, ErrorCode
from .models.error_models import ErrorDetail
from .observability_enums import OperationType
from .status_enums import OperationStatus, VideoState

__all__ = [
    "CatalogBackend",
    "CatalogErrorCode",
    "Environment",
    "ErrorCode",
    "ErrorDetail",
    "OperationStatus",
    "OperationType",
    "VideoState",
]
