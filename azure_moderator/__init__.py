"""azure-moderator: Azure Content Safety moderation client.

Wraps the Content Safety REST API for text, image, and multimodal
moderation, protected-material detection, and blocklist management, and
turns severity scores into an approve/flag verdict.
"""

__version__ = "1.0.0"

from azure_moderator.blocklists.service import BlocklistService
from azure_moderator.config import ModeratorConfig
from azure_moderator.exceptions import (
    InvalidInputError,
    ModerationError,
    RemoteAPIError,
    TransportError,
)
from azure_moderator.moderation.models import (
    BatchItem,
    CategoryAnalysis,
    ContentCategory,
    ContextResult,
    ModerationResult,
    ModerationStatus,
)
from azure_moderator.moderation.multimodal import MultimodalService
from azure_moderator.moderation.protected_material import ProtectedMaterialService
from azure_moderator.moderation.service import ContentSafetyService

__all__ = [
    "BatchItem",
    "BlocklistService",
    "CategoryAnalysis",
    "ContentCategory",
    "ContentSafetyService",
    "ContextResult",
    "InvalidInputError",
    "ModerationError",
    "ModerationResult",
    "ModerationStatus",
    "ModeratorConfig",
    "MultimodalService",
    "ProtectedMaterialService",
    "RemoteAPIError",
    "TransportError",
]
