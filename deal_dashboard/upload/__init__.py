"""Upload workflow coordinating ingestion and the session state."""

from .service import USER_MESSAGES, UploadResult, UploadService, UploadTask, user_message

__all__ = ["USER_MESSAGES", "UploadResult", "UploadService", "UploadTask", "user_message"]
