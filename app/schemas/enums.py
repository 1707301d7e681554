from enum import Enum

class UploadStatus(str, Enum):
    pending = "pending"
    uploading = "uploading"
    uploaded = "uploaded"
    error = "error"

class OAuthProvider(str, Enum):
    google = "google"
