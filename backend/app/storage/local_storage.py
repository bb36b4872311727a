import time
import uuid
from pathlib import Path
from app.core.config import settings


class LocalStorage:
    def __init__(self, upload_dir: str | None = None, url_prefix: str | None = None):
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)
        self.url_prefix = (url_prefix or settings.UPLOAD_URL_PREFIX).strip("/")
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def save_bytes(self, content: bytes, original_filename: str) -> str:
        """Save file content and return its public path"""
        # Timestamped name, with a random suffix so files saved in the
        # same millisecond do not overwrite each other
        file_ext = Path(original_filename).suffix.lower()
        unique_filename = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{file_ext}"

        with open(self.upload_dir / unique_filename, "wb") as f:
            f.write(content)

        return f"{self.url_prefix}/{unique_filename}"

    def get_file_path(self, public_path: str) -> Path:
        """Get full path on disk for a stored public path"""
        # Only the final component is trusted, never directories from the record
        return self.upload_dir / Path(public_path).name

    def delete_file(self, public_path: str) -> bool:
        """Delete a stored file"""
        file_path = self.get_file_path(public_path)
        if file_path.exists():
            file_path.unlink()
            return True
        return False

    def file_exists(self, public_path: str) -> bool:
        """Check if file exists"""
        return self.get_file_path(public_path).exists()


storage = LocalStorage()
