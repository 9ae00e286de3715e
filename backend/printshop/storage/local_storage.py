import uuid
from pathlib import Path
from typing import Iterator
from fastapi import UploadFile
from printshop.core.exceptions import ValidationError


class LocalStorage:
    """
    Blob store for print files.

    Files live under <upload_dir>/<user_id>/<uuid><ext>. Callers treat the
    returned path as an opaque handle and persist it on the order.
    """

    def __init__(self, upload_dir: str, max_file_size: int):
        self.upload_dir = Path(upload_dir)
        self.max_file_size = max_file_size

    async def save_file(self, file: UploadFile, user_id: int) -> tuple[str, str]:
        """Save uploaded file and return (file_path, filename)"""
        if not file.filename:
            raise ValidationError("Filename is required")

        content = await file.read()
        if len(content) > self.max_file_size:
            raise ValidationError(
                f"File too large. Maximum size is {self.max_file_size // (1024 * 1024)}MB"
            )

        # Generate unique filename, keeping the extension for the print team
        file_ext = Path(file.filename).suffix
        unique_filename = f"{uuid.uuid4()}{file_ext}"
        user_dir = self.upload_dir / str(user_id)
        user_dir.mkdir(parents=True, exist_ok=True)

        file_path = user_dir / unique_filename
        with open(file_path, "wb") as f:
            f.write(content)

        return str(file_path), unique_filename

    def delete_path(self, file_path: str) -> bool:
        """Delete a stored file by the path save_file returned"""
        path = Path(file_path)
        if path.exists():
            path.unlink()
            return True
        return False

    def iter_files(self) -> Iterator[Path]:
        """Every stored file, across all users"""
        if not self.upload_dir.exists():
            return iter(())
        return (path for path in self.upload_dir.glob("*/*") if path.is_file())
