import logging
import uuid
from pathlib import Path
from fastapi import HTTPException, UploadFile
from excel_analytics.core.config import settings

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class LocalStorage:
    def __init__(self, upload_dir: str | None = None):
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    async def save_file(self, file: UploadFile, user_id: int, max_size: int | None = None) -> tuple[str, str, int]:
        """
        Save an uploaded workbook and return (file_path, filename, size).

        The write is aborted and the partial file removed as soon as the
        stream exceeds max_size.
        """
        max_size = settings.MAX_FILE_SIZE if max_size is None else max_size
        file_ext = Path(file.filename).suffix.lower()
        unique_filename = f"{uuid.uuid4()}{file_ext}"
        user_dir = self.upload_dir / str(user_id)
        user_dir.mkdir(parents=True, exist_ok=True)

        file_path = user_dir / unique_filename

        size = 0
        with open(file_path, "wb") as f:
            while True:
                chunk = await file.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > max_size:
                    break
                f.write(chunk)

        if size > max_size:
            self.delete_path(file_path)
            raise HTTPException(
                status_code=400,
                detail=f"File too large. Maximum size is {max_size // (1024 * 1024)}MB"
            )

        return str(file_path), unique_filename, size

    def delete_path(self, file_path: str | Path) -> bool:
        """
        Remove a stored file.

        Missing files are fine and OS errors are logged, never raised, so a
        failed cleanup can't block the metadata delete that triggered it.
        """
        path = Path(file_path)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Error deleting stored file {path}: {str(e)}")
            return False

    def iter_stored_files(self):
        """Yield (user_id, filename, path) for every file under the upload dir"""
        for user_dir in self.upload_dir.iterdir():
            if not user_dir.is_dir() or not user_dir.name.isdigit():
                continue
            for path in user_dir.iterdir():
                if path.is_file():
                    yield int(user_dir.name), path.name, path


storage = LocalStorage()
