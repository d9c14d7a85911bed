"""
Storage Service
Supabase Storage integration for item and profile images
"""

from pathlib import Path
import uuid
import httpx
from fastapi import HTTPException, UploadFile, status
from app.config import settings


class StorageService:
    """Supabase Storage helper"""

    @staticmethod
    def _ensure_config():
        if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Image storage is not configured"
            )

    @staticmethod
    def _object_url(path: str) -> str:
        base = settings.SUPABASE_URL.rstrip("/")
        return f"{base}/storage/v1/object/{settings.STORAGE_BUCKET}/{path}"

    @staticmethod
    def public_prefix() -> str:
        base = (settings.SUPABASE_URL or "").rstrip("/")
        return f"{base}/storage/v1/object/public/{settings.STORAGE_BUCKET}/"

    @staticmethod
    async def read_image(upload: UploadFile) -> bytes:
        """Read an uploaded image, enforcing type and size limits"""
        if upload.content_type not in settings.allowed_image_types:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unsupported image type '{upload.content_type}'"
            )

        content = await upload.read()

        if not content:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Uploaded file is empty"
            )

        if len(content) > settings.MAX_UPLOAD_SIZE:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Image exceeds the {settings.MAX_UPLOAD_SIZE // (1024 * 1024)} MB limit"
            )

        return content

    @staticmethod
    def build_path(folder: str, filename: str | None) -> str:
        file_ext = Path(filename or "").suffix or ".png"
        return f"{folder}/{uuid.uuid4().hex}{file_ext}"

    @staticmethod
    async def upload_bytes(path: str, content: bytes, content_type: str) -> str:
        StorageService._ensure_config()

        headers = {
            "Authorization": f"Bearer {settings.SUPABASE_KEY}",
            "apikey": settings.SUPABASE_KEY,
            "Content-Type": content_type or "application/octet-stream",
            "x-upsert": "true"
        }

        async with httpx.AsyncClient(timeout=30) as client:
            resp = await client.post(StorageService._object_url(path), headers=headers, content=content)

        if resp.status_code not in (200, 201):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Storage upload failed: {resp.text}"
            )

        return f"{StorageService.public_prefix()}{path}"

    @staticmethod
    async def upload_image(folder: str, upload: UploadFile) -> str:
        """Validate an uploaded image and store it under ``folder``"""
        content = await StorageService.read_image(upload)
        path = StorageService.build_path(folder, upload.filename)
        return await StorageService.upload_bytes(path, content, upload.content_type)

    @staticmethod
    async def delete_path(path: str) -> None:
        StorageService._ensure_config()

        headers = {
            "Authorization": f"Bearer {settings.SUPABASE_KEY}",
            "apikey": settings.SUPABASE_KEY
        }

        async with httpx.AsyncClient(timeout=30) as client:
            resp = await client.delete(StorageService._object_url(path), headers=headers)

        if resp.status_code not in (200, 204, 404):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Storage delete failed: {resp.text}"
            )

    @staticmethod
    async def delete_by_url(file_url: str) -> None:
        StorageService._ensure_config()

        prefix = StorageService.public_prefix()

        if file_url.startswith(prefix):
            await StorageService.delete_path(file_url[len(prefix):])
            return

        # URLs from elsewhere (seed data, external hosts) are not ours to delete
        return


storage_service = StorageService()
