"""File upload endpoint returning a retrievable URL for receipts and signed documents."""

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status

from backend.app.core.settings import get_settings
from backend.app.dependencies.auth import get_current_user
from backend.app.models.user import User
from backend.app.services.file_storage import FileStorageError, store_upload

router = APIRouter(tags=["uploads"])


@router.post("/upload")
async def upload_file(
    request: Request,
    file: UploadFile | None = File(default=None),
    current_user: User = Depends(get_current_user),
):
    if file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file provided")
    # Read at most one byte past the limit.
    data = await file.read(get_settings().max_upload_size + 1)
    try:
        stored_name = store_upload(file.filename, file.content_type, data)
    except FileStorageError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return {"url": str(request.url_for("uploads", path=stored_name))}
