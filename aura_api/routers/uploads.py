"""
Upload routes: multipart ``files`` saved to the local uploads directory and
served back under /uploads.
"""
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, File, UploadFile

from aura_api.core.errors import ValidationError
from aura_api.routers.deps import get_upload_store
from aura_api.services.upload_service import UploadStore, safe_basename

router = APIRouter(tags=["uploads"])


@router.post("/upload")
def upload(files: List[UploadFile] = File(...), store: UploadStore = Depends(get_upload_store)):
    # sync handler: reads and disk writes run in the threadpool, off the event loop
    if len(files) > store.max_files:
        raise ValidationError(f"Too many files. Limit is {store.max_files}")
    received = []
    for item in files:
        # one byte past the limit is enough to detect an oversize file
        received.append((item.filename or "", item.file.read(store.max_file_size + 1)))
    paths = store.save_all(received)
    return {"message": "Files uploaded successfully", "filepaths": paths}


@router.delete("/delete/{filename}")
def delete_file(filename: str, store: UploadStore = Depends(get_upload_store)):
    store.delete(filename)
    return {"message": f"File {safe_basename(filename)} deleted"}
