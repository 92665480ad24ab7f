from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from schooldesk.api.deps import get_db, require_teacher
from schooldesk.core.security import verify_download_token
from schooldesk.crud import pdf_history as crud_pdf
from schooldesk.db.models.user import User
from schooldesk.schemas.pdf import AttendanceGridRequest, PdfExportOut, PdfHistoryOut
from schooldesk.services import pdf_exports
from schooldesk.services.storage import BlobStore, get_blob_store

router = APIRouter()


@router.post("/attendance-grid/{class_id}", response_model=PdfExportOut)
def export_attendance_grid(
    class_id: int,
    payload: Optional[AttendanceGridRequest] = None,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    current_user: User = Depends(require_teacher)
):
    payload = payload or AttendanceGridRequest()
    return pdf_exports.export_attendance_grid(
        db, store, class_id, payload.start_date, payload.end_date, created_by=current_user.id
    )


@router.get("/history", response_model=List[PdfHistoryOut])
def get_pdf_history(
    class_id: Optional[int] = None,
    type: Optional[str] = None,
    limit: int = 50,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher)
):
    return crud_pdf.list_entries(db, class_id=class_id, type=type, limit=min(max(limit, 1), 200))


# Скачивание по подписанной ссылке, без авторизации
@router.get("/files/{key:path}")
def download_file(
    key: str,
    token: str,
    store: BlobStore = Depends(get_blob_store),
):
    if not verify_download_token(token, key):
        raise HTTPException(status_code=403, detail="Ссылка недействительна или устарела")
    content = store.read(key)
    file_name = key.rsplit("/", 1)[-1]
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{file_name}"'},
    )
