from typing import Optional

from sqlalchemy.orm import Session

from schooldesk.db.models.pdf_history import PdfHistory


def create_entry(
    db: Session,
    filename: str,
    type: str,
    storage_key: str,
    file_size: int,
    class_id: Optional[int] = None,
    created_by: Optional[int] = None,
) -> PdfHistory:
    entry = PdfHistory(
        filename=filename,
        type=type,
        class_id=class_id,
        storage_key=storage_key,
        file_size=file_size,
        created_by=created_by,
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


def list_entries(db: Session, class_id: Optional[int] = None, type: Optional[str] = None, limit: int = 50):
    query = db.query(PdfHistory)
    if class_id:
        query = query.filter(PdfHistory.class_id == class_id)
    if type:
        query = query.filter(PdfHistory.type == type)
    return query.order_by(PdfHistory.created_at.desc(), PdfHistory.id.desc()).limit(limit).all()
