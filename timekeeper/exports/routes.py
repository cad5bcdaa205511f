from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session
from datetime import date
from timekeeper.core.database import get_db
from timekeeper.core.dependencies import get_current_admin_user
from timekeeper.employees.models import Profile
from timekeeper.exports.service import ExportService

router = APIRouter(prefix="/exports", tags=["exports"])


@router.get("/{kind}")
async def export_csv(
    kind: str,
    start_date: date = Query(...),
    end_date: date = Query(...),
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Download attendance, vacations or schedule changes as CSV (admin only)."""
    filename, content = ExportService(db).export(kind, start_date, end_date, current_user)
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )
