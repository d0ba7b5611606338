from fastapi import APIRouter, Depends, HTTPException
from openpyxl.utils.exceptions import InvalidFileException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import StockControlError
from app.dependencies import get_db, require_auth
from app.schemas.ingest import ExcelIngestRequest
from app.services.ingestion_service import import_workbook

router = APIRouter(prefix="/ingest", tags=["Ingest"])


@router.post("/excel")
def ingest_excel(
    payload: ExcelIngestRequest,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    try:
        results = import_workbook(
            payload.path,
            sheet=payload.sheet,
            dry_run=payload.dry_run,
            db=db,
        )
    except StockControlError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    except (OSError, ValueError, SQLAlchemyError, InvalidFileException) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"results": results}
