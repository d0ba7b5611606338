from pydantic import BaseModel


class ExcelIngestRequest(BaseModel):
    path: str
    sheet: str | None = None
    dry_run: bool = False
