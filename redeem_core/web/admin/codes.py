import csv
import io
import logging
from typing import AsyncIterator, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from redeem_core.data_model.code import CodePage, RedeemedCode, Stats
from redeem_core.service.container import Services
from redeem_core.web.dependencies import get_services

log = logging.getLogger(__name__)

router = APIRouter()

EXPORT_COLUMNS = ["code", "link", "used_at", "ip_address"]


@router.get("/codes", response_model=CodePage, response_model_by_alias=True)
async def list_codes(
    page: int = 1,
    search: Optional[str] = None,
    services: Services = Depends(get_services),
):
    return await services.codes.get_page(page, search)


@router.get("/stats", response_model=Stats)
async def stats(services: Services = Depends(get_services)):
    return await services.codes.stats()


@router.get("/export-redeemed")
async def export_redeemed(services: Services = Depends(get_services)):
    return StreamingResponse(
        _csv_rows(services.codes.iter_redeemed()),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=redeemed-codes.csv"},
    )


async def _csv_rows(rows: AsyncIterator[RedeemedCode]) -> AsyncIterator[str]:
    buffer = io.StringIO()
    writer = csv.writer(buffer)

    def flush() -> str:
        value = buffer.getvalue()
        buffer.seek(0)
        buffer.truncate(0)
        return value

    writer.writerow(EXPORT_COLUMNS)
    yield flush()
    count = 0
    async for row in rows:
        writer.writerow(
            [row.code, row.link, row.used_at.isoformat() if row.used_at else "", row.ip_address or ""]
        )
        count += 1
        yield flush()
    log.debug(f"exported {count} redeemed codes")
