from fastapi import APIRouter, Depends

from redeem_core.data_model.import_job import CsvUpload, ImportProgress, ImportStarted
from redeem_core.service.container import Services
from redeem_core.web.dependencies import get_services

router = APIRouter()


@router.post("/upload-csv", response_model=ImportStarted, response_model_by_alias=True)
async def upload_csv(body: CsvUpload, services: Services = Depends(get_services)):
    return await services.imports.start_import(body.csv_data)


@router.get("/import-status/{job_id}", response_model=ImportProgress, response_model_by_alias=True)
async def import_status(job_id: str, services: Services = Depends(get_services)):
    return await services.imports.get_job_status(job_id)
