from fastapi import APIRouter, Depends, UploadFile, File, Form, HTTPException, status

from app.core.config import settings
from app.core.exceptions import DeclarationSourceError, SchemaSnapshotError, SourceNotFoundError
from app.core.logging_config import logger
from app.dependencies import get_current_roles
from app.schemas.schema_mapping import MappingReport
from app.services.mapping import mapping_service
from app.services.mapping_report import mapping_report_service


router = APIRouter(dependencies=[Depends(get_current_roles)])

DBINFO_REPORT = "dbinfo"


@router.get("/dbinfo", response_model=MappingReport)
def get_dbinfo_mapping():
    """Last saved reconciliation of the DB Information workbook"""
    try:
        return mapping_report_service.load(settings.MAPPING_OUTPUT_DIR, DBINFO_REPORT)
    except SourceNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No saved DB Information mapping"
        )
    except Exception as e:
        logger.error(f"Error reading saved mapping: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to read mapping: {str(e)}"
        )


@router.post("/reconcile", response_model=MappingReport)
async def reconcile_workbook(
    file: UploadFile = File(...),
    sheet_name: str = Form(None),
):
    """
    Reconcile an uploaded declaration workbook (CSV or Excel) against the
    saved schema snapshot
    
    Unmatched rows are reported with suggestions, not rejected.
    """
    try:
        content = await file.read()
        logger.info(f"Reconciling uploaded declarations '{file.filename}'")
        return mapping_service.run_upload(content, file.filename or "", sheet_name=sheet_name)
    except SourceNotFoundError as e:
        logger.error(f"Reconciliation input missing: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except DeclarationSourceError as e:
        logger.error(f"Declaration parsing error: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except SchemaSnapshotError as e:
        logger.error(f"Saved schema snapshot is unusable: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Schema snapshot is invalid, rerun the schema scan: {str(e)}"
        )
    except Exception as e:
        logger.error(f"Unexpected error in reconciliation: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to reconcile declarations: {str(e)}"
        )
