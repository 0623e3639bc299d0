from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from medcompare.errors import PrescriptionReadError
from medcompare.models.schemas import PrescriptionRequest, PrescriptionResponse
from medcompare.services import prescription_reader

router = APIRouter(prefix="/api", tags=["prescription"])


@router.post("/ocr-prescription", response_model=PrescriptionResponse)
async def ocr_prescription(request: PrescriptionRequest):
    """Extract medicine names from a base64 prescription image."""
    if not request.image_base64:
        return JSONResponse(status_code=400, content={"success": False, "error": "imageBase64 is required"})
    try:
        medicines = await prescription_reader.read_prescription(
            request.image_base64,
            request.mime_type,
        )
    except PrescriptionReadError as exc:
        return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})
    return PrescriptionResponse(success=True, medicines=medicines)
