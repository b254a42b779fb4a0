import logging

import cloudinary
import cloudinary.uploader

from dentflow.core.config import settings

logger = logging.getLogger(__name__)

_configured = False


class CDNNotConfigured(RuntimeError):
    pass


def setup_cloudinary() -> None:
    global _configured
    if _configured:
        return
    if not settings.cloudinary_configured:
        raise CDNNotConfigured("Missing CLOUDINARY_* settings")
    cloudinary.config(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        secure=True,
    )
    _configured = True


def upload_patient_photo(file_bytes: bytes, folder: str) -> tuple[str, str]:
    """
    Uploads a patient photo cropped square (512x512) around the face when the
    account supports automatic gravity. Returns (secure_url, public_id).
    """
    setup_cloudinary()
    res = cloudinary.uploader.upload(
        file_bytes,
        folder=folder,
        resource_type="image",
        overwrite=True,
        unique_filename=True,
        use_filename=False,
        tags=["dentflow", "patient-photo"],
        type="upload",
        transformation=[
            {"width": 512, "height": 512, "crop": "fill", "gravity": "auto"},
            {"quality": "auto:good"},
            {"fetch_format": "auto"}
        ],
    )
    logger.info(f"Uploaded patient photo {res['public_id']}")
    return res["secure_url"], res["public_id"]


def destroy(public_id: str | None) -> None:
    if not public_id:
        return
    setup_cloudinary()
    cloudinary.uploader.destroy(public_id, resource_type="image", invalidate=True)
    logger.info(f"Removed patient photo {public_id}")
