"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from fastapi import File, UploadFile, status

from app.api.errors import APIRequestError

CSV_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "text/x-csv",
}

UPLOAD_REJECTED_MESSAGE = "Please upload a CSV file."


def get_csv_upload(file: UploadFile | None = File(default=None)) -> UploadFile:
    """
    Require one uploaded file whose declared content type is CSV.

    Media type parameters such as ``charset`` are ignored.
    """

    if file is None:
        raise APIRequestError(status.HTTP_400_BAD_REQUEST, error=UPLOAD_REJECTED_MESSAGE)

    content_type = (file.content_type or "").split(";", 1)[0].strip().lower()
    if content_type not in CSV_CONTENT_TYPES:
        raise APIRequestError(status.HTTP_400_BAD_REQUEST, error=UPLOAD_REJECTED_MESSAGE)

    return file
