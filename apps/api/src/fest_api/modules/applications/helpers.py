"""
Student Applications Shared Helpers

Document lookups shared by the review listing and the final snapshot.
"""

from collections.abc import Iterable

from fest_api.modules.applications.models import ApplicationDocument, DocumentType


def documents_by_type(documents: Iterable[ApplicationDocument]) -> dict[str, str]:
    """
    Map lower-cased document type to URL.

    Uploaders are inconsistent about casing ("AADHAR", "Aadhar", "aadhar"),
    so keys are normalised. When the same type was uploaded twice the later
    document in ``documents`` wins.

    Args:
        documents: Documents of one application, oldest first

    Returns:
        Dict like ``{"aadhar": "https://...", "sslc": "https://..."}``
    """
    urls: dict[str, str] = {}
    for document in documents:
        document_type = (document.document_type or "").strip().lower()
        if document_type:
            urls[document_type] = document.document_url
    return urls


def snapshot_document_urls(documents: Iterable[ApplicationDocument]) -> dict[str, str | None]:
    """The document URL columns of the final snapshot, ``None`` where not uploaded."""
    urls = documents_by_type(documents)
    return {
        "aadhaar_url": urls.get(DocumentType.AADHAR.value),
        "college_id_url": urls.get(DocumentType.COLLEGE_ID.value),
        "sslc_url": urls.get(DocumentType.SSLC.value),
    }
