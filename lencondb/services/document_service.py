"""
Document service — versioned project documents.

Transaction policy: functions flush; the route handler commits. File
removal happens after the commit, so functions that obsolete a stored
file return its name instead of deleting it.

Replace keeps the Document row: the new file is stored, ``version`` goes
up by exactly one and ``uploaded_at`` / ``uploaded_by`` are refreshed.
"""
import logging

from werkzeug.datastructures import FileStorage

from lencondb.core.exceptions import NotFoundError, ValidationError
from lencondb.models import db, utcnow
from lencondb.models.document import DOCUMENT_TYPES, Document
from lencondb.services import file_storage
from lencondb.services.construction_service import get_construction
from lencondb.services.project_service import get_project

logger = logging.getLogger(__name__)


def list_documents(
    project_id: str | None = None,
    construction_id: str | None = None,
    doc_type: str | None = None,
    visible_ids=None,
) -> list[Document]:
    q = Document.query
    if visible_ids is not None:
        q = q.filter(Document.project_id.in_(visible_ids))
    if project_id:
        q = q.filter_by(project_id=project_id)
    if construction_id:
        q = q.filter_by(construction_id=construction_id)
    if doc_type:
        q = q.filter_by(type=doc_type)
    return q.order_by(Document.uploaded_at.desc()).all()


def get_document(document_id: str) -> Document:
    document = db.session.get(Document, document_id)
    if not document:
        raise NotFoundError(resource="Document", resource_id=document_id)
    return document


def upload_document(
    file: FileStorage,
    project_id: str,
    doc_type: str,
    uploaded_by_id: str,
    construction_id: str | None = None,
) -> Document:
    """Store a new file and create its Document row (version 1)."""
    if doc_type not in DOCUMENT_TYPES:
        raise ValidationError(
            f"Invalid document type: {doc_type}",
            details={"type": f"one of {', '.join(DOCUMENT_TYPES)}"},
        )
    project = get_project(project_id)
    if construction_id:
        construction = get_construction(construction_id)
        if construction.project_id != project.id:
            raise ValidationError("Construction belongs to another project")

    stored = file_storage.save_upload(file)
    document = Document(
        type=doc_type,
        version=1,
        path=stored.stored_name,
        original_name=stored.original_name,
        mime_type=stored.mime_type,
        hash_name=stored.stored_name,
        uploaded_at=utcnow(),
        uploaded_by_id=uploaded_by_id,
        project_id=project.id,
        construction_id=construction_id or None,
    )
    db.session.add(document)
    db.session.flush()
    logger.info("Document %s uploaded to project %s", document.id, project.id)
    return document


def replace_document(document: Document, file: FileStorage, uploaded_by_id: str) -> str:
    """Swap the stored file behind a document.

    Returns:
        The previous stored file name, to be removed after commit.
    """
    stored = file_storage.save_upload(file)
    previous = document.path

    document.path = stored.stored_name
    document.hash_name = stored.stored_name
    document.original_name = stored.original_name
    document.mime_type = stored.mime_type
    document.version = (document.version or 1) + 1
    document.uploaded_at = utcnow()
    document.uploaded_by_id = uploaded_by_id
    db.session.flush()
    logger.info("Document %s replaced, now version %d", document.id, document.version)
    return previous


def delete_document(document: Document) -> str:
    """Delete a document row. Returns its stored file name."""
    stored_name = document.path
    db.session.delete(document)
    db.session.flush()
    logger.info("Document %s deleted", document.id)
    return stored_name
