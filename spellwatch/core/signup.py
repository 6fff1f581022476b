"""Access requests submitted from the signup form."""

from loguru import logger

from spellwatch.core.validation import AccessRequestInput, parse_input
from spellwatch.store.base import SERVER_TIMESTAMP, DocumentStore
from spellwatch.store.models import UserRequest
from spellwatch.utils.constants import (
    REQUEST_APPROVED,
    REQUEST_PENDING,
    REQUEST_REJECTED,
    USER_REQUESTS_COLLECTION,
)
from spellwatch.utils.errors import (
    DuplicateRequestError,
    InvalidTransitionError,
    RequestNotFoundError,
    ValidationError,
)


class AccessRequests:
    """Pending-request intake. One pending request per email, checked by
    reading before writing."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def request_access(self, data: dict) -> str:
        form = parse_input(AccessRequestInput, data)
        email = str(form.email)

        pending = self.store.query(
            USER_REQUESTS_COLLECTION,
            where={"email": email, "status": REQUEST_PENDING},
            limit=1,
        )
        if pending:
            raise DuplicateRequestError(email)

        request_id = self.store.add(USER_REQUESTS_COLLECTION, {
            "email": email,
            "role": form.role,
            "assignedCity": form.assigned_city,
            "status": REQUEST_PENDING,
            "requestedAt": SERVER_TIMESTAMP,
        })
        logger.info(f"Access request {request_id} submitted for {email} as {form.role}")
        return "Your request has been submitted for approval."

    def list_pending(self) -> list[UserRequest]:
        docs = self.store.query(USER_REQUESTS_COLLECTION, where={"status": REQUEST_PENDING})
        requests = [UserRequest.from_document(d.doc_id, d.data) for d in docs]
        return sorted(requests, key=lambda r: r.requested_at.isoformat() if r.requested_at else "")

    def review(self, request_id: str, status: str) -> UserRequest:
        if status not in (REQUEST_APPROVED, REQUEST_REJECTED):
            raise ValidationError("Status must be 'approved' or 'rejected'.", field="status")

        doc = self.store.get(USER_REQUESTS_COLLECTION, request_id)
        if doc is None:
            raise RequestNotFoundError(request_id)
        request = UserRequest.from_document(doc.doc_id, doc.data)
        if request.status != REQUEST_PENDING:
            raise InvalidTransitionError(f"Request for {request.email} was already {request.status}.")

        self.store.set(USER_REQUESTS_COLLECTION, request_id, {"status": status}, merge=True)
        request.status = status
        logger.info(f"Access request {request_id} for {request.email} {status}")
        return request
