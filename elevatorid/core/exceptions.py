"""Application-level exceptions and FastAPI exception handlers."""


from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: str | None = None, code: str = "NOT_FOUND"):
        msg = f"{entity} not found" if not entity_id else f"{entity} '{entity_id}' not found"
        super().__init__(msg, status_code=404, code=code)

class ForbiddenError(AppException):
    def __init__(self, message: str = "Access denied", code: str = "FORBIDDEN"):
        super().__init__(message, status_code=403, code=code)

class ConflictError(AppException):
    def __init__(self, message: str, code: str = "CONFLICT"):
        super().__init__(message, status_code=409, code=code)

class ValidationError(AppException):
    def __init__(self, message: str):
        super().__init__(message, status_code=422, code="VALIDATION_ERROR")

# ---------------------------------------------------------------------------
# Ledger errors
# ---------------------------------------------------------------------------

class PartNotFound(NotFoundError):
    def __init__(self, part_id: str):
        super().__init__("Part", part_id, code="PART_NOT_FOUND")

class TransferNotFound(NotFoundError):
    def __init__(self, transfer_id: str):
        super().__init__("Transfer", transfer_id, code="TRANSFER_NOT_FOUND")

class CompanyNotFound(NotFoundError):
    def __init__(self, company_id: str):
        super().__init__("Company", company_id, code="COMPANY_NOT_FOUND")

class ElevatorNotFound(NotFoundError):
    def __init__(self, elevator_id: str):
        super().__init__("Elevator", elevator_id, code="ELEVATOR_NOT_FOUND")

class DuplicatePartUid(ConflictError):
    def __init__(self, part_uid: str):
        super().__init__(f"Part UID '{part_uid}' is already registered", code="DUPLICATE_PART_UID")

class PartNotTransferable(ConflictError):
    def __init__(self, part_id: str, reason: str = "it is installed in an elevator"):
        super().__init__(f"Part '{part_id}' cannot change hands: {reason}", code="PART_NOT_TRANSFERABLE")

class NotPartOwner(ForbiddenError):
    def __init__(self, part_id: str, company_id: str | None):
        super().__init__(
            f"Company '{company_id}' does not own part '{part_id}'", code="NOT_PART_OWNER"
        )

class PartAlreadyInstalled(ConflictError):
    def __init__(self, part_id: str):
        super().__init__(f"Part '{part_id}' is already installed", code="PART_ALREADY_INSTALLED")

class PartNotInstalled(ConflictError):
    def __init__(self, part_id: str, elevator_id: str):
        super().__init__(
            f"Part '{part_id}' is not installed in elevator '{elevator_id}'",
            code="PART_NOT_INSTALLED",
        )

class TransferAlreadyPending(ConflictError):
    def __init__(self, part_id: str):
        super().__init__(
            f"Part '{part_id}' already has a pending transfer", code="TRANSFER_ALREADY_PENDING"
        )

class TransferNotPending(ConflictError):
    def __init__(self, transfer_id: str, status: str | None = None):
        msg = f"Transfer '{transfer_id}' is not pending"
        if status:
            msg += f" (status: {status})"
        super().__init__(msg, code="TRANSFER_NOT_PENDING")

class ApprovalNotAllowed(ForbiddenError):
    def __init__(self, message: str):
        super().__init__(message, code="APPROVAL_NOT_ALLOWED")

# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def _error_body(code: str, message: str) -> dict:
    return {"error": {"code": code, "message": message}}

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.code, exc.message),
        )

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content=_error_body("NOT_FOUND", "Resource not found"),
        )

    @app.exception_handler(500)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content=_error_body("INTERNAL_ERROR", "An unexpected error occurred"),
        )
