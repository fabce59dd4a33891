"""Map service errors to HTTP responses: {"detail": message, "code": ErrorKind}."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from teamledger.core.exceptions import ErrorKind, TeamLedgerError

logger = logging.getLogger(__name__)

ERROR_KIND_TO_STATUS: dict[ErrorKind, int] = {
    ErrorKind.USER_ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorKind.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.LOGIN_FAILED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_AUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.INVALID_TOKEN: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.INVALID_ARGUMENT: status.HTTP_400_BAD_REQUEST,
}


def status_for(kind: ErrorKind) -> int:
    return ERROR_KIND_TO_STATUS.get(kind, status.HTTP_400_BAD_REQUEST)


async def teamledger_error_handler(request: Request, exc: TeamLedgerError) -> JSONResponse:
    status_code = status_for(exc.kind)
    logger.info(
        "%s %s -> %s %s: %s",
        request.method,
        request.url.path,
        status_code,
        exc.kind.value,
        exc.message,
    )
    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.kind.value},
        headers=headers,
    )


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TeamLedgerError, teamledger_error_handler)
