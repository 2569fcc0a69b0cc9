from __future__ import annotations

from typing import Any

from fastapi import Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

TEAM_HEADER = "x-user-team"

CORS_ALLOW_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
CORS_ALLOW_HEADERS = [
    "Content-Type",
    "Authorization",
    "X-Api-Key",
    "X-Amz-Date",
    "X-Amz-Security-Token",
    "X-User-Team",
]


def success_response(data: Any, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": True, "data": jsonable_encoder(data)},
    )


def created_response(data: Any) -> JSONResponse:
    return success_response(data, status.HTTP_201_CREATED)


def no_content_response() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def error_response(
    message: str,
    status_code: int,
    *,
    code: str,
    details: Any = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {
                "message": message or "Internal server error",
                "code": code,
                "details": jsonable_encoder(details),
            },
        },
    )
