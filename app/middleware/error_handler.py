from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

logger = logging.getLogger(__name__)


def error_body(message: str, status_code: int, path: str) -> dict:
    return {
        "error": {
            "message": message,
            "status_code": status_code,
            "path": path,
        }
    }


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        path = str(request.url.path)
        try:
            return await call_next(request)
        except StarletteHTTPException as e:
            return JSONResponse(
                status_code=e.status_code,
                content=error_body(e.detail, e.status_code, path),
                headers=getattr(e, "headers", None),
            )
        except Exception as e:
            logger.error(
                f"Unhandled exception: {e}",
                exc_info=True,
                extra={
                    "extra_fields": {
                        "path": path,
                        "method": request.method,
                        "user_id": getattr(request.state, "user_id", None),
                    }
                },
            )

            error_detail = str(e) if request.app.debug else "Internal server error"

            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=error_body(error_detail, 500, path),
            )
