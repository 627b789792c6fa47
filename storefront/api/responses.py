from typing import Any

from bson import ObjectId
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def encode(data: Any) -> Any:
    return jsonable_encoder(data, custom_encoder={ObjectId: str})


def success(data: Any, message: str = "Success", status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": True, "message": message, "data": encode(data)})


def failure(message: str = "Internal Server Error", status_code: int = 500, errors: Any = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message, "errors": encode(errors)})
