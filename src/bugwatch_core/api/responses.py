"""Translate controller results into HTTP responses."""
from http import HTTPStatus

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from ..results import ActionResult


def to_response(result: ActionResult) -> JSONResponse:
    """
    Build the response for a controller result.

    Results without a body get FastAPI's usual {"detail": <reason phrase>},
    which keeps a not-found permission denial identical to a missing entity.
    """
    if result.body is None:
        content = {"detail": HTTPStatus(result.status_code).phrase}
    else:
        content = jsonable_encoder(result.body)

    headers = {"Location": result.location} if result.location else None
    return JSONResponse(status_code=result.status_code, content=content, headers=headers)
