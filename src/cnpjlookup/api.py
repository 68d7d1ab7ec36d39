"""Aplicação FastAPI que expõe a consulta de CNPJ."""
from __future__ import annotations

from datetime import date

import uvicorn
from fastapi import APIRouter, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .config import Settings, load_settings
from .errors import CnpjLookupError, InvalidIdentifierError
from .gateway import CnpjLookupGateway
from .providers.base import LookupResult
from .utils.logging_setup import setup_logger

_BASE_LOGGER = setup_logger()
LOGGER = _BASE_LOGGER.getChild("api")


class LookupResultResponse(BaseModel):
    """Dados cadastrais devolvidos pelo provedor."""

    #: CNPJ normalizado (14 dígitos).
    cnpj: str
    #: Razão social registrada.
    legal_name: str
    #: Situação cadastral informada pelo provedor.
    status: str
    #: Nome fantasia, quando existir.
    trade_name: str | None = None
    #: Data de abertura da empresa.
    opening_date: date | None = None
    #: CNAE principal no formato ``código - descrição``.
    primary_activity: str | None = None
    #: CNAEs secundários separados por ponto e vírgula.
    secondary_activities: str | None = None
    street: str | None = None
    number: str | None = None
    complement: str | None = None
    district: str | None = None
    municipality: str | None = None
    state: str | None = None
    postal_code: str | None = None
    phone: str | None = None
    email: str | None = None
    company_type: str | None = None
    company_size: str | None = None
    legal_nature: str | None = None
    #: Corpo bruto da resposta do provedor, mantido para auditoria.
    raw_json: str = ""

    @classmethod
    def from_result(cls, result: LookupResult) -> LookupResultResponse:
        return cls(**result.as_dict())


class LookupResponse(BaseModel):
    success: bool = True
    cached: bool
    data: LookupResultResponse


class ErrorResponse(BaseModel):
    success: bool = False
    message: str


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message).model_dump(),
    )


def create_router(gateway: CnpjLookupGateway) -> APIRouter:
    router = APIRouter(tags=["CNPJ"])

    # sync handler: FastAPI runs it in its thread pool, where the gate blocks
    @router.get(
        "/cnpj/{cnpj}",
        response_model=LookupResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    def lookup_cnpj(cnpj: str):
        try:
            outcome = gateway.lookup(cnpj)
        except InvalidIdentifierError as exc:
            return _error(400, exc.user_message)
        except CnpjLookupError as exc:
            return _error(500, exc.user_message)
        except Exception:
            LOGGER.exception("Erro inesperado na consulta de CNPJ")
            return _error(500, CnpjLookupError.user_message)

        return LookupResponse(
            cached=outcome.cached,
            data=LookupResultResponse.from_result(outcome.result),
        )

    return router


def create_app(
    gateway: CnpjLookupGateway | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Instancia a aplicação com um único gateway compartilhado entre as requisições."""

    if gateway is None:
        gateway = CnpjLookupGateway.from_settings(settings or load_settings())
    app = FastAPI(
        title="CNPJ Lookup API",
        version="1.0.0",
        description="Consulta de dados cadastrais por CNPJ com cache e limite de requisições.",
    )
    app.include_router(create_router(gateway))
    return app


def run(settings: Settings | None = None) -> None:
    """Executa a API usando o Uvicorn."""

    settings = settings or load_settings()
    uvicorn.run(create_app(settings=settings), host=settings.host, port=settings.port)


__all__ = [
    "ErrorResponse",
    "LookupResponse",
    "LookupResultResponse",
    "create_app",
    "create_router",
    "run",
]
