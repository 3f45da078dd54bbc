"""FastAPI server exposing schema compilation and extraction."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Header, HTTPException
from pydantic import BaseModel, Field

from .config import ApiSettings, load_api_settings
from .errors import SchemaError
from .extraction import extract_document, extract_fragment
from .formats import result_to_data
from .schema import CompiledSchemaNode, compile_schema


class CompileRequest(BaseModel):
    schema_: Dict[str, Any] = Field(alias="schema")


class ExtractRequest(BaseModel):
    html: str
    schema_: Dict[str, Any] = Field(alias="schema")
    fragment: bool = False
    omit_empty: bool = True


def _schema_error(exc: SchemaError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail={"kind": getattr(exc, "kind", "format"), "path": list(exc.path), "message": exc.message},
    )


def _compile(schema: Dict[str, Any]) -> CompiledSchemaNode:
    try:
        return compile_schema(schema)
    except SchemaError as exc:
        raise _schema_error(exc) from exc


def create_app(settings: Optional[ApiSettings] = None) -> FastAPI:
    app = FastAPI(title="soupschema")
    app.state.settings = settings or load_api_settings()

    def get_settings() -> ApiSettings:
        return app.state.settings

    async def require_auth(authorization: str | None = Header(default=None), settings: ApiSettings = Depends(get_settings)):
        if not settings.enable_auth:
            return
        if not authorization or authorization.replace("Bearer ", "") != (settings.token or ""):
            raise HTTPException(status_code=401, detail="unauthorized")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.post("/compile")
    async def compile_endpoint(req: CompileRequest, _: None = Depends(require_auth)):
        compiled = _compile(req.schema_)
        return {"ok": True, "fields": list(compiled.items), "nodes": compiled.node_count()}

    @app.post("/extract")
    def extract_endpoint(
        req: ExtractRequest,
        settings: ApiSettings = Depends(get_settings),
        _: None = Depends(require_auth),
    ):
        if len(req.html.encode("utf-8")) > settings.max_document_bytes:
            raise HTTPException(status_code=413, detail="document too large")
        compiled = _compile(req.schema_)
        run = extract_fragment if req.fragment else extract_document
        return {"result": result_to_data(run(req.html, compiled), omit_empty=req.omit_empty)}

    return app


app = create_app()


__all__ = ["app", "create_app"]
