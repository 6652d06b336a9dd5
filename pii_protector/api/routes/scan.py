"""Scan routes.

POST /scan         : run a full scan, return spans, counts, segments, schema
POST /scan/schema  : run a full scan, return only the schema as a download
POST /explain      : explain why a single value may be PII

Preflight rejections map to 4xx, oracle failures to 502 with a single
message.  Per-span rejections never surface here.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel, Field

from pii_protector.api.deps import get_oracle_client, get_scan_service
from pii_protector.engine.summary import describe
from pii_protector.engine.types import segment_to_dict
from pii_protector.export.json_exporter import scan_result_to_dict, schema_filename, schema_to_json
from pii_protector.llm.client import OllamaClient
from pii_protector.llm.oracles import explain_value
from pii_protector.scan.preflight import PreflightError, PreflightReason
from pii_protector.scan.service import ScanFailedError, ScanReport, ScanService

router = APIRouter(tags=["scan"])


class ScanRequest(BaseModel):
    text: str
    categories: list[str] | None = Field(
        default=None,
        description="Categories to scan for; omit to scan for the whole catalog.",
    )
    file_name: str | None = None


class ExplainRequest(BaseModel):
    value: str = Field(min_length=1)


async def _run_scan(body: ScanRequest, service: ScanService) -> ScanReport:
    try:
        return await service.scan(body.text, body.categories)
    except PreflightError as exc:
        status = 413 if exc.reason is PreflightReason.INPUT_TOO_LARGE else 400
        raise HTTPException(status_code=status, detail={"reason": exc.reason.value, "message": str(exc)})
    except ScanFailedError as exc:
        raise HTTPException(status_code=502, detail=str(exc))


@router.post("/scan", summary="Scan text for PII")
async def scan(body: ScanRequest, service: ScanService = Depends(get_scan_service)):
    report = await _run_scan(body, service)
    payload = scan_result_to_dict(report.result)
    payload["summary"] = describe(report.result.counts, service.catalog)
    payload["segments"] = [segment_to_dict(s) for s in report.segments]
    payload["schema"] = report.schema.pretty
    payload["schema_is_json"] = report.schema.is_json
    return payload


@router.post("/scan/schema", summary="Scan text and download the inferred PII schema")
async def scan_schema(body: ScanRequest, service: ScanService = Depends(get_scan_service)) -> Response:
    report = await _run_scan(body, service)
    filename = schema_filename(body.file_name)
    return Response(
        content=schema_to_json(report.schema),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/explain", summary="Explain why a value may be PII")
async def explain(body: ExplainRequest, client: OllamaClient = Depends(get_oracle_client)) -> dict[str, str]:
    return {"explanation": await explain_value(client, body.value)}
