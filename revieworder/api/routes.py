from fastapi import APIRouter, Depends, Request

from revieworder.core.context import run_id_var
from revieworder.domain.schemas.ordering import (
    OrderRequest,
    OrderResponse,
    PromptRequest,
    PromptResponse,
)
from revieworder.services.ordering_service import OrderingService


router = APIRouter()


def get_service(request: Request) -> OrderingService:
    return request.app.state.service


@router.get("/health")
async def health():
    return {"ok": True}


@router.get("/schema/tools")
async def tool_schemas(service: OrderingService = Depends(get_service)):
    return [spec.model_dump() for spec in service.registry.describe_all()]


@router.post("/api/prompt", response_model=PromptResponse)
async def prompt(req: PromptRequest, service: OrderingService = Depends(get_service)):
    response = await service.prompt(req.prompt, req.system_prompt, req.log_key)
    return PromptResponse(response=response)


@router.post("/api/order", response_model=OrderResponse)
async def order(req: OrderRequest, service: OrderingService = Depends(get_service)):
    result = await service.order(req)
    return OrderResponse.from_result(result, run_id=run_id_var.get())
