"""
包裹API路由 - FastAPI表现层

响应统一包裹为 {code, message, data}：插入/更新/删除确认位于 data 中，
错误为 {code, message, data: null, error: {type, ...}}，而非裸的 {error: message}。
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_parcel_service
from application.dtos.parcels import ParcelCreateDTO, ParcelUpdateDTO
from application.services.parcel_service import ParcelApplicationService
from core.response import success_response, Response as ApiResponse

router = APIRouter(
    prefix="/parcels",
    tags=["Parcels"]
)


@router.post(
    "",
    summary="Book a parcel",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[dict],
)
async def create_parcel(
    payload: ParcelCreateDTO,
    service: ParcelApplicationService = Depends(get_parcel_service),
):
    """
    创建包裹

    - **email**: 寄件人邮箱（必填）
    - 其余字段作为寄件属性原样保存；status / payment_status / transactionId 由系统赋值
    """
    result = await service.create_parcel(payload)
    return success_response(data=result.model_dump(by_alias=True), message="Parcel created")


@router.get("", summary="List parcels", response_model=ApiResponse[list])
async def list_parcels(
    email: Optional[str] = Query(default=None, description="Filter by sender email"),
    service: ParcelApplicationService = Depends(get_parcel_service),
):
    parcels = await service.list_parcels(email=email)
    return success_response(data=[p.to_wire() for p in parcels])


@router.get("/{parcel_id}", summary="Get parcel", response_model=ApiResponse[dict])
async def get_parcel(
    parcel_id: str,
    service: ParcelApplicationService = Depends(get_parcel_service),
):
    parcel = await service.get_parcel(parcel_id)
    return success_response(data=parcel.to_wire())


@router.patch("/{parcel_id}", summary="Edit parcel", response_model=ApiResponse[dict])
async def update_parcel(
    parcel_id: str,
    payload: ParcelUpdateDTO,
    service: ParcelApplicationService = Depends(get_parcel_service),
):
    """部分更新；系统维护的字段不可写入（400）"""
    result = await service.update_parcel(parcel_id, payload)
    return success_response(data=result.model_dump(by_alias=True), message="Parcel updated")


@router.delete("/{parcel_id}", summary="Delete parcel", response_model=ApiResponse[dict])
async def delete_parcel(
    parcel_id: str,
    service: ParcelApplicationService = Depends(get_parcel_service),
):
    result = await service.delete_parcel(parcel_id)
    return success_response(data=result.model_dump(by_alias=True), message="Parcel deleted")
