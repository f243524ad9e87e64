import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from labnotify.database import get_session
from labnotify.models.send_log import SmsLog, WhatsAppLog
from labnotify.schemas.channel import (
    ChannelSendResponse,
    SmsLogResponse,
    SmsSendRequest,
    WhatsAppLogResponse,
    WhatsAppSendRequest,
)
from labnotify.services.sms_client import SmsClient
from labnotify.services.whatsapp_client import WhatsAppClient

logger = logging.getLogger(__name__)

router = APIRouter()


def get_sms_client() -> SmsClient:
    return SmsClient()


def get_whatsapp_client() -> WhatsAppClient:
    return WhatsAppClient()


@router.post("/sms", response_model=ChannelSendResponse)
async def send_sms(data: SmsSendRequest, client: SmsClient = Depends(get_sms_client)):
    if not client.configured:
        raise HTTPException(
            status_code=503,
            detail="SMS gateway not configured. Please add SMS_API_KEY and SMS_SENDER_ID.",
        )
    if not data.phone or not data.message:
        raise HTTPException(status_code=400, detail="Missing required fields: phone, message")

    result = await client.send(data.phone, data.message, provider=data.provider)
    if not result.success:
        raise HTTPException(status_code=502, detail=result.error)
    return ChannelSendResponse(success=True, provider=result.provider, response=result.response)


@router.post("/whatsapp", response_model=ChannelSendResponse)
async def send_whatsapp(data: WhatsAppSendRequest, client: WhatsAppClient = Depends(get_whatsapp_client)):
    if not client.configured:
        raise HTTPException(
            status_code=503,
            detail="WhatsApp gateway not configured. Please add WHATSAPP_ACCESS_TOKEN and WHATSAPP_PHONE_NUMBER_ID.",
        )
    if not data.phone or not data.message:
        raise HTTPException(status_code=400, detail="Missing required fields: phone, message")

    result = await client.send(
        data.phone,
        data.message,
        template_name=data.template_name,
        template_params=data.template_params,
    )
    if not result.success:
        raise HTTPException(status_code=502, detail=result.error)
    return ChannelSendResponse(success=True, provider=result.provider, response=result.response)


@router.get("/sms/logs", response_model=List[SmsLogResponse])
async def list_sms_logs(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    session: AsyncSession = Depends(get_session),
):
    result = await session.execute(
        select(SmsLog).order_by(SmsLog.id.desc()).limit(limit).offset(offset)
    )
    return result.scalars().all()


@router.get("/whatsapp/logs", response_model=List[WhatsAppLogResponse])
async def list_whatsapp_logs(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    session: AsyncSession = Depends(get_session),
):
    result = await session.execute(
        select(WhatsAppLog).order_by(WhatsAppLog.id.desc()).limit(limit).offset(offset)
    )
    return result.scalars().all()
