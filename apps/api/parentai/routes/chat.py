from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from ..ai_proxy import ProxyError, forward_chat
from ..fallbacks import fallback_reply
from ..schemas import ChatMessage, ChatProxyRequest, ChatTurn, Conversation, SendMessagePayload
from ..supabase import UserContext, get_user_context, parse_uuid
from ..trackers import select_or_empty

router = APIRouter(tags=["chat"])
logger = logging.getLogger(__name__)

DEFAULT_CONVERSATION_TITLE = "New Conversation"


@router.post("/functions/v1/chat-ai")
@router.post("/api/v1/chat-ai")
async def chat_ai(
    request: Request,
    auth: UserContext = Depends(get_user_context),
):
    """Forward one chat turn upstream; failures carry a ``useFallback`` hint."""

    try:
        try:
            payload = ChatProxyRequest.model_validate(await request.json())
        except ValueError as exc:
            raise ProxyError("Internal server error", status_code=500) from exc
        reply = await asyncio.to_thread(forward_chat, payload.message, payload.conversation_history)
    except ProxyError as exc:
        logger.warning(
            "chat proxy failed",
            extra={"user_id": auth.user_id, "status": exc.status_code, "error": exc.message},
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())
    return {"response": reply}


async def _insert_message(
    auth: UserContext,
    conversation_id: str,
    role: str,
    content: str,
) -> ChatMessage:
    rows = await auth.supabase.insert(
        "chat_messages",
        {"conversation_id": conversation_id, "role": role, "content": content},
    )
    if not rows:
        raise HTTPException(status_code=502, detail="Supabase insert returned no row (table=chat_messages)")
    return ChatMessage.model_validate(rows[0])


async def _conversation_history(auth: UserContext, conversation_id: str) -> List[Dict[str, Any]]:
    return await select_or_empty(
        auth.supabase,
        "chat_messages",
        {
            "select": "id,conversation_id,role,content,created_at",
            "conversation_id": f"eq.{conversation_id}",
            "order": "created_at.asc",
        },
    )


@router.post("/api/v1/conversations", response_model=Conversation, status_code=201)
async def create_conversation(auth: UserContext = Depends(get_user_context)) -> Conversation:
    rows = await auth.supabase.insert(
        "chat_conversations",
        {"user_id": auth.user_id, "title": DEFAULT_CONVERSATION_TITLE},
    )
    if not rows:
        raise HTTPException(status_code=502, detail="Supabase insert returned no row (table=chat_conversations)")
    return Conversation.model_validate(rows[0])


@router.get("/api/v1/conversations", response_model=List[Conversation])
async def list_conversations(auth: UserContext = Depends(get_user_context)) -> List[Conversation]:
    rows = await select_or_empty(
        auth.supabase,
        "chat_conversations",
        {
            "select": "id,user_id,title,created_at",
            "user_id": f"eq.{auth.user_id}",
            "order": "created_at.desc",
        },
    )
    return [Conversation.model_validate(row) for row in rows]


@router.get("/api/v1/conversations/{conversation_id}/messages", response_model=List[ChatMessage])
async def list_conversation_messages(
    conversation_id: str,
    auth: UserContext = Depends(get_user_context),
) -> List[ChatMessage]:
    conversation_uuid = parse_uuid(conversation_id, "conversation_id")
    rows = await _conversation_history(auth, conversation_uuid)
    return [ChatMessage.model_validate(row) for row in rows]


@router.post("/api/v1/conversations/{conversation_id}/messages", response_model=ChatTurn)
async def send_message(
    conversation_id: str,
    payload: SendMessagePayload,
    auth: UserContext = Depends(get_user_context),
) -> ChatTurn:
    conversation_uuid = parse_uuid(conversation_id, "conversation_id")
    history = [
        {"role": row.get("role"), "content": row.get("content")}
        for row in await _conversation_history(auth, conversation_uuid)
    ]
    user_message = await _insert_message(auth, conversation_uuid, "user", payload.content)

    used_fallback = False
    try:
        reply = await asyncio.to_thread(forward_chat, payload.content, history)
    except ProxyError as exc:
        logger.warning(
            "assistant reply fell back to canned response",
            extra={"conversation_id": conversation_uuid, "status": exc.status_code},
        )
        reply = fallback_reply(use_fallback_hint=exc.use_fallback)
        used_fallback = True
    except Exception:
        logger.exception(
            "assistant reply failed, AI service unreachable",
            extra={"conversation_id": conversation_uuid},
        )
        reply = fallback_reply(use_fallback_hint=False)
        used_fallback = True

    assistant_message = await _insert_message(auth, conversation_uuid, "assistant", reply)
    return ChatTurn(
        user_message=user_message,
        assistant_message=assistant_message,
        used_fallback=used_fallback,
    )
