# backend/app/core/deps.py
from fastapi import Request

from ..services.analytics.store import OrderStore
from ..services.chat_engine import ChatEngine
from .config import AssistantConfig


def get_assistant_config(request: Request) -> AssistantConfig:
    return request.app.state.assistant_config


def get_order_store(request: Request) -> OrderStore:
    return request.app.state.order_store


def get_chat_engine(request: Request) -> ChatEngine:
    return request.app.state.chat_engine
