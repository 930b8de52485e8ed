from typing import cast

from fastapi import Request

from app.context import AppContext


def get_context(request: Request) -> AppContext:
    return cast(AppContext, request.app.state.context)


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"
