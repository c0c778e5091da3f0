"""
Shared request dependencies.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Header, Request


def get_app_state(request: Request):
    return request.app.state


def get_user_id(x_user_id: Optional[str] = Header(None)) -> Optional[str]:
    """Operator id recorded in created_by/updated_by; identity is asserted upstream."""
    return x_user_id
