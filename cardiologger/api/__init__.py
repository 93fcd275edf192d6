from __future__ import annotations

from .gateway import ApiGateway, endpoint

__all__ = ["ApiGateway", "endpoint"]
