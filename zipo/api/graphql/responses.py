"""Success envelope shared by mutations."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel


def success(code: int, data: Any = None, token: Optional[str] = None) -> dict[str, Any]:
	if isinstance(data, BaseModel):
		data = data.model_dump(mode="json")
	return {"code": code, "success": True, "data": data, "token": token}


def dump(model: BaseModel) -> dict[str, Any]:
	return model.model_dump(mode="json")
