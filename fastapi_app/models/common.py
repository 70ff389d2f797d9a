"""
通用模型
"""

from typing import Annotated, Any, Optional

from pydantic import BeforeValidator

from fastapi_app.utils.errors import ErrorResponse


def _as_text(value: Any) -> Optional[str]:
    # 数字转字符串，其余非字符串值视为缺失
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


OptionalText = Annotated[Optional[str], BeforeValidator(_as_text)]

__all__ = ['ErrorResponse', 'OptionalText']
