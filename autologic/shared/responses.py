"""Success envelope helpers"""

from typing import Any, Optional

from ..i18n import language_meta
from .pagination import PageParams


def success(data: Any = None, locale: Optional[str] = None, message: Optional[str] = None, **extra) -> dict:
    body: dict = {"status": "success"}
    if message:
        body["message"] = message
    body.update(extra)
    if data is not None:
        body["data"] = data
        if locale:
            body["language"] = language_meta(locale)
    return body


def paginated(
    key: str, items: list, total: int, params: PageParams, locale: Optional[str] = None
) -> dict:
    return success(
        {key: items},
        locale,
        results=len(items),
        total=total,
        page=params.page,
        pages=params.pages(total),
    )
