"""Notification / Link preview Schema"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class NotificationRequest(BaseModel):
    """字段在 manager 中校验，以便返回 400 而不是 422"""

    model_config = ConfigDict(populate_by_name=True)

    line_ids: Any = Field(default=None, alias="lineIds")
    podcast_url: Any = Field(default=None, alias="podcastUrl")
    patients: Optional[List[Any]] = None


class LinkPreviewRequest(BaseModel):
    url: Any = None
