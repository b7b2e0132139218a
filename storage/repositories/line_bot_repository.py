"""LINE Bot 库（只读）"""

from typing import List

from storage.document_store import Collection


class LineBotRepository:
    """LINE Bot 用户记录"""

    def __init__(self, collection: Collection):
        self._col = collection

    async def distinct_user_ids(self) -> List[str]:
        values = await self._col.distinct("userId")
        return [v for v in values if isinstance(v, str) and v]
