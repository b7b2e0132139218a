"""JSON 文件文档库

每个集合一个 JSON 文件：<base_dir>/<collection>.json，内容为 {"documents": [...]}。
连接生命周期显式管理：connect() 之后才能读写，close() 之后拒绝访问。
"""

import asyncio
import copy
import secrets
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from common.exceptions import PersistenceError
from common.logger import get_logger
from common.utils.async_utils import read_json, write_json
from storage.query import Filter, MatchAll, resolve_path

logger = get_logger(__name__)

ID_FIELD = "_id"


def new_object_id() -> str:
    """24 位十六进制 ID"""
    return secrets.token_hex(12)


def is_valid_object_id(value: str) -> bool:
    if not isinstance(value, str) or len(value) != 24:
        return False
    try:
        int(value, 16)
    except ValueError:
        return False
    return True


def _set_path(doc: Dict[str, Any], path: str, value: Any) -> None:
    """按点号路径赋值，数字段表示数组下标"""
    parts = path.split(".")
    target: Any = doc
    for part in parts[:-1]:
        if isinstance(target, list):
            target = target[int(part)]
        else:
            target = target.setdefault(part, {})
    last = parts[-1]
    if isinstance(target, list):
        target[int(last)] = value
    else:
        target[last] = value


class Collection:
    """单个集合"""

    def __init__(self, store: "DocumentStore", name: str):
        self._store = store
        self.name = name
        self._path = store.base_dir / f"{name}.json"
        self._lock = asyncio.Lock()

    async def _load(self) -> List[Dict[str, Any]]:
        self._store.ensure_connected()
        if not self._path.exists():
            return []
        try:
            data = await read_json(self._path)
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Failed to read collection {self.name}", str(e))
        return data.get("documents", [])

    async def _save(self, documents: List[Dict[str, Any]]) -> None:
        try:
            await write_json(self._path, {"documents": documents})
        except OSError as e:
            raise PersistenceError(f"Failed to write collection {self.name}", str(e))

    async def find_one(self, query: Optional[Filter] = None) -> Optional[Dict[str, Any]]:
        query = query or MatchAll()
        for doc in await self._load():
            if query.matches(doc):
                return copy.deepcopy(doc)
        return None

    async def find(
        self,
        query: Optional[Filter] = None,
        limit: Optional[int] = None,
        sort_key: Optional[Callable[[Dict[str, Any]], Any]] = None,
        reverse: bool = False,
    ) -> List[Dict[str, Any]]:
        query = query or MatchAll()
        docs = [copy.deepcopy(d) for d in await self._load() if query.matches(d)]
        if sort_key is not None:
            docs.sort(key=sort_key, reverse=reverse)
        if limit is not None:
            docs = docs[:limit]
        return docs

    async def insert_one(self, document: Dict[str, Any]) -> str:
        async with self._lock:
            documents = await self._load()
            doc = copy.deepcopy(document)
            doc.setdefault(ID_FIELD, new_object_id())
            documents.append(doc)
            await self._save(documents)
        logger.debug("Inserted into %s: %s", self.name, doc[ID_FIELD])
        return doc[ID_FIELD]

    async def update_one(
        self,
        query: Filter,
        set_fields: Optional[Dict[str, Any]] = None,
        push: Optional[Dict[str, List[Any]]] = None,
    ) -> int:
        """更新首个匹配文档，返回修改数（0 或 1）"""
        async with self._lock:
            documents = await self._load()
            for doc in documents:
                if not query.matches(doc):
                    continue
                before = copy.deepcopy(doc)
                for path, value in (set_fields or {}).items():
                    _set_path(doc, path, copy.deepcopy(value))
                for field, items in (push or {}).items():
                    doc.setdefault(field, []).extend(copy.deepcopy(items))
                if doc == before:
                    return 0
                await self._save(documents)
                return 1
        return 0

    async def distinct(self, path: str, query: Optional[Filter] = None) -> List[Any]:
        query = query or MatchAll()
        values: List[Any] = []
        for doc in await self._load():
            if not query.matches(doc):
                continue
            for value in resolve_path(doc, path):
                if value is not None and value not in values:
                    values.append(value)
        return values

    async def count(self, query: Optional[Filter] = None) -> int:
        query = query or MatchAll()
        return sum(1 for d in await self._load() if query.matches(d))


class DocumentStore:
    """文档库句柄，由引擎显式创建并管理生命周期"""

    def __init__(self, base_dir: Path, name: str = "default"):
        self.base_dir = Path(base_dir)
        self.name = name
        self._connected = False
        self._collections: Dict[str, Collection] = {}

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"Cannot open store {self.name}", str(e))
        self._connected = True
        logger.info("Document store connected: %s (%s)", self.name, self.base_dir)

    async def close(self) -> None:
        self._connected = False
        self._collections.clear()
        logger.info("Document store closed: %s", self.name)

    def ensure_connected(self) -> None:
        if not self.is_connected:
            raise PersistenceError(f"Store {self.name} is not connected")

    def collection(self, name: str) -> Collection:
        if name not in self._collections:
            self._collections[name] = Collection(self, name)
        return self._collections[name]

    async def ping(self) -> bool:
        """可读写检查"""
        self.ensure_connected()
        if not self.base_dir.is_dir():
            raise PersistenceError(f"Store {self.name} directory missing", str(self.base_dir))
        return True
