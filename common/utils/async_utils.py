"""异步工具"""

import asyncio
import json
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable, List, TypeVar

import aiofiles

T = TypeVar("T")
R = TypeVar("R")


async def read_json(file_path: Path) -> Any:
    """异步读取 JSON 文件"""
    async with aiofiles.open(file_path, "r", encoding="utf-8") as f:
        content = await f.read()
        return json.loads(content)


async def write_json(file_path: Path, data: Any) -> None:
    """异步写入 JSON 文件（先写临时文件再替换）"""
    file_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = file_path.with_suffix(file_path.suffix + ".tmp")
    async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
        await f.write(json.dumps(data, ensure_ascii=False, indent=2))
    tmp_path.replace(file_path)


async def gather_limited(
    items: Iterable[T],
    func: Callable[[T], Awaitable[R]],
    max_concurrent: int,
) -> List[R]:
    """限制并发数地对每个元素执行协程"""
    semaphore = asyncio.Semaphore(max(1, max_concurrent))

    async def run_with_limit(item: T) -> R:
        async with semaphore:
            return await func(item)

    return await asyncio.gather(*(run_with_limit(i) for i in items))
