"""链接预览单元测试"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from common.config import LinkPreviewConfig
from common.exceptions import LinkPreviewError, ValidationError
from services.link_preview_service import LinkPreviewService, extract_metadata, validate_url

HTML = """
<html><head>
<title>養生 Podcast 第一集</title>
<meta name="description" content="春季養肝">
<meta property="og:image" content="/cover.png">
<link rel="icon" href="/favicon.ico">
</head></html>
"""


class TestExtractMetadata:
    def test_fields(self):
        meta = extract_metadata("https://pod.example/ep1", HTML)
        assert meta["title"] == "養生 Podcast 第一集"
        assert meta["description"] == "春季養肝"
        assert meta["image"] == "https://pod.example/cover.png"
        assert meta["favicon"] == "https://pod.example/favicon.ico"
        assert meta["domain"] == "pod.example"

    def test_fallbacks(self):
        meta = extract_metadata("https://pod.example/ep1", "<html></html>")
        assert meta["title"] == "pod.example"
        assert meta["image"] == ""


class TestValidateUrl:
    @pytest.mark.parametrize("url", [None, "", "ftp://x.y/z", "no-scheme", 42])
    def test_invalid(self, url):
        with pytest.raises(ValidationError):
            validate_url(url)


class TestLinkPreviewService:
    @pytest.mark.asyncio
    async def test_fetch_failure(self):
        service = LinkPreviewService(LinkPreviewConfig())
        http = MagicMock(is_closed=False)
        http.get = AsyncMock(side_effect=httpx.ConnectTimeout("slow"))
        with patch.object(service, "_get_client", return_value=http):
            with pytest.raises(LinkPreviewError):
                await service.preview("https://pod.example/ep1")
