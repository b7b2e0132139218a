"""CSV 切分单元测试"""

import pytest

from common.exceptions import ParseError
from core.importer.tokenizer import parse_records, split_line, tokenize


class TestSplitLine:
    def test_quoted_comma_and_escaped_quote(self):
        """引号内逗号为字面量，"" 解码为单个引号"""
        assert split_line('"a, b""c",d') == ['a, b"c', "d"]

    def test_trailing_empty_field(self):
        assert split_line("a,b,") == ["a", "b", ""]


class TestTokenize:
    def test_bom_and_line_endings(self):
        rows = tokenize("\ufeffh1,h2\r\nx,y\r\n\r\nz,w\r")
        assert rows == [["h1", "h2"], ["x", "y"], ["z", "w"]]

    def test_quoted_newline_stays_in_field(self):
        rows = tokenize('h1,h2\n"line1\nline2",v\n')
        assert rows[1] == ["line1\nline2", "v"]

    @pytest.mark.parametrize("text", ["", "\n\n", "\ufeff\r\n"])
    def test_empty_input_raises(self, text):
        with pytest.raises(ParseError):
            tokenize(text)


class TestParseRecords:
    def test_header_mapping(self):
        records = parse_records("\ufeff 日期 ,Keywords\n2025/01/06 , 頭痛 \n2025/01/07\n")
        assert records == [
            {"日期": "2025/01/06", "Keywords": "頭痛"},
            {"日期": "2025/01/07", "Keywords": ""},
        ]

    def test_header_only(self):
        assert parse_records("日期,Keywords\n") == []
