#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
TCM Clinic Records - 启动服务
"""

import socket
import sys

import uvicorn

from common.config import settings


def port_in_use(port: int) -> bool:
    """检测端口是否被占用"""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        return s.connect_ex(("127.0.0.1", port)) == 0


if __name__ == "__main__":
    if port_in_use(settings.port):
        print(f"端口 {settings.port} 已被占用，请先停止旧进程或设置 CLINIC_PORT")
        sys.exit(1)

    print("=" * 50)
    print("TCM Clinic Records API")
    print(f"服务地址: http://localhost:{settings.port}")
    print("=" * 50)

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="info",
    )
