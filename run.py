#!/usr/bin/env python3
"""
FastAPI 게이트웨이 + Streamlit 클라이언트를 '동시에' 띄우는 실행 스크립트.

- 게이트웨이 주소/포트는 .env(HOST, PORT)를 그대로 따른다.
- Streamlit에는 API_BASE 환경변수로 게이트웨이 주소를 넘겨준다.
  (frontend/app.py는 backend 패키지를 import하지 않음)
- uvicorn은 --reload 없이 띄운다 (drafts.json / uploads/ 쓰기가 파일 감시에 걸림).

실행:
  python run.py
"""

import os
import signal
import subprocess
import sys
from pathlib import Path

from backend.app.core.config import settings

PROJECT_ROOT = Path(__file__).parent
FRONTEND_APP = PROJECT_ROOT / "frontend" / "app.py"

# 띄운 자식 프로세스들 (종료 시 한꺼번에 정리)
processes: list[subprocess.Popen] = []


def pick_free_port(start: int = 8501, end: int = 8510, host: str = "127.0.0.1") -> int:
    """start~end 중 사용 가능한 첫 포트를 선택 (Streamlit 전용)"""
    import socket
    for port in range(start, end + 1):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            try:
                s.bind((host, port))
                return port
            except OSError:
                continue
    # 전부 사용 중이면 시작 포트로 시도 (Streamlit이 에러를 내고 죽을 수 있음)
    return start


def shutdown(*_):
    print("\n🛑 종료 신호 받음. 게이트웨이/클라이언트 정리 중...")
    # 1차: 점잖게 종료 요청
    for p in processes:
        p.terminate()
    # 2차: 5초 안에 안 죽으면 강제 종료
    for p in processes:
        try:
            p.wait(timeout=5)
        except subprocess.TimeoutExpired:
            p.kill()
    print("✅ 종료 완료")
    sys.exit(0)


def main():
    # Ctrl+C / kill 둘 다 같은 정리 루틴으로
    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    # (1) FastAPI 게이트웨이: 트렌드/캡션/초안 API + public/ 정적 프론트
    api_cmd = [
        sys.executable, "-m", "uvicorn",
        "backend.app.main:app",
        "--host", settings.HOST,
        "--port", str(settings.PORT),
    ]
    print("🚀 게이트웨이 시작:", " ".join(api_cmd))
    processes.append(subprocess.Popen(api_cmd, cwd=str(PROJECT_ROOT)))

    # (2) Streamlit 클라이언트: 포트는 8501~8510 중 빈 곳
    st_port = pick_free_port(start=8501, end=8510, host=settings.HOST)
    st_cmd = [
        sys.executable, "-m", "streamlit",
        "run", str(FRONTEND_APP),
        "--server.port", str(st_port),
        "--server.address", settings.HOST,
    ]
    # 클라이언트가 붙을 게이트웨이 주소
    env = dict(os.environ, API_BASE=f"http://{settings.HOST}:{settings.PORT}")
    print(f"✅ Streamlit 포트: {st_port}")
    print("🚀 클라이언트 시작:", " ".join(st_cmd))
    processes.append(subprocess.Popen(st_cmd, cwd=str(PROJECT_ROOT), env=env))

    # 메인 프로세스는 대기만 (자식이 끝나면 같이 끝남)
    for p in processes:
        p.wait()


if __name__ == "__main__":
    main()
