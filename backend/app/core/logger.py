"""
로거(Logger) 모듈

- 스크랩 실패, 외부 API 실패처럼 "삼켜지는" 에러도 여기로는 꼭 남긴다.
- 모든 모듈은 print() 대신 get_logger(__name__)을 쓴다.
"""

import logging


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger  # 이미 설정되어 있으면 중복 설정 방지

    logger.setLevel(logging.INFO)

    handler = logging.StreamHandler()
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger
