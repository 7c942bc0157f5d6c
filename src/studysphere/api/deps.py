"""Зависимости FastAPI: настройки и клиент upstream создаются на каждый запрос."""
from typing import Iterator

from fastapi import Depends

from studysphere.settings import Settings
from studysphere.upstream.rag_client import RagClient


def get_settings() -> Settings:
    return Settings()


def get_rag_client(settings: Settings = Depends(get_settings)) -> Iterator[RagClient]:
    client = RagClient(settings)
    try:
        yield client
    finally:
        client.close()
