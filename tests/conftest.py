"""
Conftest for EduNex AI API tests.

Puts the project root on sys.path and provides helpers for stubbing the
upstream provider APIs with httpx.MockTransport.
"""

import json
import sys
from pathlib import Path
from typing import Callable, Dict, List

import httpx
import pytest

project_root = str(Path(__file__).parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)


class UpstreamStub:
    """
    Routes upstream requests by (method, path) to canned responses and
    records every request it sees.
    """

    def __init__(self):
        self.routes: Dict[tuple, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, response) -> None:
        if isinstance(response, httpx.Response):
            fixed = response
            self.routes[(method, path)] = lambda request: fixed
        else:
            self.routes[(method, path)] = response

    def json(self, method: str, path: str, status: int, payload) -> None:
        self.add(method, path, httpx.Response(status, content=json.dumps(payload).encode()))

    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, content=b'{"error": {"message": "no stub"}}')
        return route(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def upstream():
    return UpstreamStub()


def listed(name: str, *methods: str) -> dict:
    return {"name": name, "supportedGenerationMethods": list(methods)}


def gemini_answer(*texts: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": t} for t in texts]}}]}


def groq_answer(text: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}
