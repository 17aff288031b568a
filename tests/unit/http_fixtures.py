"""Fake HTTP responses for client tests"""

from __future__ import annotations

from typing import Any
from unittest.mock import Mock

import requests


def make_response(status: int = 200, body: Any = None) -> Mock:
    """Fake requests.Response with a JSON body (pass an exception to make .json() raise)"""
    response = Mock(spec=requests.Response)
    response.status_code = status
    response.ok = 200 <= status < 300
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body if body is not None else {}
    return response


def make_session(*responses: Mock) -> Mock:
    """requests.Session whose .request returns `responses` in order"""
    session = Mock(spec=requests.Session)
    session.request.side_effect = list(responses)
    return session
