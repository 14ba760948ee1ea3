"""
Vercel serverless function entrypoint.

Vercel's Python runtime looks for an ASGI `app` variable in this file. On
Vercel, VERCEL_URL is set automatically and becomes the public base URL for
tool callbacks unless SERVER_BASE_URL overrides it.
"""
from __future__ import annotations

import os
import sys

# The project is not pip-installed on Vercel; expose src/ directly
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
src_path = os.path.join(project_root, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from callbridge.api.app import app

__all__ = ["app"]
