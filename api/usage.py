"""Serverless entry point for /api/usage."""

from onelink.app.serverless import create_function_app

app = create_function_app("usage")
