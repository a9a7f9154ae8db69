"""Serverless entry point for /api/chat."""

from onelink.app.serverless import create_function_app

app = create_function_app("chat")
