"""Serverless entry point for /api/translate."""

from onelink.app.serverless import create_function_app

app = create_function_app("translate")
