"""
Application Package
===================

- config: pydantic-settings configuration
- errors: proxy error taxonomy and exception handlers
- models: request, response and upstream wire models
- proxy: proxy handlers and routes
- main: long-running local server
- serverless: per-function apps for serverless deployment
"""
