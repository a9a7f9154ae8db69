"""OneLink API: CORS-enabled proxy for the OneLink chat and translation features."""
