def main() -> None:
    """Run development server against the in-memory store."""
    import os

    import uvicorn

    os.environ.setdefault("STORE_BACKEND", "memory")
    uvicorn.run(
        "transit_fraud.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8080,
        reload=True,
        log_level="info",
    )
