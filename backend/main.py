"""
Main FastAPI application entry point

    uvicorn main:app --reload        (from the backend/ directory)
    python main.py
"""
from contactbook.core.config import get_settings
from contactbook.main import create_app

app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.app_env == "development",
    )
