"""
Business Banking Backend — Uvicorn Launcher
Starts the API with the settings resolved from the environment / .env and
prints where this instance keeps its data.

Usage:
    python run.py
    python run.py --port 8000
    python run.py --reload
"""
import argparse
import uvicorn

from neobank.config import Settings, get_settings


def banner(settings: Settings, host: str, port: int) -> str:
    auto_validate = "on" if settings.DEMO_AUTO_VALIDATE else "off"
    return f"""
    ========================================================
      {settings.APP_NAME} v{settings.APP_VERSION}
      API:        http://{host}:{port}
      Docs:       http://localhost:{port}/docs
      Database:   {settings.DATABASE_URL}
      Documents:  {settings.STORAGE_DIR} (served at {settings.STORAGE_PUBLIC_URL})
      Drafts:     {settings.DRAFT_DIR}
      Demo org:   {settings.DEMO_ORG_NAME} ({settings.DEMO_ORG_ID})
      Auto-validate uploads: {auto_validate}
    ========================================================
    """


def main():
    settings = get_settings()
    parser = argparse.ArgumentParser(description=f"{settings.APP_NAME} server")
    parser.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Enable hot reload for development")
    parser.add_argument("--workers", type=int, default=1, help="Number of workers (default: 1)")

    args = parser.parse_args()
    print(banner(settings, args.host, args.port))

    uvicorn.run(
        "neobank.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        workers=args.workers,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
