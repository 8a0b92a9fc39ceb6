import sys


def main():
    print("Starting Brand Style Quiz...")

    try:
        import uvicorn
        from stylequiz.config import settings
        from stylequiz.main import app

        print(f"Server: http://{settings.HOST}:{settings.PORT}")
        print(f"API Docs: http://{settings.HOST}:{settings.PORT}/docs")

        uvicorn.run(
            app,
            host=settings.HOST,
            port=settings.PORT,
            reload=False,
            log_level=settings.LOG_LEVEL.lower()
        )

    except ImportError as e:
        print(f"Import error: {e}")
        print("Make sure you've installed the package: pip install -e .")
        sys.exit(1)


if __name__ == "__main__":
    main()
