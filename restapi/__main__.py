import uvicorn

from restapi.config import settings


def main() -> None:
    uvicorn.run("restapi.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
