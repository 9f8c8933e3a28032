import uvicorn

from claimledger.core.config import settings


def main() -> None:
    uvicorn.run("claimledger.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
