import uvicorn

from topup import config


def main():
    uvicorn.run("topup.main:app", host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    main()
