import uvicorn

from covid_portal import config
from covid_portal.logging_config import setup_logging


def main() -> None:
    setup_logging()
    uvicorn.run("covid_portal.main:app", host=config.server_host(), port=config.server_port(), log_config=None)


if __name__ == "__main__":
    main()
