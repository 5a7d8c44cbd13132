import os

from budgetcycle.cli import run
from budgetcycle.config import configure_logging


def main():
    configure_logging()
    run(os.getenv("USER"))


if __name__ == "__main__":
    main()
