"""Allow running as python -m csvtranslator."""

from csvtranslator.cli import app


def main() -> None:
    app()


main()
