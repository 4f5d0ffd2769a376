# podtimeline/__main__.py
import sys
from .cli import app


def cli(argv=None):
    """
    Launcher so you can run:
      - python3 -m podtimeline serve
      - python3 -m podtimeline refresh --mode upsert
    """
    return app(args=argv, prog_name="podtimeline")


if __name__ == "__main__":
    sys.exit(cli())
