import sys

from omeq.runner.runner import OmeqRunner


def main():
    runner = OmeqRunner()
    sys.exit(runner.run())


if __name__ == "__main__":
    main()
