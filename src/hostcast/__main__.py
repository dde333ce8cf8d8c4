"""Allow ``python -m hostcast``."""

from hostcast.cli import main

if __name__ == "__main__":
    main()
