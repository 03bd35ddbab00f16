"""Entry point for running as python -m glassphoto."""

from glassphoto.cli import main

if __name__ == "__main__":
    main()
