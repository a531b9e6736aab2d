"""Allow running as `python -m folder_dedup`."""

from .cli import main

if __name__ == "__main__":
    main()
