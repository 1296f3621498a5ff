"""Allow ``python -m formwright``."""

from formwright.cli import main

if __name__ == "__main__":
    main()
