"""Allow running as ``python -m versionize``."""

from versionize.cli.app import main

if __name__ == "__main__":
    main()
