"""PyInstaller entry point for the cliscore binary."""

import sys
from pathlib import Path


def main() -> None:
    # Ensure the src directory is on the path when run from a checkout
    src_dir = Path(__file__).resolve().parent / "src"
    if src_dir.exists() and str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))

    from cliscore.cli import main as cli_main

    cli_main(sys.argv[1:])


if __name__ == "__main__":
    main()
