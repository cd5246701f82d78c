"""Cross-platform build script producing a single-file cliscore binary.

Supports:
  - macOS (arm64 / x86_64)
  - Linux (x86_64 / aarch64)
  - Windows 10 / 11
"""

from __future__ import annotations

import platform
import shutil
import subprocess
import sys
from pathlib import Path

APP_NAME = "cliscore"


def _ensure_dependencies() -> None:
    """Install build & runtime dependencies if missing."""
    deps = ["requests", "keyring", "pyinstaller"]
    for dep in deps:
        try:
            __import__(dep if dep != "pyinstaller" else "PyInstaller")
        except ImportError:
            print(f"Installing {dep} ...")
            subprocess.check_call(
                [sys.executable, "-m", "pip", "install", dep],
                stdout=subprocess.DEVNULL,
            )


def main() -> None:
    project_root = Path(__file__).resolve().parent
    entry_point = project_root / "run.py"

    os_name = platform.system()    # Darwin / Windows / Linux
    arch = platform.machine()      # arm64 / x86_64 / AMD64
    print(f"=== {APP_NAME} build ===")
    print(f"OS:       {os_name}")
    print(f"Arch:     {arch}")
    print(f"Python:   {sys.version}")
    print()

    _ensure_dependencies()

    for d in ("build", "dist"):
        target = project_root / d
        if target.exists():
            print(f"Cleaning {target} ...")
            shutil.rmtree(target)

    cmd = [
        sys.executable,
        "-m",
        "PyInstaller",
        str(entry_point),
        "--onefile",
        "--name",
        APP_NAME,
        "--paths",
        str(project_root / "src"),
        # keyring picks its backend at runtime; bundle the platform ones
        "--collect-submodules",
        "keyring.backends",
        "--clean",
        "--noconfirm",
    ]

    print(f"Running: {' '.join(cmd)}")
    print()

    result = subprocess.run(cmd, cwd=str(project_root))

    if result.returncode != 0:
        print()
        print("=== Build FAILED ===")
        sys.exit(result.returncode)

    exe_name = f"{APP_NAME}.exe" if os_name == "Windows" else APP_NAME
    exe_path = project_root / "dist" / exe_name
    size_mb = exe_path.stat().st_size / (1024 * 1024)

    print()
    print("=== Build successful! ===")
    print(f"Binary:   {exe_path}")
    print(f"Size:     {size_mb:.0f} MB")
    print()
    print(f"Run:  {exe_path} --help")


if __name__ == "__main__":
    main()
