"""
Post-install helper for browser dependencies.

Style extraction needs a real Chromium build; this downloads the one
Playwright is pinned to. Run it once after installing the package:

    stylescope-install-browser
"""
import subprocess
import sys


def install_browser() -> int:
    """
    Run `playwright install chromium`.

    Returns:
        Process exit code (0 on success)
    """
    print("Running 'playwright install chromium'...")
    try:
        result = subprocess.run(
            [sys.executable, "-m", "playwright", "install", "chromium"],
            check=True,
            capture_output=True,
            text=True
        )
    except subprocess.CalledProcessError as e:
        print(f"Error installing Chromium browser for Playwright: {e}", file=sys.stderr)
        if e.stderr:
            print(e.stderr, file=sys.stderr)
        print(
            "Please run the following command manually:\n"
            "  python -m playwright install chromium",
            file=sys.stderr
        )
        return e.returncode or 1
    except FileNotFoundError as e:
        print(f"Error: Could not find Python executable: {e}", file=sys.stderr)
        return 1

    if result.stdout:
        print(result.stdout)
    print("Chromium browser installed successfully.")
    return 0


if __name__ == "__main__":
    sys.exit(install_browser())
