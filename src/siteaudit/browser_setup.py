"""
Download the browser binaries Playwright needs for site audits.

Exposed as ``siteaudit install-browser``; run once after installing the
package.
"""
import subprocess
import sys


def install_browser(browser_type: str = "chromium") -> bool:
    """
    Run ``playwright install <browser_type>``.

    Returns:
        True if the browser was installed
    """
    print(f"Running 'playwright install {browser_type}'...")
    try:
        result = subprocess.run(
            [sys.executable, "-m", "playwright", "install", browser_type],
            check=True,
            capture_output=True,
            text=True
        )
    except subprocess.CalledProcessError as e:
        print(f"Error installing {browser_type} browser for Playwright: {e}", file=sys.stderr)
        if e.stderr:
            print(e.stderr, file=sys.stderr)
        print(
            "Please run the following command manually:\n"
            f"  python -m playwright install {browser_type}",
            file=sys.stderr
        )
        return False

    if result.stdout:
        print(result.stdout)
    print(f"{browser_type.capitalize()} browser installed successfully.")
    return True
