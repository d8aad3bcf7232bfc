# hifzquiz/utils.py
import sys
import os

# Path handling for both normal script execution and PyInstaller frozen bundles,
# plus small text helpers shared by the quiz engine and the terminal UI.

def get_app_path(resource_path: str = '', writable: bool = False) -> str:
    """
    Get the absolute path to a resource or writable directory.

    Args:
        resource_path: Relative path to a resource/directory.
                       Leave empty for the base directory itself.
        writable:
            If True: Returns a path relative to the EXECUTABLE's directory
                     (download cache, settings next to a frozen build).
                     Ensures the target directory exists.
            If False: Returns a path relative to the application's internal
                      root (sys._MEIPASS when frozen, the project root otherwise).
                      Use this for READ-ONLY bundled datasets.

    Returns:
        Absolute path as a string.
    """
    if getattr(sys, 'frozen', False) and hasattr(sys, '_MEIPASS'):
        base_path = os.path.dirname(sys.executable) if writable else sys._MEIPASS
    else:
        # utils.py lives in hifzquiz/, so the project root is the parent directory
        base_path = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

    full_path = os.path.join(base_path, resource_path) if resource_path else base_path

    if writable and resource_path:
        # A last component with a dot is treated as a file name
        if '.' in os.path.basename(resource_path) and not resource_path.endswith(('/', '\\')):
            target_dir = os.path.dirname(full_path)
        else:
            target_dir = full_path
        if target_dir:
            os.makedirs(target_dir, exist_ok=True)

    return full_path


def ordinal(n: int) -> str:
    """1 -> '1st', 2 -> '2nd', 11 -> '11th', 23 -> '23rd'."""
    if 10 <= n % 100 <= 20:
        suffix = 'th'
    else:
        suffix = {1: 'st', 2: 'nd', 3: 'rd'}.get(n % 10, 'th')
    return f"{n}{suffix}"


def strip_ansi(s: str) -> str:
    """Remove ANSI escape codes for accurate length calculation."""
    import re
    ansi_escape = re.compile(r'\x1B\[[0-?]*[ -/]*[@-~]')
    return ansi_escape.sub('', s)
