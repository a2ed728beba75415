#!/usr/bin/env python3
"""
Script to clean up Python caches, SQLite databases and log files
"""

from pathlib import Path
import shutil

PATTERNS = (
    ('__pycache__ directories', '__pycache__'),
    ('.db files', '*.db'),
    ('.pyc files', '*.pyc'),
    ('.log files', '*.log'),
)


def _remove(path):
    if path.is_dir():
        shutil.rmtree(path)
    else:
        path.unlink()


def clear_data(root=None):
    """Recursively delete caches, databases and logs under root (default: cwd)"""
    root = Path(root) if root else Path.cwd()
    print(f"=== Cleaning {root} ===")

    removed = {}
    for step, (label, pattern) in enumerate(PATTERNS, start=1):
        print(f"\n{step}. Removing {label}...")
        count = 0
        for path in root.rglob(pattern):
            if not path.exists():
                continue
            try:
                _remove(path)
                print(f"   Removed: {path}")
                count += 1
            except OSError as e:
                print(f"   Failed to remove {path}: {e}")
        removed[label] = count
        print(f"   Total {label} removed: {count}")

    print("\n=== Cleanup Complete ===")
    for label, count in removed.items():
        print(f"  - {label}: {count}")
    return sum(removed.values())


if __name__ == '__main__':
    clear_data()
