"""
Pre-flight check of the deployment environment file.

Usage:
    samit-env-check [--env-file PATH]
    python -m samit.env_check

Exits 1 when SITE_URL or SITE_ANON_KEY is missing, still a placeholder,
or SITE_URL is not an http(s) URL.
"""
import argparse
import sys
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import dotenv_values

REQUIRED_VARS = ("SITE_URL", "SITE_ANON_KEY")
PLACEHOLDER_MARKERS = ("your-", "xxxxx", "changeme")


def check_values(values: Dict[str, Optional[str]]) -> List[str]:
    """Problems found in ``values``; empty when everything is usable."""
    problems = []
    for name in REQUIRED_VARS:
        value = (values.get(name) or "").strip()
        if not value:
            problems.append(f"{name} is not set")
        elif any(marker in value.lower() for marker in PLACEHOLDER_MARKERS):
            problems.append(f"{name} still holds a placeholder value")
        elif name == "SITE_URL" and not value.startswith("http"):
            problems.append(f"{name} must start with http:// or https://")
    return problems


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Check the portal environment file before deploying.")
    parser.add_argument("--env-file", default=".env", help="Path to the env file (default: .env)")
    args = parser.parse_args(argv)
    
    env_path = Path(args.env_file)
    if not env_path.is_file():
        print(f"❌ {env_path} not found")
        return 1
    
    problems = check_values(dotenv_values(env_path))
    if problems:
        for problem in problems:
            print(f"❌ {problem}")
        print(f"\nFix {env_path} and run the check again.")
        return 1
    
    print(f"✅ {env_path} looks good")
    return 0


if __name__ == "__main__":
    sys.exit(main())
