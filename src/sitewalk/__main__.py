"""
Entry point for ``python -m sitewalk https://example.com 5``.
"""
from sitewalk.cli import main

if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
