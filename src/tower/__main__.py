# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Allow ``python -m tower``."""

from tower.main import main

if __name__ == "__main__":
    main()
