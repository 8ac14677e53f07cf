#!/usr/bin/env python3
"""
PRS/MDMS Berth Reconciliation Tool

Thin wrapper around ``berth_recon.cli`` for running from a checkout
without installing the package.

Usage:
    ./scripts/reconcile.py discrepancies --prs-file prs.json --mdms-file mdms.json
    ./scripts/reconcile.py duplicates --origin WITHIN_PRS
    ./scripts/reconcile.py alerts --output alerts.yml
"""

import sys
from pathlib import Path

# Add the checkout root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from berth_recon.cli import main


if __name__ == "__main__":
    sys.exit(main())
