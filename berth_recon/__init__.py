"""
PRS/MDMS berth reconciliation.

Compares the PRS berth relation with the MDMS coach layout relation and
reports mismatched berth types, missing berths and duplicated rows.
"""

__version__ = "1.0.0"
