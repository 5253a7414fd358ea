"""
Core constants and limits.

Defines ledger-wide constants and resource limits to prevent abuse
and keep derived figures consistent.
"""

import re

# Taxation
TAX_RATE = 0.26  # 26% on positive gains only, no loss carry-forward

# Holding Limits
MAX_HOLDINGS_PER_PORTFOLIO = 500  # Maximum number of live holdings per user
MAX_HISTORY_ENTRIES = 5000  # Maximum revaluation entries kept on one holding
MIN_NAME_LENGTH = 2  # Minimum holding name length after trimming

# Derived Entry Limits
MAX_PERFORMANCE_PERCENT = 1000.0  # |performance| accepted when deriving cost basis

# Divestments
DEFAULT_DIVESTMENT_REASON = "unspecified"

# Snapshot Format
SNAPSHOT_VERSION = "1.0.0"
MAX_USER_ID_LENGTH = 128
# User ids double as snapshot file stems
SAFE_USER_ID = re.compile(rf"[A-Za-z0-9_-]{{1,{MAX_USER_ID_LENGTH}}}")

# Registry Limits
MAX_OPEN_PORTFOLIOS = 1024  # Idle per-user services kept in memory before eviction
