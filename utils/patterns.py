"""Pre-compiled regex patterns for the scorecard tools.

All patterns are compiled once at module import so the per-cell scans in
the extractors don't recompile them for every match/search call.

Usage:
    from utils.patterns import YEAR_20XX, ITEM_NUMBER

    if YEAR_20XX.search(text):
        ...
"""

import re

# Review-period year: four digits constrained to the 2000s
# Matches: "2025" in "March 2025", "jan_2024.xlsm"
YEAR_20XX = re.compile(r'20\d{2}')

# Numbered KEV criteria: "1) Resident rights posted", "12)Falls reviewed"
# Captures the ordinal (group 1) and the remaining text (group 2)
ITEM_NUMBER = re.compile(r'^\s*(\d+)\)\s*(.*)$', re.DOTALL)

# Whitespace normalization: multiple spaces/tabs/newlines
WHITESPACE = re.compile(r'\s+')

# Percent signs and thousands separators stripped during numeric conversion
NUMERIC_NOISE = re.compile(r'[%,\s]')
