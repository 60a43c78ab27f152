"""
Run Totals
==========
Counters for one run. Only ever incremented while records arrive; read by the
report composer once the run is reported.

Fields:
    count       - executed tests
    assertions  - assertions across all tests
    failures    - failed assertions
    errors      - unexpected exceptions
    skips       - skipped tests
    test_time   - sum of per-test elapsed seconds
    total_time  - wall time of the run, fixed at report time
"""
from dataclasses import dataclass


@dataclass
class RunTotals:
    count: int = 0
    assertions: int = 0
    failures: int = 0
    errors: int = 0
    skips: int = 0
    test_time: float = 0.0
    total_time: float = 0.0
