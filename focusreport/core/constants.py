"""
Constants
Centralised storage for report section sizes and fixed report strings.
"""
# Section sizes for the problem-area views
PROBLEM_TESTS_LIMIT = 3
PROBLEM_CODE_LIMIT = 3
SKIPPED_FILES_LIMIT = 5

NOT_AVAILABLE = "n/a"

PROBLEM_TESTS_HEADER = "Problematic Tests:"
PROBLEM_CODE_HEADER = "Problematic Lines of Code:"
SKIPPED_HEADER = "Skipped Tests:"
