"""Test harness configuration."""

import os

# Rich wraps console output at the detected terminal width (80 without a TTY),
# which splits long tmp paths and messages across lines in CLI output checks.
os.environ.setdefault("COLUMNS", "1000")
