"""
Utility functions module.

Time Semantics:
- All scheduling decisions use UTC wall-clock time read through a Clock
- The next cycle starts exactly one period after the previous cycle started
- Countdown strings are rendered as HH:MM:SS
"""
