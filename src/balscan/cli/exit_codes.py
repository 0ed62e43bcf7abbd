"""Process exit codes of the balscan CLI.

Every failing stage has its own code; success is only returned when every
stage of the command succeeded.
"""

EXIT_SUCCESS = 0
EXIT_SCAN_ERROR = 2
EXIT_INVALID_USAGE = 3
EXIT_CONFIG_ERROR = 4
EXIT_REPORT_ERROR = 5
