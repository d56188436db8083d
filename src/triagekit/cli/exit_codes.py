"""Process exit codes for the triagekit CLI."""

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_INVALID_ARGS = 2
EXIT_COLLECTOR_NOT_FOUND = 3
EXIT_PERMISSION_DENIED = 5
