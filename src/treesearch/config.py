# src/treesearch/config.py

DEFAULT_PATHS = (".",)
DEFAULT_RECURSIVE = False
DEFAULT_FILTER = ""
DEFAULT_FILENAMES_ONLY = False
DEFAULT_IGNORE_CASE = False
DEFAULT_QUIET = False
DEFAULT_VERBOSE = False
DEFAULT_SKIP_BINARY = True
DEFAULT_COLOR = True
DEFAULT_ABSOLUTE_PATHS = False
DEFAULT_PREFETCH = True

# Max number of discovered entries buffered between the discovery thread and the matcher
DEFAULT_BUFFER_SIZE = 256

IGNORE_CASE_FLAG = "(?i)"
NUL = "\0"

SYMLINK_LOOP_MESSAGE = "symlink loop detected"

# ANSI escape sequences (SGR parameters)
ANSI_RESET = "\033[0m"
ANSI_ERROR = "\033[91m"
ANSI_MATCH = "\033[92;4m"

HELP_RECURSIVE = "Search in subdirectories"
HELP_FILTER = (
    "Search only in files whose names match the given regex. "
    "All directories are still followed in recursive mode."
)
HELP_FILENAMES_ONLY = "Search for file and directory names instead of file contents"
HELP_IGNORE_CASE = "Turn off case sensitivity"
HELP_QUIET = "Print only the matches"
HELP_VERBOSE = "Print what files and directories are being skipped"
HELP_NO_SKIP = "Search all files. Normally, binary files are skipped (ie those with nullbytes)."
HELP_NO_COLOR = "Disable ANSI coloring in the output"
HELP_ABSOLUTE = "Print absolute paths"
HELP_EXCLUDE = "Skip entries matching this gitignore-style pattern (repeatable). Excluded directories are not followed."
HELP_EXCLUDE_FROM = "Read exclude patterns from a file in .gitignore syntax"
HELP_NO_PREFETCH = "Discover files on the main thread instead of a background thread"
HELP_DEBUG = "Write debug logs to stderr"

MSG_QUIET_AND_VERBOSE = "The quiet and verbose modes are mutually exclusive."
MSG_FILTER_WITH_NAMES = "Using the filter while searching for filenames is redundant."
MSG_INTERRUPTED = "Interrupted by user."
