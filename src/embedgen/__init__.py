"""embedgen — embed file bytes into generated source, in place.

A build hook that runs twice per insertion point. Encode calls render an
input file as a byte-array declaration and record where it belongs; the
terminating call splices every recorded fragment into the host source file,
replacing whatever an earlier run generated there.

State between invocations lives in a ledger file in the working directory:

    12 embedgen-0.code
    40 embedgen-1.code
    57 end

Anything outside the recorded regions is preserved untouched.
"""

__version__ = "0.3.0"

# Ledger token marking the final entry for a host file
SENTINEL = "end"

DEFAULT_LEDGER_NAME = "embedgen.lines"
DEFAULT_FRAGMENT_PATTERN = "embedgen-{index}.code"
DEFAULT_CONFIG_NAME = "embedgen.yaml"
TEMP_PREFIX = ".embedgen-"

# Environment inputs set by the build driver for each directive
DEFAULT_FILE_ENV = "GOFILE"
DEFAULT_LINE_ENV = "GOLINE"
