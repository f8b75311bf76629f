"""
Configuration defaults and resource limits.
"""

# Maximum config file size (10MB)
MAX_CONFIG_SIZE_BYTES = 10 * 1024 * 1024

DEFAULT_CONFIG_FILENAME = "compipe.yaml"

# Names the config file; excluded from value overrides
CONFIG_ENV_VAR = "COMPIPE_CONFIG"
ENV_PREFIX = "COMPIPE_"

DEFAULT_COMMAND = ("cargo", "run", "--quiet")

# Written by the compiler into its working directory on success
DEFAULT_ARTIFACT = "output.wat"
