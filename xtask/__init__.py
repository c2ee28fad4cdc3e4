__version__ = "0.1.0"

CRATE_PREFIX = "hematite_"
"Prefix which turns a short crate name into its cargo package name"

CARGO_KEY = "CARGO"
"ClickContext.obj[CARGO_KEY] contains the cargo executable to invoke"
