"""brewdesk - Homebrew front end with multi-strategy install detection."""
