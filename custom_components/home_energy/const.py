"""Constants for the Home Energy integration."""

DOMAIN = "home_energy"

# Integration metadata
INTEGRATION_NAME = "Home Energy"
INTEGRATION_VERSION = "1.0.0"

# Update intervals
TICK_INTERVAL_SECONDS = 2  # wall clock between simulated steps
SIMULATED_STEP_SECONDS = 60  # simulated clock advance per tick

# Live feed
LIVE_FEED_HEARTBEAT_SECONDS = 30

# Configuration keys
CONF_USE_SIMULATION = "use_simulation"
CONF_LIVE_FEED_URL = "live_feed_url"

DEFAULT_USE_SIMULATION = True
DEFAULT_LIVE_FEED_URL = "wss://example.home/energy"
LIVE_FEED_SCHEMES = ("ws://", "wss://", "http://", "https://")

# Services
SERVICE_EXPORT_SERIES = "export_series"
EXPORT_FORMAT_JSON = "json"
EXPORT_FORMAT_TABLE = "table"

# Entity names and IDs
ENTITY_ENERGY_FLOW = "energy_flow"
ENTITY_LIVE_FEED = "live_feed"
ENTITY_SELF_TEST = "self_test"

# Attributes
ATTR_FLOWS = "flows"
ATTR_MODE = "mode"
ATTR_LAST_UPDATE = "last_update"
ATTR_RESULTS = "results"
ATTR_LIVE_FEED_URL = "url"
