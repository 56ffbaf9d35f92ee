"""Constants for period_tracker."""

from logging import Logger, getLogger

LOGGER: Logger = getLogger(__package__)

DOMAIN = "period_tracker"
ATTRIBUTION = "Cycle data calculated locally"

CONF_LAST_PERIOD = "last_period_start"
CONF_CYCLE_LENGTH = "cycle_length"
CONF_ENCRYPT = "encrypt_history"
CONF_ENCRYPTION_KEY = "encryption_key"
CONF_SHOW_FERTILITY_ON_CAL = "show_fertility_on_calendar"
CONF_FORECAST_CYCLES = "forecast_cycles"

DEFAULT_CYCLE_LENGTH = 28
DEFAULT_PERIOD_LENGTH = 5
DEFAULT_FORECAST_CYCLES = 3
MAX_FORECAST_CYCLES = 12

# Fertile window offsets in days from a period start
FERTILE_WINDOW_START = 12
FERTILE_WINDOW_END = 16

# A prediction counts as accurate within this many days
ACCURACY_TOLERANCE_DAYS = 2
MIN_CONFIDENCE = 0.3

# Preference keys
KEY_PERIOD_ENTRIES = "period_entries"
KEY_LAST_PERIOD_START = "last_period_start"
KEY_CYCLE_LENGTH = "cycle_length"
KEY_AVERAGE_CYCLE = "average_cycle"

ENTRY_SEPARATOR = "|"
RANGE_SEPARATOR = "/"
LEGACY_RANGE_SEPARATOR = "-"

CSV_HEADER = "Period Start,Period End,Duration (days)"

STORAGE_VERSION = 1
