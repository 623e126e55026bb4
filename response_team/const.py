VERSION = "0.1.0"

# Base URLs (overridable through config)
API_BASE_URL = "http://localhost:5000"
DIRECTIONS_BASE_URL = "https://us1.locationiq.com/v1"
POSITION_URL = "http://localhost:5000/api/geolocation"

# Endpoint paths below API_BASE_URL
UPDATE_LOCATION_PATH = "/api/updateLocation"
CONFIRMED_REPORTS_PATH = "/api/confirmedReports"
NOTIFICATIONS_PATH = "/api/notifications/"

# Directions
DIRECTIONS_PROFILE = "driving"
POLYLINE_PRECISION = 5

# Update interval (seconds) for the position + reports refresh
POLL_INTERVAL = 10

# Upper bounds (seconds) on a single position fix / directions lookup
POSITION_TIMEOUT = 15
DIRECTIONS_TIMEOUT = 15

# Shared HTTP helper
REQUEST_TIMEOUT = 5     # seconds, multiplied by attempt number for each retry
REQUEST_ATTEMPTS = 3    # maximum number of retry attempts

# Media attached to a report is shown inline when it has one of these suffixes
IMAGE_SUFFIXES = (".jpg", ".png")
