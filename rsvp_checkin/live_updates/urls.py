LIVE_UPDATES_URL = "/ws/live-updates"
