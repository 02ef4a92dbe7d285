"""Internet connectivity watchdog for AllStarLink gateway nodes."""
