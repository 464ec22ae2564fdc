"""Pure Strava domain logic."""
