"""Yahoo Fantasy Sports data source."""
