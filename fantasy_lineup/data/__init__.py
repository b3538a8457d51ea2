"""Data models shared by the API client and the analysis layer."""
