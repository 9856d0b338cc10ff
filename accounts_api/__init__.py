"""Account authentication and profile-management service."""
