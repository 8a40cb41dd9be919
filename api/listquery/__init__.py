"""List Query API: one list engine behind every entity's list-page-data endpoint."""
