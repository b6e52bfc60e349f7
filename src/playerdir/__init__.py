"""Player directory: player records with unique emails and match history."""
