"""Resources of the application model."""
